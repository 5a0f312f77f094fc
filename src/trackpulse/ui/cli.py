from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from trackpulse.app import TrackingService, serve
from trackpulse.config import configure_logging
from trackpulse.domain.model import Provider
from trackpulse.domain.tracking import DEFAULT_WINDOW_DAYS, MAX_WINDOW_DAYS

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

_PROVIDERS = [provider.value for provider in Provider]


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Track releases across streaming platforms")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: %(default)s)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("run", help="Reconcile every eligible track once")
    subparsers.add_parser("serve", help="Run the periodic tracking scheduler")

    lookup = subparsers.add_parser("lookup", help="Look up one ISRC on one provider")
    lookup.add_argument("provider", choices=_PROVIDERS)
    lookup.add_argument("isrc", type=str)

    lookup_all = subparsers.add_parser("lookup-all", help="Look up one ISRC on every provider")
    lookup_all.add_argument("isrc", type=str)

    set_ids = subparsers.add_parser("set-ids", help="Manually set platform ids on a track")
    set_ids.add_argument("track_id", type=str)
    set_ids.add_argument("--spotify-id", type=str, help="Spotify track id (blank clears)")
    set_ids.add_argument("--apple-id", type=str, help="Apple Music song id (blank clears)")
    set_ids.add_argument(
        "--youtube-id",
        type=str,
        help="YouTube video id or URL (blank clears)",
    )
    set_ids.add_argument("--mlc-work-id", type=str, help="MLC work id")

    refresh = subparsers.add_parser("refresh", help="Refresh a provider by the linked id")
    refresh.add_argument("track_id", type=str)
    refresh.add_argument("provider", choices=_PROVIDERS)

    stats = subparsers.add_parser("stats", help="Show daily stats for a track")
    stats.add_argument("track_id", type=str)
    stats.add_argument(
        "--days",
        type=int,
        default=DEFAULT_WINDOW_DAYS,
        help=f"Window in days, 1-{MAX_WINDOW_DAYS} (default: %(default)s)",
    )

    summary = subparsers.add_parser("summary", help="Show linking and counter totals")
    summary.add_argument("--creator-id", type=str, help="Restrict to one creator")

    track = subparsers.add_parser("track", help="Track management commands")
    track_sub = track.add_subparsers(dest="track_command", required=True)
    track_add = track_sub.add_parser("add", help="Register or update a track")
    track_add.add_argument("track_id", type=str)
    track_add.add_argument("--title", type=str, required=True)
    track_add.add_argument("--artist", type=str, required=True)
    track_add.add_argument("--isrc", type=str, help="ISRC (case-insensitive)")
    track_add.add_argument("--creator-id", type=str, default="")

    args = parser.parse_args(list(argv))
    level = logging.getLevelNamesMapping().get(args.log_level.upper())
    if level is None:
        raise ValueError(f"Unknown log level: {args.log_level}")
    args.log_level = level
    if args.command == "stats" and not 1 <= args.days <= MAX_WINDOW_DAYS:
        raise ValueError(f"--days must be between 1 and {MAX_WINDOW_DAYS}")
    return args


def _emit(payload: object) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, default=str) + "\n")


def _dispatch(service: TrackingService, args: argparse.Namespace) -> None:
    if args.command == "run":
        report = service.run_once()
        _emit(report.as_dict() if report else {"skipped": "run already in progress"})
    elif args.command == "lookup":
        _emit(service.lookup_one(Provider(args.provider), args.isrc).as_dict())
    elif args.command == "lookup-all":
        responses = service.lookup_all(args.isrc)
        _emit({provider.value: response.as_dict() for provider, response in responses.items()})
    elif args.command == "set-ids":
        registry = service.set_ids(
            args.track_id,
            spotify_id=args.spotify_id,
            apple_id=args.apple_id,
            youtube_id=args.youtube_id,
            mlc_work_id=args.mlc_work_id,
        )
        _emit(
            {
                "track_id": registry.track_id,
                "spotify": registry.spotify.id,
                "apple": registry.apple.id,
                "youtube": registry.youtube.id,
                "mlc_work_id": registry.mlc_work_id,
            }
        )
    elif args.command == "refresh":
        _emit(service.refresh_by_id(args.track_id, Provider(args.provider)).as_dict())
    elif args.command == "stats":
        rows = service.stats(args.track_id, args.days)
        _emit(
            [
                {
                    "date": row.date.date().isoformat(),
                    "spotify": asdict(row.spotify),
                    "apple": asdict(row.apple),
                    "youtube": asdict(row.youtube),
                }
                for row in rows
            ]
        )
    elif args.command == "summary":
        _emit(service.summary(args.creator_id).as_dict())
    elif args.command == "track" and args.track_command == "add":
        track = service.register_track(
            args.track_id,
            title=args.title,
            artist=args.artist,
            isrc=args.isrc,
            creator_id=args.creator_id,
        )
        log.info("Registered track %s (eligible=%s)", track.id, track.is_eligible)
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None, *, handle_sigint: bool = False) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)
    configure_logging(level=parsed_args.log_level)
    # serve installs its own handlers so a shutdown stops between tracks
    if handle_sigint and parsed_args.command != "serve":
        signal(SIGINT, sigint_handler)

    try:
        if parsed_args.command == "serve":
            serve()
            return
        with TrackingService.from_settings() as service:
            _dispatch(service, parsed_args)
    except (ValueError, LookupError):
        log.exception("Invalid input")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    main(handle_sigint=True)


if __name__ == "__main__":
    run()
