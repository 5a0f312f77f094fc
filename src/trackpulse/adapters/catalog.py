"""Plumbing shared by the catalog adapters (Spotify, Apple Music, YouTube)."""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable, Mapping
from http import HTTPStatus
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar

import httpx
from pydantic import BaseModel, ValidationError

from trackpulse.adapters.http_resilience import ResilientClient, default_client_factory
from trackpulse.domain.model import Disabled, FailureKind, LookupFailed, NotFound

if TYPE_CHECKING:
    from trackpulse.config.http_resilience import ResilienceConfig
    from trackpulse.domain.model import LookupOutcome, Provider

log = getLogger(__name__)

ClientFactory = Callable[["ResilienceConfig"], ResilientClient]


class UpstreamOutcome(Exception):  # noqa: N818
    """Carries a terminal lookup outcome out of nested request helpers."""

    def __init__(self, outcome: NotFound | LookupFailed) -> None:
        super().__init__(getattr(outcome, "message", outcome.status))
        self.outcome = outcome


def describe_shape(payload: object, *, depth: int = 2) -> str:
    """Summarise a JSON payload's structure without its values."""

    if isinstance(payload, Mapping):
        if depth <= 0:
            return "{...}"
        inner = ", ".join(
            f"{key}: {describe_shape(value, depth=depth - 1)}"
            for key, value in sorted(payload.items(), key=lambda item: str(item[0]))
        )
        return "{" + inner + "}"
    if isinstance(payload, list):
        return f"list[{len(payload)}]"
    return type(payload).__name__


def decode[TModel: BaseModel](
    model: type[TModel],
    payload: object,
    *,
    provider: Provider,
    reference: str,
) -> TModel:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        log.warning(
            "Malformed %s response for %s (shape %s): %s",
            provider,
            reference,
            describe_shape(payload),
            exc.error_count(),
        )
        raise UpstreamOutcome(
            LookupFailed(
                provider=provider,
                kind=FailureKind.MALFORMED,
                message=f"unexpected {model.__name__} payload",
            )
        ) from exc


def check_response(response: httpx.Response, *, provider: Provider, reference: str) -> None:
    """Raise ``UpstreamOutcome`` unless the response is a 2xx."""

    if response.is_success:
        return
    status = response.status_code
    if status == HTTPStatus.NOT_FOUND:
        raise UpstreamOutcome(NotFound(provider=provider, reference=reference))
    kind = FailureKind.AUTH if status == HTTPStatus.UNAUTHORIZED else FailureKind.HTTP
    log.warning("%s responded HTTP %s for %s", provider, status, reference)
    raise UpstreamOutcome(
        LookupFailed(
            provider=provider,
            kind=kind,
            message=f"HTTP {status} from {response.request.url.host}",
            status_code=status,
        )
    )


class ClientPool:
    """Lazily created, shared ``ResilientClient`` instances keyed by resilience name."""

    def __init__(self, factory: ClientFactory | None = None) -> None:
        self._factory = factory or default_client_factory
        self._clients: dict[str, ResilientClient] = {}

    def get(self, resilience: ResilienceConfig) -> ResilientClient:
        client = self._clients.get(resilience.name)
        if client is None:
            client = self._factory(resilience)
            self._clients[resilience.name] = client
        return client

    async def aclose(self) -> None:
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.aclose()


class CatalogAdapter:
    """Base for adapters: turns request helpers into lookup outcomes."""

    provider: ClassVar[Provider]

    def _disabled(self, reason: str = "credentials not configured") -> Disabled:
        log.debug("%s lookup skipped: %s", self.provider, reason)
        return Disabled(provider=self.provider, reason=reason)

    async def _guarded(
        self,
        operation: Awaitable[LookupOutcome],
        *,
        reference: str,
    ) -> LookupOutcome:
        try:
            return await operation
        except UpstreamOutcome as exc:
            return exc.outcome
        except httpx.TimeoutException as exc:
            log.warning("%s request timed out for %s: %s", self.provider, reference, exc)
            return LookupFailed(
                provider=self.provider, kind=FailureKind.TIMEOUT, message=str(exc) or "timeout"
            )
        except httpx.HTTPError as exc:
            log.warning("%s request failed for %s: %s", self.provider, reference, exc)
            return LookupFailed(
                provider=self.provider,
                kind=FailureKind.TRANSPORT,
                message=str(exc) or type(exc).__name__,
            )
        except json.JSONDecodeError as exc:
            log.warning("%s returned a non-JSON body for %s", self.provider, reference)
            return LookupFailed(
                provider=self.provider, kind=FailureKind.MALFORMED, message=str(exc)
            )
