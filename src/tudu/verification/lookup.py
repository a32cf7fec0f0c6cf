"""
tudu — concurrent tracking-ID verification

File: src/tudu/verification/lookup.py

Purpose
- Check every tracked TODO against its issue provider and attach the outcome.

Functional requirements
- Route each item to its ``provider=<name>`` attribute, else the default
  provider, else the only configured provider.
- One remote lookup per distinct ``(provider, identifier)`` pair.
- Lookups run concurrently under a semaphore; each is bounded by a timeout.
- A failure for one identifier never aborts the others.
- Output order equals input order regardless of completion order.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum

import structlog

from tudu.constants import DEFAULT_MAX_CONCURRENCY, DEFAULT_TIMEOUT_SECONDS
from tudu.domain.models import JSONValue, TodoItem
from tudu.providers.base import IssueProviderProtocol, ProviderError, ProviderTransportError

_logger = structlog.get_logger(__name__)

PROVIDER_ATTRIBUTE = "provider"


class CheckStatus(StrEnum):
    FOUND = "found"
    MISSING = "missing"
    ERROR = "error"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class IssueCheck:
    """Outcome of verifying one tracking ID."""

    identifier: str
    status: CheckStatus
    provider: str | None = None
    error_code: str | None = None
    detail: str | None = None

    @property
    def is_problem(self) -> bool:
        return self.status in (CheckStatus.MISSING, CheckStatus.ERROR)

    def to_dict(self) -> dict[str, JSONValue]:
        payload: dict[str, JSONValue] = {
            "id": self.identifier,
            "status": self.status.value,
            "provider": self.provider,
        }
        if self.error_code is not None:
            payload["error_code"] = self.error_code
        if self.detail is not None:
            payload["detail"] = self.detail
        return payload


@dataclass(frozen=True, slots=True)
class VerifiedTodo:
    item: TodoItem
    check: IssueCheck | None = None


def resolve_provider_name(
    item: TodoItem,
    *,
    default_provider: str | None,
    configured: Iterable[str],
) -> str | None:
    """Pick the provider name responsible for ``item``; ``None`` when none applies."""

    explicit = item.attribute_text(PROVIDER_ATTRIBUTE)
    if explicit:
        return explicit
    if default_provider:
        return default_provider
    names = sorted(set(configured))
    if len(names) == 1:
        return names[0]
    return None


async def verify_todos(
    items: Iterable[TodoItem],
    providers: Mapping[str, IssueProviderProtocol],
    *,
    default_provider: str | None = None,
    construction_errors: Mapping[str, ProviderError] | None = None,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> tuple[VerifiedTodo, ...]:
    if max_concurrency <= 0:
        raise ValueError("max_concurrency must be > 0")
    if timeout_seconds <= 0:
        raise ValueError("timeout_seconds must be > 0")

    failed = dict(construction_errors or {})
    configured = set(providers) | set(failed)
    ordered = list(items)

    routes: list[tuple[str, str] | IssueCheck | None] = []
    pending: dict[tuple[str, str], IssueProviderProtocol] = {}
    for item in ordered:
        identifier = item.tracking_id
        if identifier is None:
            routes.append(None)
            continue
        name = resolve_provider_name(
            item, default_provider=default_provider, configured=configured
        )
        if name is None:
            routes.append(
                IssueCheck(
                    identifier=identifier,
                    status=CheckStatus.SKIPPED,
                    detail="no provider selected; set default_provider or a provider attribute",
                )
            )
        elif name in failed:
            routes.append(
                IssueCheck(
                    identifier=identifier,
                    status=CheckStatus.SKIPPED,
                    provider=name,
                    error_code=failed[name].code,
                    detail=failed[name].detail,
                )
            )
        elif name not in providers:
            routes.append(
                IssueCheck(
                    identifier=identifier,
                    status=CheckStatus.SKIPPED,
                    provider=name,
                    detail=f"provider {name!r} is not configured",
                )
            )
        else:
            key = (name, identifier)
            pending.setdefault(key, providers[name])
            routes.append(key)

    semaphore = asyncio.Semaphore(max_concurrency)

    async def check_one(key: tuple[str, str], provider: IssueProviderProtocol) -> IssueCheck:
        name, identifier = key
        async with semaphore:
            try:
                try:
                    exists = await asyncio.wait_for(
                        provider.issue_exists(identifier), timeout=timeout_seconds
                    )
                except TimeoutError as exc:
                    raise ProviderTransportError(
                        f"lookup timed out after {timeout_seconds} seconds",
                        provider=name,
                        identifier=identifier,
                    ) from exc
            except ProviderError as exc:
                _logger.warning(
                    "provider_lookup_failed",
                    provider=name,
                    identifier=identifier,
                    code=exc.code,
                    http_status=exc.http_status,
                )
                return IssueCheck(
                    identifier=identifier,
                    status=CheckStatus.ERROR,
                    provider=name,
                    error_code=exc.code,
                    detail=exc.detail,
                )
        status = CheckStatus.FOUND if exists else CheckStatus.MISSING
        _logger.debug("provider_lookup_done", provider=name, identifier=identifier, status=status)
        return IssueCheck(identifier=identifier, status=status, provider=name)

    keys = list(pending)
    outcomes = await asyncio.gather(*(check_one(key, pending[key]) for key in keys))
    results = dict(zip(keys, outcomes, strict=True))
    _logger.info(
        "verification_complete",
        items=len(ordered),
        lookups=len(keys),
        problems=sum(1 for check in outcomes if check.is_problem),
    )

    verified: list[VerifiedTodo] = []
    for item, route in zip(ordered, routes, strict=True):
        if route is None:
            verified.append(VerifiedTodo(item=item))
        elif isinstance(route, IssueCheck):
            verified.append(VerifiedTodo(item=item, check=route))
        else:
            verified.append(VerifiedTodo(item=item, check=results[route]))
    return tuple(verified)


__all__ = [
    "CheckStatus",
    "IssueCheck",
    "PROVIDER_ATTRIBUTE",
    "VerifiedTodo",
    "resolve_provider_name",
    "verify_todos",
]
