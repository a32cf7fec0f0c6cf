"""
tudu — provider registry and construction

File: src/tudu/providers/registry.py

Purpose
- Map a provider ``type`` tag to the factory that builds it.
- Build every configured provider, keeping construction failures per name
  instead of aborting.

Functional requirements
- Deterministic (sorted) registration and construction order.
- Unknown kinds surface as ``ProviderConfigError`` for that provider only.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

import httpx
import structlog

from tudu.constants import DEFAULT_TIMEOUT_SECONDS
from tudu.providers.base import IssueProvider, ProviderConfigError, ProviderError
from tudu.providers.github import GitHubProvider
from tudu.providers.jira import JiraProvider
from tudu.providers.notion import NotionProvider

_logger = structlog.get_logger(__name__)


class ProviderFactory(Protocol):
    def __call__(
        self,
        name: str,
        settings: Mapping[str, object],
        *,
        environ: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> IssueProvider: ...


@dataclass(frozen=True, slots=True)
class ProviderRegistration:
    kind: str
    factory: ProviderFactory


class ProviderRegistry:
    """Deterministic provider factory registry keyed by lowercase kind."""

    def __init__(self) -> None:
        self._registrations: dict[str, ProviderRegistration] = {}

    def register(self, kind: str, factory: ProviderFactory) -> None:
        normalized = kind.strip().lower()
        if not normalized:
            raise ValueError("provider kind cannot be empty")
        if not callable(factory):
            raise TypeError("factory must be callable")
        if normalized in self._registrations:
            raise ValueError(f"provider kind {normalized!r} is already registered")
        self._registrations[normalized] = ProviderRegistration(kind=normalized, factory=factory)

    def contains(self, kind: str) -> bool:
        return kind.strip().lower() in self._registrations

    def create(
        self,
        name: str,
        settings: Mapping[str, object],
        *,
        environ: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> IssueProvider:
        raw_kind = settings.get("type")
        kind = raw_kind.strip().lower() if isinstance(raw_kind, str) else ""
        registration = self._registrations.get(kind)
        if registration is None:
            known = ", ".join(self.kinds())
            raise ProviderConfigError(
                f"unknown provider type {raw_kind!r}; registered: [{known}]",
                provider=name,
            )
        return registration.factory(
            name,
            settings,
            environ=environ,
            transport=transport,
            timeout_seconds=timeout_seconds,
        )

    def kinds(self) -> tuple[str, ...]:
        return tuple(sorted(self._registrations))


def default_registry() -> ProviderRegistry:
    registry = ProviderRegistry()
    registry.register(GitHubProvider.kind, GitHubProvider.from_settings)
    registry.register(JiraProvider.kind, JiraProvider.from_settings)
    registry.register(NotionProvider.kind, NotionProvider.from_settings)
    return registry


def build_providers(
    providers_config: Mapping[str, Mapping[str, object]],
    *,
    environ: Mapping[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    registry: ProviderRegistry | None = None,
) -> tuple[dict[str, IssueProvider], dict[str, ProviderError]]:
    """Build all configured providers.

    Returns ``(providers, errors)``; each configured name lands in exactly one
    of the two mappings.
    """

    target = registry if registry is not None else default_registry()
    providers: dict[str, IssueProvider] = {}
    errors: dict[str, ProviderError] = {}
    for name in sorted(providers_config):
        try:
            providers[name] = target.create(
                name,
                providers_config[name],
                environ=environ,
                transport=transport,
                timeout_seconds=timeout_seconds,
            )
        except ProviderError as exc:
            _logger.warning(
                "provider_construction_failed",
                provider=name,
                code=exc.code,
                detail=exc.detail,
            )
            errors[name] = exc
        else:
            _logger.debug("provider_constructed", provider=name, kind=providers[name].kind)
    return providers, errors


async def close_providers(providers: Mapping[str, IssueProvider]) -> None:
    for name in sorted(providers):
        await providers[name].aclose()


__all__ = [
    "ProviderFactory",
    "ProviderRegistration",
    "ProviderRegistry",
    "build_providers",
    "close_providers",
    "default_registry",
]
