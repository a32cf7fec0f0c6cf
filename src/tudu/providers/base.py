"""
tudu — issue provider contract and error taxonomy

File: src/tudu/providers/base.py

Purpose
- Abstract issue-provider interface: "does this tracking ID exist remotely?".
- Normalized provider errors with machine-readable codes.

Functional requirements
- Only a confirmed absence returns ``False``; every indeterminate outcome raises
  a ``ProviderError`` subclass.
- Errors carry the identifier that failed so callers can report per item.

Non-functional requirements
- Providers share one HTTP client across concurrent lookups; the client is
  never mutated after construction.
- Must never log or render credentials.
"""

from __future__ import annotations

import abc
from typing import ClassVar, Protocol, runtime_checkable


def _validate_non_empty_str(value: object, field_name: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{field_name} must be a string")
    normalized = value.strip()
    if not normalized:
        raise ValueError(f"{field_name} cannot be empty")
    return normalized


def _normalize_detail(value: object) -> str:
    text = str(value).strip()
    if not text:
        return "unknown error"
    return " ".join(text.split())


class ProviderError(RuntimeError):
    """Base normalized provider error with deterministic machine-readable fields."""

    def __init__(
        self,
        *,
        provider: str,
        code: str,
        detail: str,
        identifier: str | None = None,
        http_status: int | None = None,
    ) -> None:
        self.provider = _validate_non_empty_str(provider, "provider")
        self.code = _validate_non_empty_str(code, "code")
        self.detail = _normalize_detail(detail)
        self.identifier = identifier
        self.http_status = http_status

        parts = [f"provider={self.provider}", f"code={self.code}"]
        if self.identifier is not None:
            parts.append(f"identifier={self.identifier}")
        if self.http_status is not None:
            parts.append(f"http_status={self.http_status}")
        parts.append(f"detail={self.detail}")
        super().__init__(" ".join(parts))


class ProviderAuthError(ProviderError):
    """Credential missing, malformed, or rejected by the remote service."""

    def __init__(
        self,
        detail: str,
        *,
        provider: str = "provider",
        identifier: str | None = None,
        http_status: int | None = None,
    ) -> None:
        super().__init__(
            provider=provider,
            code="auth",
            detail=detail,
            identifier=identifier,
            http_status=http_status,
        )


class ProviderTransportError(ProviderError):
    """Network/HTTP failure below the application layer, or an unusable response."""

    def __init__(
        self,
        detail: str,
        *,
        provider: str = "provider",
        identifier: str | None = None,
        http_status: int | None = None,
    ) -> None:
        super().__init__(
            provider=provider,
            code="transport",
            detail=detail,
            identifier=identifier,
            http_status=http_status,
        )


class ProviderNotFoundError(ProviderError):
    """Unambiguous absence that must not be confused with a ``False`` lookup."""

    def __init__(
        self,
        detail: str,
        *,
        provider: str = "provider",
        identifier: str | None = None,
        http_status: int | None = None,
    ) -> None:
        super().__init__(
            provider=provider,
            code="not_found",
            detail=detail,
            identifier=identifier,
            http_status=http_status,
        )


class ProviderConfigError(ProviderError):
    """Provider settings are incomplete or name an unknown provider kind."""

    def __init__(self, detail: str, *, provider: str = "provider") -> None:
        super().__init__(provider=provider, code="config", detail=detail)


class IssueProvider(abc.ABC):
    """Capability to confirm that a tracking ID exists in an external tracker."""

    kind: ClassVar[str] = "provider"

    def __init__(self, *, name: str | None = None) -> None:
        self.name = _validate_non_empty_str(name if name is not None else self.kind, "name")

    @abc.abstractmethod
    async def issue_exists(self, identifier: str) -> bool:
        """Return whether ``identifier`` exists; raise ``ProviderError`` when undetermined."""

    async def aclose(self) -> None:
        """Release transport resources; the default provider holds none."""


@runtime_checkable
class IssueProviderProtocol(Protocol):
    """Structural protocol accepted wherever a provider is consumed."""

    name: str

    async def issue_exists(self, identifier: str) -> bool:
        """Return whether ``identifier`` exists."""


__all__ = [
    "IssueProvider",
    "IssueProviderProtocol",
    "ProviderAuthError",
    "ProviderConfigError",
    "ProviderError",
    "ProviderNotFoundError",
    "ProviderTransportError",
]
