"""GitHub issues provider: ``BUG-17`` resolves to issue #17 of the configured repository."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import ClassVar

import httpx
import structlog

from tudu.constants import DEFAULT_TIMEOUT_SECONDS, GITHUB_API_URL, GITHUB_API_VERSION
from tudu.domain.ids import split_tracking_id
from tudu.providers.base import (
    IssueProvider,
    ProviderAuthError,
    ProviderConfigError,
    ProviderTransportError,
)
from tudu.providers.http import build_client, resolve_credential, response_excerpt, send_request

DEFAULT_TOKEN_ENV = "GITHUB_TOKEN"

_logger = structlog.get_logger(__name__)

_ABSENT_STATUSES = frozenset({httpx.codes.NOT_FOUND, httpx.codes.GONE})
_AUTH_STATUSES = frozenset({httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN})


class GitHubProvider(IssueProvider):
    kind: ClassVar[str] = "github"

    def __init__(
        self,
        *,
        owner: str,
        repo: str,
        token_env: str = DEFAULT_TOKEN_ENV,
        name: str | None = None,
        api_url: str = GITHUB_API_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        environ: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(name=name)
        for field_name, value in (("owner", owner), ("repo", repo)):
            if not value or not value.strip():
                raise ProviderConfigError(f"{field_name} is required", provider=self.name)
        self.owner = owner.strip()
        self.repo = repo.strip()

        token = resolve_credential(
            os.environ if environ is None else environ, token_env, provider=self.name
        )
        self._client = build_client(
            base_url=api_url.rstrip("/") + "/",
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            },
            timeout_seconds=timeout_seconds,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        name: str,
        settings: Mapping[str, object],
        *,
        environ: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> GitHubProvider:
        return cls(
            name=name,
            owner=str(settings.get("owner", "")),
            repo=str(settings.get("repo", "")),
            token_env=str(settings.get("token_env", DEFAULT_TOKEN_ENV)),
            api_url=str(settings.get("api_url", GITHUB_API_URL)),
            timeout_seconds=timeout_seconds,
            environ=environ,
            transport=transport,
        )

    async def issue_exists(self, identifier: str) -> bool:
        parts = split_tracking_id(identifier)
        if parts is None:
            return False
        _, number = parts

        response = await send_request(
            self._client,
            "GET",
            f"repos/{self.owner}/{self.repo}/issues/{number}",
            provider=self.name,
            identifier=identifier,
        )
        status = response.status_code
        if status == httpx.codes.OK:
            return True
        if status in _ABSENT_STATUSES:
            return False
        if status in _AUTH_STATUSES:
            raise ProviderAuthError(
                "GitHub rejected the token",
                provider=self.name,
                identifier=identifier,
                http_status=status,
            )
        _logger.warning(
            "github_unexpected_status",
            provider=self.name,
            identifier=identifier,
            http_status=status,
        )
        raise ProviderTransportError(
            f"unexpected GitHub response status {status}: {response_excerpt(response)}",
            provider=self.name,
            identifier=identifier,
            http_status=status,
        )

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = ["DEFAULT_TOKEN_ENV", "GitHubProvider"]
