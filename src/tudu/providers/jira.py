"""
tudu — Jira provider

File: src/tudu/providers/jira.py

Purpose
- Confirm tracking IDs such as ``PROJ-12`` against a Jira server.

Functional requirements
- Basic auth when both an e-mail and an API token are in the environment,
  bearer auth when only the token is.
- IDs belonging to another project key are absent without a request.
- 200 found, 404 absent, 401/403 auth failure, anything else transport failure.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import ClassVar

import httpx
import structlog

from tudu.constants import DEFAULT_TIMEOUT_SECONDS
from tudu.domain.ids import split_tracking_id
from tudu.providers.base import (
    IssueProvider,
    ProviderAuthError,
    ProviderConfigError,
    ProviderTransportError,
)
from tudu.providers.http import build_client, resolve_credential, response_excerpt, send_request

DEFAULT_EMAIL_ENV = "JIRA_EMAIL"
DEFAULT_TOKEN_ENV = "JIRA_API_TOKEN"

_logger = structlog.get_logger(__name__)


class JiraProvider(IssueProvider):
    kind: ClassVar[str] = "jira"

    def __init__(
        self,
        *,
        server: str,
        project: str,
        email_env: str = DEFAULT_EMAIL_ENV,
        token_env: str = DEFAULT_TOKEN_ENV,
        name: str | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        environ: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(name=name)
        server = server.strip()
        if not server:
            raise ProviderConfigError("server is required", provider=self.name)
        if not project or not project.strip():
            raise ProviderConfigError("project is required", provider=self.name)
        self.server = server.rstrip("/")
        self.project = project.strip()

        env = os.environ if environ is None else environ
        token = resolve_credential(env, token_env, provider=self.name)
        email = resolve_credential(env, email_env, provider=self.name, required=False)

        headers = {"Accept": "application/json"}
        auth: tuple[str, str] | None = None
        if email is not None and token is not None:
            auth = (email, token)
        else:
            headers["Authorization"] = f"Bearer {token}"

        self._client = build_client(
            base_url=self.server + "/",
            headers=headers,
            timeout_seconds=timeout_seconds,
            transport=transport,
            auth=auth,
        )

    @property
    def uses_basic_auth(self) -> bool:
        return self._client.auth is not None

    @classmethod
    def from_settings(
        cls,
        name: str,
        settings: Mapping[str, object],
        *,
        environ: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> JiraProvider:
        return cls(
            name=name,
            server=str(settings.get("server", "")),
            project=str(settings.get("project", "")),
            email_env=str(settings.get("email_env", DEFAULT_EMAIL_ENV)),
            token_env=str(settings.get("token_env", DEFAULT_TOKEN_ENV)),
            timeout_seconds=timeout_seconds,
            environ=environ,
            transport=transport,
        )

    async def issue_exists(self, identifier: str) -> bool:
        parts = split_tracking_id(identifier)
        if parts is None or parts[0] != self.project:
            _logger.debug("jira_id_outside_project", provider=self.name, identifier=identifier)
            return False

        response = await send_request(
            self._client,
            "GET",
            f"rest/api/2/issue/{identifier}",
            provider=self.name,
            identifier=identifier,
            params={"fields": "key"},
        )
        status = response.status_code
        if status == httpx.codes.OK:
            return True
        if status == httpx.codes.NOT_FOUND:
            return False
        if status in (httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN):
            raise ProviderAuthError(
                "Jira rejected the credentials",
                provider=self.name,
                identifier=identifier,
                http_status=status,
            )
        raise ProviderTransportError(
            f"unexpected Jira response status {status}: {response_excerpt(response)}",
            provider=self.name,
            identifier=identifier,
            http_status=status,
        )

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = ["DEFAULT_EMAIL_ENV", "DEFAULT_TOKEN_ENV", "JiraProvider"]
