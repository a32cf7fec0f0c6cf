"""
tudu — Notion database provider

File: src/tudu/providers/notion.py

Purpose
- Confirm tracking IDs against a Notion database by querying its ``unique_id``
  property with the numeric suffix of the ID (``TASK-42`` -> ``42``).

Functional requirements
- Token comes from the environment (``NOTION_TOKEN`` unless ``token_env`` is set).
- IDs whose suffix is not an integer are reported absent without a request.
- 400, 401 and other non-success statuses surface as ``ProviderAuthError``;
  404 means absent.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import ClassVar

import httpx
import structlog

from tudu.constants import DEFAULT_TIMEOUT_SECONDS, NOTION_API_URL, NOTION_API_VERSION
from tudu.domain.ids import split_tracking_id
from tudu.providers.base import IssueProvider, ProviderAuthError, ProviderConfigError
from tudu.providers.http import (
    build_client,
    decode_json_object,
    resolve_credential,
    response_excerpt,
    send_request,
)

DEFAULT_TOKEN_ENV = "NOTION_TOKEN"
DEFAULT_ID_PROPERTY = "ID"

_logger = structlog.get_logger(__name__)


class NotionProvider(IssueProvider):
    """Issue lookups against one Notion database."""

    kind: ClassVar[str] = "notion"

    def __init__(
        self,
        *,
        database_id: str,
        id_property: str = DEFAULT_ID_PROPERTY,
        token_env: str = DEFAULT_TOKEN_ENV,
        name: str | None = None,
        api_url: str = NOTION_API_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        environ: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(name=name)
        if not database_id or not database_id.strip():
            raise ProviderConfigError("database_id is required", provider=self.name)
        self.database_id = database_id.strip()
        self.id_property = id_property

        token = resolve_credential(
            os.environ if environ is None else environ, token_env, provider=self.name
        )
        self._client = build_client(
            base_url=api_url.rstrip("/") + "/",
            headers={
                "Authorization": f"Bearer {token}",
                "Notion-Version": NOTION_API_VERSION,
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
    ) -> NotionProvider:
        return cls(
            name=name,
            database_id=str(settings.get("database_id", "")),
            id_property=str(settings.get("id_property", DEFAULT_ID_PROPERTY)),
            token_env=str(settings.get("token_env", DEFAULT_TOKEN_ENV)),
            api_url=str(settings.get("api_url", NOTION_API_URL)),
            timeout_seconds=timeout_seconds,
            environ=environ,
            transport=transport,
        )

    async def issue_exists(self, identifier: str) -> bool:
        parts = split_tracking_id(identifier)
        if parts is None:
            _logger.debug("notion_id_not_numeric", provider=self.name, identifier=identifier)
            return False
        _, number = parts

        query = {
            "filter": {
                "property": self.id_property,
                "unique_id": {"equals": number},
            }
        }
        response = await send_request(
            self._client,
            "POST",
            f"databases/{self.database_id}/query",
            provider=self.name,
            identifier=identifier,
            json_body=query,
        )

        status = response.status_code
        if status == httpx.codes.OK:
            payload = decode_json_object(response, provider=self.name, identifier=identifier)
            results = payload.get("results")
            return isinstance(results, list) and len(results) > 0
        if status == httpx.codes.NOT_FOUND:
            return False
        if status == httpx.codes.UNAUTHORIZED:
            raise ProviderAuthError(
                "Notion rejected the token",
                provider=self.name,
                identifier=identifier,
                http_status=status,
            )
        # 400 is a query-shape problem and 5xx a service problem; both are still
        # reported as auth failures until the error kinds are split.
        _logger.warning(
            "notion_unexpected_status",
            provider=self.name,
            identifier=identifier,
            http_status=status,
            body=response_excerpt(response),
        )
        raise ProviderAuthError(
            f"unexpected Notion response status {status}",
            provider=self.name,
            identifier=identifier,
            http_status=status,
        )

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = ["DEFAULT_ID_PROPERTY", "DEFAULT_TOKEN_ENV", "NotionProvider"]
