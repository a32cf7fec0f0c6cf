"""Shared httpx plumbing for HTTP-backed issue providers."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Final

import httpx

from tudu.providers.base import ProviderAuthError, ProviderTransportError

# Printable ASCII without whitespace; anything else cannot form a header value.
_CREDENTIAL_RE: Final[re.Pattern[str]] = re.compile(r"^[\x21-\x7e]+$")


def resolve_credential(
    environ: Mapping[str, str],
    env_name: str,
    *,
    provider: str,
    required: bool = True,
) -> str | None:
    """Read a credential from ``environ[env_name]``.

    Raises ``ProviderAuthError`` when a required credential is missing or when
    any present credential is malformed.
    """

    raw = environ.get(env_name)
    if raw is None or not raw.strip():
        if not required:
            return None
        raise ProviderAuthError(
            f"missing credential; set the {env_name} environment variable",
            provider=provider,
        )
    value = raw.strip()
    if _CREDENTIAL_RE.fullmatch(value) is None:
        raise ProviderAuthError(
            f"credential in {env_name} is malformed (must be printable ASCII without spaces)",
            provider=provider,
        )
    return value


def build_client(
    *,
    base_url: str,
    headers: Mapping[str, str],
    timeout_seconds: float,
    transport: httpx.AsyncBaseTransport | None = None,
    auth: httpx.Auth | tuple[str, str] | None = None,
) -> httpx.AsyncClient:
    """Create the one shared client a provider reuses for every lookup."""

    return httpx.AsyncClient(
        base_url=base_url,
        headers=dict(headers),
        auth=auth,
        timeout=httpx.Timeout(timeout_seconds),
        limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
        transport=transport,
    )


async def send_request(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    provider: str,
    identifier: str,
    json_body: object | None = None,
    params: Mapping[str, str] | None = None,
) -> httpx.Response:
    """Send one request, mapping transport-level failures to ``ProviderTransportError``."""

    try:
        return await client.request(method, url, json=json_body, params=params)
    except httpx.TimeoutException as exc:
        raise ProviderTransportError(
            f"request timed out: {exc.__class__.__name__}",
            provider=provider,
            identifier=identifier,
        ) from exc
    except httpx.HTTPError as exc:
        raise ProviderTransportError(
            f"HTTP error: {exc}",
            provider=provider,
            identifier=identifier,
        ) from exc


def decode_json_object(
    response: httpx.Response, *, provider: str, identifier: str
) -> dict[str, object]:
    """Decode a JSON object body or raise ``ProviderTransportError``."""

    try:
        payload = response.json()
    except ValueError as exc:
        raise ProviderTransportError(
            "response body is not valid JSON",
            provider=provider,
            identifier=identifier,
            http_status=response.status_code,
        ) from exc
    if not isinstance(payload, dict):
        raise ProviderTransportError(
            "response body must be a JSON object",
            provider=provider,
            identifier=identifier,
            http_status=response.status_code,
        )
    return payload


def response_excerpt(response: httpx.Response, *, limit: int = 200) -> str:
    text = " ".join(response.text.split())
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


__all__ = [
    "build_client",
    "decode_json_object",
    "resolve_credential",
    "response_excerpt",
    "send_request",
]
