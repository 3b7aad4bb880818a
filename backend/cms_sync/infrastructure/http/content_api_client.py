"""Content API client — implements the ContentApi interface over HTTP.

Talks to the CRUD surface (``GET /api/<resource>``, ``POST/PUT/DELETE
/api/admin/<resource>[/<id>]``) using httpx.  Error bodies are not trusted
to be JSON: proxies and hosting platforms answer with HTML error pages,
which are classified as retryable server errors.
"""

import asyncio
import logging
from typing import Any
from urllib.parse import quote

import httpx

from cms_sync.application.interfaces.content_api import ContentApi
from cms_sync.domain.exceptions import ContentApiError
from cms_sync.domain.identity import normalize_identity

logger = logging.getLogger(__name__)

_HTML_MARKERS = ("<!doctype html", "<html")


def looks_like_html(body: str) -> bool:
    return body.lstrip()[:20].lower().startswith(_HTML_MARKERS)


class HttpContentApi(ContentApi):
    """Infrastructure adapter — connects to the content CRUD API.

    Every call is bounded by ``timeout``.  Only ``delete`` is retried
    (``delete_max_retries`` times, waiting ``retry_base_delay * attempt``)
    since repeating a create or update could duplicate its side effects.
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_token: str = "",
        timeout: float = 5.0,
        delete_max_retries: int = 2,
        retry_base_delay: float = 1.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_token = api_token
        self._timeout = timeout
        self._delete_max_retries = delete_max_retries
        self._retry_base_delay = retry_base_delay
        self._http_client = http_client

    def _get_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        return headers

    def _public_url(self, resource: str) -> str:
        return f"{self._base_url}/api/{resource.strip('/')}"

    def _admin_url(self, resource: str, identity: Any | None = None) -> str:
        url = f"{self._base_url}/api/admin/{resource.strip('/')}"
        if identity is not None:
            key = normalize_identity(identity)
            if key is None:
                raise ValueError(f"Invalid identity for {resource}: {identity!r}")
            url += f"/{quote(key, safe='')}"
        return url

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def list(self, resource: str) -> list[dict[str, Any]]:
        data = await self._request("GET", self._public_url(resource))
        if not isinstance(data, list):
            raise ContentApiError(
                200, f"Expected a list of {resource}, got {type(data).__name__}"
            )
        return data

    async def create(self, resource: str, payload: dict[str, Any]) -> dict[str, Any]:
        data = await self._request("POST", self._admin_url(resource), json=payload)
        return self._expect_record(data, resource)

    async def update(
        self, resource: str, identity: Any, patch: dict[str, Any]
    ) -> dict[str, Any]:
        data = await self._request("PUT", self._admin_url(resource, identity), json=patch)
        return self._expect_record(data, resource)

    async def delete(self, resource: str, identity: Any) -> None:
        await self._request(
            "DELETE",
            self._admin_url(resource, identity),
            retries=self._delete_max_retries,
        )

    async def _request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        retries: int = 0,
    ) -> Any:
        """Send a request, retrying retryable failures up to ``retries`` times."""
        client = await self._get_client()
        should_close = self._http_client is None

        try:
            attempt = 0
            while True:
                try:
                    return await self._send_once(client, method, url, json)
                except ContentApiError as exc:
                    if not exc.retryable or attempt >= retries:
                        raise
                    attempt += 1
                    delay = self._retry_base_delay * attempt
                    logger.warning(
                        "%s %s failed (%s); retry %d/%d in %.1fs",
                        method,
                        url,
                        exc,
                        attempt,
                        retries,
                        delay,
                    )
                    await asyncio.sleep(delay)
        finally:
            if should_close:
                await client.aclose()

    async def _send_once(
        self, client: httpx.AsyncClient, method: str, url: str, payload: Any
    ) -> Any:
        try:
            response = await client.request(
                method,
                url,
                headers=self._get_headers(),
                json=payload,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as exc:
            raise ContentApiError(
                None, f"{method} {url} timed out after {self._timeout}s", retryable=True
            ) from exc
        except httpx.TransportError as exc:
            raise ContentApiError(
                None, f"{method} {url} failed: {exc}", retryable=True
            ) from exc

        logger.debug("%s %s -> %d", method, url, response.status_code)
        if response.is_error:
            self._raise_api_error(response)
        return self._parse_body(response)

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        """Decode a success body; empty bodies (e.g. 204) decode to None."""
        text = response.text
        if not text.strip():
            return None
        if looks_like_html(text):
            raise ContentApiError(
                response.status_code,
                "Server returned an HTML page instead of JSON",
                retryable=True,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ContentApiError(
                response.status_code, "Response body is not valid JSON", retryable=True
            ) from exc

    @staticmethod
    def _raise_api_error(response: httpx.Response) -> None:
        """Raise ContentApiError from a non-2xx httpx Response."""
        status_code = response.status_code
        text = response.text

        if looks_like_html(text):
            raise ContentApiError(
                status_code,
                f"Server error ({status_code}). The server may be experiencing issues.",
                retryable=True,
            )

        try:
            data = response.json()
            message = (
                data.get("message") or data.get("detail") or data.get("error") or text
            )
        except Exception:
            message = text or response.reason_phrase

        raise ContentApiError(status_code, str(message), retryable=status_code >= 500)

    @staticmethod
    def _expect_record(data: Any, resource: str) -> dict[str, Any]:
        if not isinstance(data, dict):
            raise ContentApiError(
                None, f"Expected a {resource} record in the response", retryable=False
            )
        return data
