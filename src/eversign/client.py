"""Async client for the eversign REST API.

Covers the document operations needed to send PDFs out for signature
and collect the signed result. Every operation returns a ``Result``
instead of raising on transport or API failures.

Example:
    ```python
    from eversign import EversignClient, Ok, Settings

    async with EversignClient(Settings()) as eversign:
        result = await eversign.create_document(
            title="Offer",
            files=[{"name": "offer.pdf", "file_base64": encoded}],
            signers=[{"id": 1, "name": "Zack", "email": "zack@example.com"}],
        )
        if isinstance(result, Ok):
            print(result.value["document_hash"])
    ```

See https://eversign.com/api/documentation for the full API.
"""

from __future__ import annotations

import html
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from .config import Credentials, Settings
from .exceptions import EversignAPIError
from .request import ParamLocation, Request
from .result import Err, Ok, Result

logger = logging.getLogger(__name__)

EMBEDDED_SIGNING_JS = "https://static.eversign.com/js/embedded-signing.js"

# Optional fields of a new document; all live in the JSON body
DOCUMENT_BODY_PARAMS: dict[str, ParamLocation] = {
    name: ParamLocation.BODY
    for name in (
        "is_draft",
        "title",
        "message",
        "use_signer_order",
        "reminders",
        "require_all_signers",
        "custom_requester_name",
        "custom_requester_email",
        "redirect",
        "redirect_decline",
        "client",
        "expires",
        "embedded_signing_enabled",
        "flexible_signing",
        "use_hidden_tags",
        "signers",
        "files",
        "recipients",
        "meta",
        "fields",
    )
}

DOWNLOAD_PARAMS: dict[str, ParamLocation] = {
    "audit_trail": ParamLocation.QUERY,
    "document_id": ParamLocation.QUERY,
    "url_only": ParamLocation.QUERY,
}


def javascript_tag() -> str:
    """Return the script tag that loads eversign's embedded-signing JavaScript."""
    return f'<script type="text/javascript" src="{html.escape(EMBEDDED_SIGNING_JS)}"></script>'


def _is_json(response: httpx.Response) -> bool:
    return response.headers.get("content-type", "").startswith("application/json")


def _to_result(response: httpx.Response, *, binary: bool = False) -> Result[Any]:
    """Map an HTTP response onto Ok/Err."""
    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        return Err(e)

    if binary and not _is_json(response):
        return Ok(response.content)

    try:
        body = response.json()
    except ValueError as e:
        return Err(httpx.DecodingError(f"Invalid JSON from eversign: {e}", request=response.request))

    if isinstance(body, dict) and body.get("success") is False:
        return Err(EversignAPIError.from_body(body))
    return Ok(body)


class EversignClient:
    """eversign REST client bound to one set of credentials.

    Args:
        settings: Configuration. Read from the environment if None.
        http_client: Preconfigured ``httpx.AsyncClient``. One is created
            (and closed by ``close``) from ``settings`` if None.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if settings is None:
            settings = Settings()
        self.settings = settings
        self.credentials: Credentials = settings.credentials()
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=settings.api_url,
            timeout=settings.timeout_seconds,
            headers={"User-Agent": settings.user_agent, "Accept": "application/json"},
        )

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> EversignClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _request(self, method: str, url: str) -> Request:
        return Request().set_method(method).set_url(url).add_credentials(self.credentials)

    async def send(self, request: Request, *, binary: bool = False) -> Result[Any]:
        """Send a built request and wrap the outcome.

        Args:
            request: Fully built request descriptor.
            binary: Return raw bytes for non-JSON responses.

        Returns:
            Ok with decoded JSON (or bytes), Err with the failure.
        """
        http_request = request.to_httpx(self._http)
        logger.debug("eversign request %s %s", http_request.method, request.url)
        try:
            response = await self._http.send(http_request)
        except httpx.HTTPError as e:
            logger.warning("eversign request %s %s failed: %s", request.method, request.url, e)
            return Err(e)
        return _to_result(response, binary=binary)

    async def list_documents(self, type: str = "all") -> Result[list[dict[str, Any]]]:
        """List documents of the business.

        Args:
            type: Document stage filter, e.g. "all", "my_action_required",
                "waiting_for_others", "completed", "drafts", "cancelled".

        Returns:
            Ok with the list of documents.
        """
        request = self._request("GET", "/document").add_param(ParamLocation.QUERY, "type", type)
        return await self.send(request)

    async def create_document(
        self,
        params: Mapping[str, Any] | None = None,
        **options: Any,
    ) -> Result[dict[str, Any]]:
        """Create a document.

        ``params`` is sent as-is. Keyword options listed in
        ``DOCUMENT_BODY_PARAMS`` are merged into it; others are dropped.
        The configured ``sandbox`` flag is always added.

        Args:
            params: Document payload (files, signers, meta, ...).
            **options: Individual document fields.

        Returns:
            Ok with the created document.
        """
        request = (
            Request()
            .set_method("POST")
            .set_url("/document")
            .add_param(ParamLocation.BODY, "body", dict(params or {}))
            .add_optional_params(DOCUMENT_BODY_PARAMS, options)
            .add_param(ParamLocation.BODY, "sandbox", self.credentials.sandbox)
            .add_credentials(self.credentials)
        )
        return await self.send(request)

    async def get_embedded_signing_url(self, document_hash: str) -> Result[dict[str, Any]]:
        """Fetch a document including its signers' embedded signing URLs."""
        request = self._request("GET", "/document").add_param(
            ParamLocation.QUERY, "document_hash", document_hash
        )
        return await self.send(request)

    async def delete_document(self, document_hash: str) -> Result[dict[str, Any]]:
        """Delete a document that is still a draft or has been cancelled."""
        request = self._request("DELETE", "/document").add_param(
            ParamLocation.QUERY, "document_hash", document_hash
        )
        return await self.send(request)

    async def cancel_document(self, document_hash: str) -> Result[dict[str, Any]]:
        """Cancel a pending document."""
        request = (
            self._request("DELETE", "/document")
            .add_param(ParamLocation.QUERY, "document_hash", document_hash)
            .add_param(ParamLocation.QUERY, "cancel", 1)
        )
        return await self.send(request)

    async def download_document(self, document_hash: str, **options: Any) -> Result[Any]:
        """Download the final PDF of a document.

        Args:
            document_hash: eversign document hash.
            **options: ``audit_trail``, ``document_id`` or ``url_only``;
                anything else is ignored.

        Returns:
            Ok with the PDF bytes, or with JSON when eversign answers in
            JSON (e.g. ``url_only=1``).
        """
        request = (
            self._request("GET", "/download_final_document")
            .add_param(ParamLocation.QUERY, "document_hash", document_hash)
            .add_optional_params(DOWNLOAD_PARAMS, options)
        )
        return await self.send(request, binary=True)
