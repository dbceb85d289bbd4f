"""Dispatch of inbound eversign webhook events to application handlers.

Completed documents are downloaded before the completion handler runs;
the download is retried with a fixed delay while eversign fails to
serve the final PDF.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_result,
    stop_after_attempt,
    stop_never,
    wait_fixed,
)

from eversign.exceptions import DownloadError
from eversign.logging import bind_context, get_logger, unbind_context
from eversign.result import Err, Ok, Result

from .events import DocumentChanged, DocumentCompleted, WebhookEvent, classify_event

if TYPE_CHECKING:
    from tenacity.stop import StopBaseT

    from eversign.client import EversignClient

logger = get_logger(__name__)


class DocumentEventHandler(ABC):
    """Application callbacks for eversign document events.

    Example:
        ```python
        class Documents(DocumentEventHandler):
            async def handle_document_change(self, document_hash, event_type, event_time, payload):
                await repo.update_status(document_hash, event_type)

            async def handle_document_complete(self, document_hash, pdf, payload):
                await repo.store_signed(document_hash, pdf)
        ```
    """

    @abstractmethod
    async def handle_document_change(
        self,
        document_hash: str,
        event_type: str,
        event_time: Any,
        payload: dict[str, Any],
    ) -> None:
        """Called when a document changed (sent, viewed, signed, declined, ...)."""
        ...

    @abstractmethod
    async def handle_document_complete(
        self,
        document_hash: str,
        pdf: bytes,
        payload: dict[str, Any],
    ) -> None:
        """Called once all signers signed, with the final PDF."""
        ...


def _log_attempt(retry_state: RetryCallState) -> None:
    logger.info(
        "Downloading document",
        document_hash=retry_state.args[0],
        attempt=retry_state.attempt_number,
    )


def _log_retry(retry_state: RetryCallState) -> None:
    result = retry_state.outcome.result() if retry_state.outcome else None
    logger.warning(
        "Retrying document download",
        document_hash=retry_state.args[0],
        attempt=retry_state.attempt_number,
        delay_seconds=retry_state.next_action.sleep if retry_state.next_action else None,
        error=str(result.error) if isinstance(result, Err) else None,
    )


def _give_up(retry_state: RetryCallState) -> None:
    result = retry_state.outcome.result() if retry_state.outcome is not None else None
    raise DownloadError(
        retry_state.args[0],
        retry_state.attempt_number,
        result.error if isinstance(result, Err) else None,
    )


class WebhookDispatcher:
    """Classifies webhook payloads and invokes the matching handler.

    Args:
        client: Client used to download completed documents.
        handler: Application callbacks.
        retry_delay_seconds: Fixed delay between download attempts.
            Defaults to the client's settings.
        max_attempts: Download attempts before giving up. Defaults to
            the client's ``download_max_attempts``.
        retry_forever: Ignore ``max_attempts`` and retry until the
            download succeeds. Defaults to the client's
            ``download_retry_forever``.

    Example:
        ```python
        dispatcher = WebhookDispatcher(client, Documents())

        @app.post("/callbacks/eversign")
        async def eversign_webhook(request: Request) -> Response:
            await dispatcher.receive(await request.json())
            return Response(status_code=200)
        ```
    """

    def __init__(
        self,
        client: EversignClient,
        handler: DocumentEventHandler,
        *,
        retry_delay_seconds: float | None = None,
        max_attempts: int | None = None,
        retry_forever: bool | None = None,
    ) -> None:
        settings = client.settings
        if retry_delay_seconds is None:
            retry_delay_seconds = settings.download_retry_delay_seconds
        if max_attempts is None:
            max_attempts = settings.download_max_attempts
        if retry_forever is None:
            retry_forever = settings.download_retry_forever

        self._client = client
        self._handler = handler
        self._retry_delay = retry_delay_seconds
        self._max_attempts = max_attempts
        self._retry_forever = retry_forever

    def _stop(self) -> StopBaseT:
        if self._retry_forever:
            return stop_never
        return stop_after_attempt(self._max_attempts)

    async def fetch_document(self, document_hash: str) -> bytes:
        """Download the final PDF, retrying failed attempts.

        Args:
            document_hash: Document to download.

        Returns:
            The PDF bytes.

        Raises:
            DownloadError: If every allowed attempt failed.
        """
        retrying = AsyncRetrying(
            stop=self._stop(),
            wait=wait_fixed(self._retry_delay),
            retry=retry_if_result(lambda result: isinstance(result, Err)),
            before=_log_attempt,
            before_sleep=_log_retry,
            retry_error_callback=_give_up,
        )
        result = await retrying(self._download, document_hash)

        logger.info("Downloaded document", document_hash=document_hash, size=len(result.value))
        return result.value  # type: ignore[no-any-return]

    async def _download(self, document_hash: str) -> Result[Any]:
        result = await self._client.download_document(document_hash)
        # JSON in place of the PDF counts as a failed attempt
        if isinstance(result, Ok) and not isinstance(result.value, bytes):
            return Err(httpx.DecodingError(f"Expected the final PDF of {document_hash}, got JSON"))
        return result

    async def dispatch(self, payload: Any) -> WebhookEvent:
        """Classify a payload and run the matching handler.

        Args:
            payload: Decoded webhook JSON body.

        Returns:
            The classified event.

        Raises:
            DownloadError: If a completed document could not be downloaded.
        """
        event = classify_event(payload)

        if isinstance(event, DocumentCompleted):
            pdf = await self.fetch_document(event.document_hash)
            await self._handler.handle_document_complete(event.document_hash, pdf, payload)
        elif isinstance(event, DocumentChanged):
            await self._handler.handle_document_change(
                event.document_hash, event.event_type, event.event_time, payload
            )
        else:
            logger.debug("Ignoring unrecognized webhook payload")

        return event

    async def receive(self, payload: Any) -> None:
        """Webhook callback point.

        Dispatches the payload and logs any failure instead of raising,
        so the endpoint can acknowledge every delivery with an empty
        HTTP 200 response.

        Args:
            payload: Decoded webhook JSON body.
        """
        if isinstance(payload, dict):
            meta = payload.get("meta")
            bind_context(
                event_type=payload.get("event_type"),
                document_hash=meta.get("related_document_hash") if isinstance(meta, dict) else None,
            )
        try:
            await self.dispatch(payload)
        except Exception as e:
            logger.exception("Webhook dispatch failed", error=str(e))
        finally:
            unbind_context("event_type", "document_hash")
