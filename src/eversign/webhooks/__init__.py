"""Inbound eversign webhooks.

Classifies document lifecycle events and hands them to application
callbacks, downloading the signed PDF for completed documents.

Example:
    ```python
    from eversign.webhooks import DocumentEventHandler, WebhookDispatcher

    class Documents(DocumentEventHandler):
        async def handle_document_change(self, document_hash, event_type, event_time, payload):
            ...

        async def handle_document_complete(self, document_hash, pdf, payload):
            ...

    dispatcher = WebhookDispatcher(client, Documents())
    await dispatcher.receive(payload)  # never raises; reply 200 with an empty body
    ```
"""

from .dispatcher import DocumentEventHandler, WebhookDispatcher
from .events import (
    DocumentChanged,
    DocumentCompleted,
    EventMeta,
    Unrecognized,
    WebhookEvent,
    classify_event,
)

__all__ = [
    "DocumentChanged",
    "DocumentCompleted",
    "DocumentEventHandler",
    "EventMeta",
    "Unrecognized",
    "WebhookDispatcher",
    "WebhookEvent",
    "classify_event",
]
