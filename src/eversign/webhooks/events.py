"""Webhook event models and classification.

eversign posts a JSON body for every document lifecycle event:

    ```json
    {
      "event_type": "document_signed",
      "event_time": "1476258977",
      "event_hash": "5f1b6e...",
      "meta": {
        "related_document_hash": "aBc123",
        "related_user_id": "1",
        "related_business_id": "2",
        "related_app_id": "3"
      },
      "signer": {...}
    }
    ```

``classify_event`` turns such a payload into exactly one of
``DocumentCompleted``, ``DocumentChanged`` or ``Unrecognized``.
"""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

COMPLETED_EVENT = "document_completed"

# eversign sends hashes, ids and timestamps as strings or numbers
Scalar = Union[str, int, float]


class EventMeta(BaseModel):
    """The ``meta`` object of a document event; every related id must be present."""

    model_config = ConfigDict(extra="allow")

    related_document_hash: Scalar
    related_user_id: Any
    related_business_id: Any
    related_app_id: Any


class _DocumentEventPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    event_type: str
    event_time: Any
    event_hash: Any
    meta: EventMeta


class _CompletedEventPayload(_DocumentEventPayload):
    event_type: Literal["document_completed"]


class DocumentCompleted(BaseModel):
    """All signers have signed; the final PDF can be downloaded.

    Attributes:
        document_hash: Hash of the completed document.
        event_time: When eversign emitted the event.
        event_hash: eversign's hash of the event.
        meta: The event's ``meta`` object.
        payload: The raw webhook body.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["completed"] = "completed"
    document_hash: str
    event_type: str = COMPLETED_EVENT
    event_time: Any
    event_hash: Any
    meta: dict[str, Any]
    payload: dict[str, Any] = Field(repr=False)


class DocumentChanged(BaseModel):
    """Any other document event (sent, viewed, signed, declined, ...).

    Attributes:
        document_hash: Hash of the changed document.
        event_type: eversign event name, used as the change kind.
        event_time: When eversign emitted the event.
        event_hash: eversign's hash of the event.
        meta: The event's ``meta`` object.
        payload: The raw webhook body.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["changed"] = "changed"
    document_hash: str
    event_type: str
    event_time: Any
    event_hash: Any
    meta: dict[str, Any]
    payload: dict[str, Any] = Field(repr=False)


class Unrecognized(BaseModel):
    """A payload that is not a document event. Ignored."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["unrecognized"] = "unrecognized"
    payload: Any = Field(default=None, repr=False)


WebhookEvent = Union[DocumentCompleted, DocumentChanged, Unrecognized]


def classify_event(payload: Any) -> WebhookEvent:
    """Classify a decoded webhook body.

    A ``document_completed`` event whose meta names the document, user,
    business and app is a completion. Any other event with the same
    complete meta is a change. Everything else is unrecognized.

    Args:
        payload: Decoded JSON body.

    Returns:
        The classified event. Never raises for malformed payloads.
    """
    try:
        completed = _CompletedEventPayload.model_validate(payload)
    except ValidationError:
        pass
    else:
        return DocumentCompleted(
            document_hash=str(completed.meta.related_document_hash),
            event_time=completed.event_time,
            event_hash=completed.event_hash,
            meta=completed.meta.model_dump(),
            payload=payload,
        )

    try:
        changed = _DocumentEventPayload.model_validate(payload)
    except ValidationError:
        return Unrecognized(payload=payload)

    return DocumentChanged(
        document_hash=str(changed.meta.related_document_hash),
        event_type=changed.event_type,
        event_time=changed.event_time,
        event_hash=changed.event_hash,
        meta=changed.meta.model_dump(),
        payload=payload,
    )
