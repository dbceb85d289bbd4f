"""Two-variant results returned by every REST operation.

Operations never raise for transport or API failures. Callers inspect
the tag, typically with ``match``:

    ```python
    match await client.list_documents():
        case Ok(documents):
            ...
        case Err(error):
            logger.warning("listing failed", error=str(error))
    ```
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

import httpx

from .exceptions import EversignAPIError

T = TypeVar("T")

# Collaborator errors (transport failures, non-2xx statuses) and
# eversign's own ``success: false`` bodies
ResultError = Union[httpx.HTTPError, EversignAPIError]


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome.

    Attributes:
        value: Decoded response (JSON data or raw bytes).
    """

    value: T

    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed outcome.

    Attributes:
        error: The collaborator's raw error or an EversignAPIError.
    """

    error: ResultError

    def is_ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]
