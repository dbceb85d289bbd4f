"""eversign: Python client for the eversign e-signature API.

Creates, lists, cancels, deletes and downloads documents through the
eversign REST API, and dispatches eversign webhooks to application
callbacks.

Quick Start:
    from eversign import Err, EversignClient, Ok, Settings

    async with EversignClient(Settings()) as eversign:
        match await eversign.list_documents("completed"):
            case Ok(documents):
                ...
            case Err(error):
                ...

For the API reference, see: https://eversign.com/api/documentation
"""

__version__ = "0.1.0"

# Client
from .client import (
    DOCUMENT_BODY_PARAMS,
    DOWNLOAD_PARAMS,
    EMBEDDED_SIGNING_JS,
    EversignClient,
    javascript_tag,
)

# Configuration
from .config import Credentials, Settings

# Exceptions
from .exceptions import (
    ConfigurationError,
    DownloadError,
    EversignAPIError,
    EversignError,
    RequestBuildError,
)

# Logging
from .logging import (
    bind_context,
    clear_context,
    configure_from_settings,
    configure_logging,
    get_logger,
    unbind_context,
)

# Requests
from .request import ParamLocation, Request

# Results
from .result import Err, Ok, Result

# Webhooks
from .webhooks import (
    DocumentChanged,
    DocumentCompleted,
    DocumentEventHandler,
    Unrecognized,
    WebhookDispatcher,
    classify_event,
)

__all__ = [
    # Version
    "__version__",
    # Client
    "DOCUMENT_BODY_PARAMS",
    "DOWNLOAD_PARAMS",
    "EMBEDDED_SIGNING_JS",
    "EversignClient",
    "javascript_tag",
    # Configuration
    "Credentials",
    "Settings",
    # Exceptions
    "ConfigurationError",
    "DownloadError",
    "EversignAPIError",
    "EversignError",
    "RequestBuildError",
    # Logging
    "bind_context",
    "clear_context",
    "configure_from_settings",
    "configure_logging",
    "get_logger",
    "unbind_context",
    # Requests
    "ParamLocation",
    "Request",
    # Results
    "Err",
    "Ok",
    "Result",
    # Webhooks
    "DocumentChanged",
    "DocumentCompleted",
    "DocumentEventHandler",
    "Unrecognized",
    "WebhookDispatcher",
    "classify_event",
]
