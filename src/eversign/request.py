"""Request descriptors for the eversign REST API.

A ``Request`` is an immutable value built up through a chain of builder
steps, each returning a new descriptor. Parameters are placed according
to their location: query string, headers, JSON body, multipart field,
multipart file, or form field.

Example:
    ```python
    request = (
        Request()
        .set_method("GET")
        .set_url("/download_final_document")
        .add_credentials(credentials)
        .add_param(ParamLocation.QUERY, "document_hash", document_hash)
        .add_optional_params(DOWNLOAD_PARAMS, {"audit_trail": 1})
    )
    response = await http.send(request.to_httpx(http))
    ```
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Union

from .exceptions import RequestBuildError

if TYPE_CHECKING:
    import httpx

    from .config import Credentials

# Key that replaces the whole body instead of adding a field to it
BODY_KEY = "body"


class ParamLocation(str, Enum):
    """Where a request parameter is placed."""

    QUERY = "query"
    HEADERS = "headers"
    BODY = "body"
    FILE = "file"
    FORM = "form"


@dataclass(frozen=True)
class JsonBody:
    """A body sent verbatim as JSON."""

    data: Any


@dataclass(frozen=True)
class MultipartField:
    """A named multipart field holding JSON-encoded content."""

    name: str
    content: str
    content_type: str = "application/json"

    def to_httpx(self) -> tuple[str, tuple[None, str, str]]:
        return (self.name, (None, self.content, self.content_type))


@dataclass(frozen=True)
class MultipartFile:
    """A named multipart file part read from a path or raw bytes."""

    name: str
    source: str | os.PathLike[str] | bytes

    def to_httpx(self) -> tuple[str, tuple[str, bytes]]:
        if isinstance(self.source, bytes):
            return (self.name, (self.name, self.source))
        path = Path(self.source)
        return (self.name, (path.name, path.read_bytes()))


@dataclass(frozen=True)
class Multipart:
    """An ordered collection of multipart parts."""

    parts: tuple[MultipartField | MultipartFile, ...] = ()

    def add(self, part: MultipartField | MultipartFile) -> Multipart:
        return Multipart(parts=(*self.parts, part))


@dataclass(frozen=True)
class FormBody:
    """A url-encoded form; later values overwrite earlier ones."""

    fields: Mapping[str, Any] = field(default_factory=dict)

    def set(self, key: str, value: Any) -> FormBody:
        return FormBody(fields={**self.fields, key: value})


Body = Union[JsonBody, Multipart, FormBody, None]


def _location(location: ParamLocation | str, key: str) -> ParamLocation:
    try:
        return ParamLocation(location)
    except ValueError:
        raise RequestBuildError(
            f"Unknown parameter location {location!r} for {key!r}",
            location=location,
            key=key,
        ) from None


@dataclass(frozen=True)
class Request:
    """Immutable description of one outbound eversign request.

    Attributes:
        method: HTTP method; set at most once.
        url: Path relative to the API base URL; set at most once.
        query: Ordered query parameters, duplicates allowed.
        body: JSON, multipart, or form body.
        headers: Extra request headers.
    """

    method: str | None = None
    url: str | None = None
    query: tuple[tuple[str, Any], ...] = ()
    body: Body = None
    headers: Mapping[str, str] = field(default_factory=dict)

    def set_method(self, method: str) -> Request:
        """Set the HTTP method unless one is already set."""
        if self.method is not None:
            return self
        return replace(self, method=method.upper())

    def set_url(self, url: str) -> Request:
        """Set the request path unless one is already set."""
        if self.url is not None:
            return self
        return replace(self, url=url)

    def add_param(self, location: ParamLocation | str, key: str, value: Any) -> Request:
        """Place a single parameter.

        Args:
            location: Where the parameter goes.
            key: Parameter name. ``"body"`` at the body location replaces
                the whole body with ``value``.
            value: Parameter value. For ``file`` a path or bytes.

        Returns:
            A new Request including the parameter.

        Raises:
            RequestBuildError: If the location is unknown or the current
                body cannot take the parameter.
        """
        where = _location(location, key)

        if where is ParamLocation.QUERY:
            return replace(self, query=(*self.query, (key, value)))

        if where is ParamLocation.HEADERS:
            return replace(self, headers={**self.headers, key: str(value)})

        if where is ParamLocation.BODY:
            if key == BODY_KEY:
                return replace(self, body=JsonBody(value))
            return replace(self, body=self._with_body_field(key, value))

        if where is ParamLocation.FILE:
            return replace(self, body=self._multipart(key).add(MultipartFile(key, value)))

        # ParamLocation.FORM
        if self.body is None:
            return replace(self, body=FormBody({key: value}))
        if isinstance(self.body, FormBody):
            return replace(self, body=self.body.set(key, value))
        raise RequestBuildError(
            f"Cannot add form field {key!r} to a {type(self.body).__name__}",
            location=where,
            key=key,
        )

    def _with_body_field(self, key: str, value: Any) -> Body:
        # A JSON object body takes the key directly
        if isinstance(self.body, JsonBody) and isinstance(self.body.data, dict):
            return JsonBody({**self.body.data, key: value})
        return self._multipart(key).add(MultipartField(key, json.dumps(value)))

    def _multipart(self, key: str) -> Multipart:
        if self.body is None:
            return Multipart()
        if isinstance(self.body, Multipart):
            return self.body
        raise RequestBuildError(
            f"Cannot add multipart part {key!r} to a {type(self.body).__name__}",
            key=key,
        )

    def add_optional_params(
        self,
        definitions: Mapping[str, ParamLocation | str],
        options: Mapping[str, Any] | Iterable[tuple[str, Any]],
    ) -> Request:
        """Place every supplied option that appears in ``definitions``.

        Options without a definition are dropped without error so callers
        can pass fields this client does not know about yet.

        Args:
            definitions: Parameter name to location.
            options: Supplied options, as a mapping or ``(key, value)`` pairs.

        Returns:
            A new Request including the known options.
        """
        pairs = options.items() if isinstance(options, Mapping) else options
        request = self
        for key, value in pairs:
            location = definitions.get(key)
            if location is None:
                continue
            request = request.add_param(location, key, value)
        return request

    def add_credentials(self, credentials: Credentials) -> Request:
        """Append ``access_key``, ``business_id`` and ``language`` to the query."""
        return (
            self.add_param(ParamLocation.QUERY, "access_key", credentials.access_key)
            .add_param(ParamLocation.QUERY, "business_id", credentials.business_id)
            .add_param(ParamLocation.QUERY, "language", credentials.language)
        )

    def to_httpx(self, client: httpx.AsyncClient | httpx.Client) -> httpx.Request:
        """Build the ``httpx.Request`` for this descriptor.

        Args:
            client: Client whose base URL, timeout and default headers apply.

        Raises:
            RequestBuildError: If method or URL is missing.
        """
        if self.method is None or self.url is None:
            raise RequestBuildError("A request needs both a method and a URL")

        kwargs: dict[str, Any] = {}
        if self.query:
            kwargs["params"] = list(self.query)
        if self.headers:
            kwargs["headers"] = dict(self.headers)

        if isinstance(self.body, JsonBody):
            kwargs["json"] = self.body.data
        elif isinstance(self.body, FormBody):
            kwargs["data"] = dict(self.body.fields)
        elif isinstance(self.body, Multipart):
            kwargs["files"] = [part.to_httpx() for part in self.body.parts]

        return client.build_request(self.method, self.url, **kwargs)
