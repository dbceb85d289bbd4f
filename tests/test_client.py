"""Tests for the eversign REST client."""

from __future__ import annotations

import json

import httpx
import pytest
from conftest import RecordingTransport, pdf_response

from eversign.client import EMBEDDED_SIGNING_JS, EversignClient, javascript_tag
from eversign.config import Settings
from eversign.exceptions import ConfigurationError, EversignAPIError
from eversign.result import Err, Ok


def query_of(request: httpx.Request) -> list[tuple[str, str]]:
    return request.url.params.multi_items()


CREDENTIAL_QUERY = [("access_key", "test_key"), ("business_id", "42"), ("language", "en")]


class TestClientSetup:
    """Tests for client construction."""

    def test_requires_access_key(self):
        with pytest.raises(ConfigurationError):
            EversignClient(Settings(_env_file=None, access_key=""))

    def test_credentials_from_settings(self, settings: Settings):
        client = EversignClient(settings, http_client=httpx.AsyncClient())
        assert client.credentials.access_key == "test_key"
        assert client.credentials.business_id == 42
        assert client.credentials.sandbox == 1

    @pytest.mark.asyncio
    async def test_default_http_client(self, settings: Settings):
        """Client creates and closes its own httpx client."""
        async with EversignClient(settings) as client:
            assert str(client._http.base_url) == "https://api.eversign.com/api/"
            assert client._http.timeout.read == 30.0
            assert client._http.headers["User-Agent"] == "eversign-python"
        assert client._http.is_closed

    @pytest.mark.asyncio
    async def test_injected_http_client_is_not_closed(self, settings: Settings):
        http = httpx.AsyncClient()
        async with EversignClient(settings, http_client=http):
            pass
        assert not http.is_closed
        await http.aclose()


class TestListDocuments:
    """Tests for list_documents."""

    @pytest.mark.asyncio
    async def test_defaults_to_all(self, make_client):
        transport = RecordingTransport([httpx.Response(200, json=[{"document_hash": "D1"}])])
        result = await make_client(transport).list_documents()

        assert result == Ok([{"document_hash": "D1"}])
        request = transport.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/api/document"
        assert query_of(request) == [*CREDENTIAL_QUERY, ("type", "all")]

    @pytest.mark.asyncio
    async def test_type_filter(self, make_client):
        transport = RecordingTransport([httpx.Response(200, json=[])])
        await make_client(transport).list_documents("completed")
        assert ("type", "completed") in query_of(transport.requests[0])


class TestCreateDocument:
    """Tests for create_document."""

    @pytest.mark.asyncio
    async def test_body_carries_payload_and_sandbox(self, make_client):
        transport = RecordingTransport([httpx.Response(200, json={"document_hash": "D1"})])
        payload = {
            "use_hidden_tags": 1,
            "files": [{"name": "xyz.pdf", "file_base64": "JVBERi0="}],
            "meta": {"customer_id": 123, "offer_id": 123},
            "signers": [{"id": 1, "name": "Zack McCracken", "email": "zack@example.int"}],
        }

        result = await make_client(transport).create_document(payload)

        assert result == Ok({"document_hash": "D1"})
        request = transport.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/api/document"
        assert query_of(request) == CREDENTIAL_QUERY
        assert json.loads(request.content) == {**payload, "sandbox": 1}

    @pytest.mark.asyncio
    async def test_sandbox_from_settings(self, settings: Settings):
        transport = RecordingTransport([httpx.Response(200, json={})])
        live = settings.model_copy(update={"sandbox": 0})
        client = EversignClient(
            live, http_client=httpx.AsyncClient(transport=transport, base_url=live.api_url)
        )

        await client.create_document({"title": "Offer"})

        assert json.loads(transport.requests[0].content)["sandbox"] == 0

    @pytest.mark.asyncio
    async def test_keyword_options_filtered(self, make_client):
        transport = RecordingTransport([httpx.Response(200, json={})])

        await make_client(transport).create_document(
            {"files": []}, title="Offer", is_draft=1, not_a_field="dropped"
        )

        body = json.loads(transport.requests[0].content)
        assert body == {"files": [], "title": "Offer", "is_draft": 1, "sandbox": 1}

    @pytest.mark.asyncio
    async def test_does_not_mutate_params(self, make_client):
        transport = RecordingTransport([httpx.Response(200, json={})])
        payload = {"title": "Offer"}
        await make_client(transport).create_document(payload)
        assert payload == {"title": "Offer"}


class TestDocumentOperations:
    """Tests for operations addressed by document hash."""

    @pytest.mark.asyncio
    async def test_embedded_signing_url(self, make_client):
        transport = RecordingTransport([httpx.Response(200, json={"signers": []})])
        result = await make_client(transport).get_embedded_signing_url("D1")

        assert result == Ok({"signers": []})
        request = transport.requests[0]
        assert request.method == "GET"
        assert query_of(request) == [*CREDENTIAL_QUERY, ("document_hash", "D1")]

    @pytest.mark.asyncio
    async def test_delete_document(self, make_client):
        transport = RecordingTransport([httpx.Response(200, json={"success": True})])
        result = await make_client(transport).delete_document("D1")

        assert result == Ok({"success": True})
        request = transport.requests[0]
        assert request.method == "DELETE"
        assert request.url.path == "/api/document"
        assert query_of(request) == [*CREDENTIAL_QUERY, ("document_hash", "D1")]

    @pytest.mark.asyncio
    async def test_cancel_document(self, make_client):
        transport = RecordingTransport([httpx.Response(200, json={"success": True})])
        await make_client(transport).cancel_document("D1")

        request = transport.requests[0]
        assert request.method == "DELETE"
        assert query_of(request) == [*CREDENTIAL_QUERY, ("document_hash", "D1"), ("cancel", "1")]


class TestDownloadDocument:
    """Tests for download_document."""

    @pytest.mark.asyncio
    async def test_returns_pdf_bytes(self, make_client):
        transport = RecordingTransport([pdf_response(b"%PDF-1.4 final")])
        result = await make_client(transport).download_document("D1")

        assert result == Ok(b"%PDF-1.4 final")
        request = transport.requests[0]
        assert request.url.path == "/api/download_final_document"
        assert query_of(request) == [*CREDENTIAL_QUERY, ("document_hash", "D1")]

    @pytest.mark.asyncio
    async def test_optional_query_params(self, make_client):
        transport = RecordingTransport([pdf_response()])
        await make_client(transport).download_document("D1", audit_trail=1, color="blue")

        query = query_of(transport.requests[0])
        assert ("audit_trail", "1") in query
        assert all(key != "color" for key, _ in query)

    @pytest.mark.asyncio
    async def test_url_only_returns_json(self, make_client):
        transport = RecordingTransport([httpx.Response(200, json={"url": "https://x/y.pdf"})])
        result = await make_client(transport).download_document("D1", url_only=1)
        assert result == Ok({"url": "https://x/y.pdf"})


class TestFailures:
    """Failures come back as Err, never raised."""

    @pytest.mark.asyncio
    async def test_http_status_error(self, make_client):
        transport = RecordingTransport([httpx.Response(503, text="unavailable")])
        result = await make_client(transport).list_documents()

        assert isinstance(result, Err)
        assert isinstance(result.error, httpx.HTTPStatusError)
        assert result.error.response.status_code == 503

    @pytest.mark.asyncio
    async def test_transport_error(self, make_client):
        transport = RecordingTransport([httpx.ConnectError("Connection refused")])
        result = await make_client(transport).delete_document("D1")

        assert isinstance(result, Err)
        assert isinstance(result.error, httpx.ConnectError)
        assert not result.is_ok()

    @pytest.mark.asyncio
    async def test_api_error_body(self, make_client):
        body = {
            "success": False,
            "error": {"code": 101, "type": "invalid_access_key", "info": "Invalid access key"},
        }
        transport = RecordingTransport([httpx.Response(200, json=body)])
        result = await make_client(transport).get_embedded_signing_url("D1")

        assert isinstance(result, Err)
        assert isinstance(result.error, EversignAPIError)
        assert result.error.error_code == 101
        assert result.error.error_type == "invalid_access_key"
        assert result.error.message == "Invalid access key"

    @pytest.mark.asyncio
    async def test_invalid_json(self, make_client):
        transport = RecordingTransport(
            [httpx.Response(200, content=b"<html>", headers={"content-type": "text/html"})]
        )
        result = await make_client(transport).list_documents()

        assert isinstance(result, Err)
        assert isinstance(result.error, httpx.DecodingError)


class TestJavascriptTag:
    """Tests for the embedded-signing script tag."""

    def test_script_tag(self):
        tag = javascript_tag()
        assert tag.startswith('<script type="text/javascript"')
        assert f'src="{EMBEDDED_SIGNING_JS}"' in tag
        assert tag.endswith("</script>")
