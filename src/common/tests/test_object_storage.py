import typing as t

import httpx
import pytest
from django.core.exceptions import ImproperlyConfigured

from common.object_storage import BlobStoreClient, BlobStoreError

BASE_URL = "https://storage.example.test"


def make_client(transport: httpx.BaseTransport | None = None) -> BlobStoreClient:
    return BlobStoreClient(base_url=BASE_URL, service_key="secret-key", bucket="assets", transport=transport)


def test_upload_posts_object_with_upsert() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"Key": "assets/ticket-pdfs/ticket-1.pdf"})

    client = make_client(httpx.MockTransport(handler))

    path = client.upload("ticket-pdfs/ticket-1.pdf", b"%PDF-1.7", "application/pdf")

    assert path == "ticket-pdfs/ticket-1.pdf"
    request = requests[0]
    assert request.method == "POST"
    assert str(request.url) == f"{BASE_URL}/storage/v1/object/assets/ticket-pdfs/ticket-1.pdf"
    assert request.headers["Authorization"] == "Bearer secret-key"
    assert request.headers["apikey"] == "secret-key"
    assert request.headers["Content-Type"] == "application/pdf"
    assert request.headers["x-upsert"] == "true"
    assert request.headers["cache-control"] == "max-age=3600"
    assert request.content == b"%PDF-1.7"


def test_download_returns_content() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.path == "/storage/v1/object/assets/templates/ticket.pdf"
        return httpx.Response(200, content=b"template-bytes")

    client = make_client(httpx.MockTransport(handler))

    assert client.download("templates/ticket.pdf") == b"template-bytes"


def test_leading_slash_is_ignored() -> None:
    client = make_client()

    assert client.object_url("/ticket-pdfs/a.pdf") == "/object/assets/ticket-pdfs/a.pdf"


@pytest.mark.parametrize("status_code", [400, 404, 500])
def test_error_status_raises(status_code: int) -> None:
    client = make_client(httpx.MockTransport(lambda request: httpx.Response(status_code, text="nope")))

    with pytest.raises(BlobStoreError) as exc_info:
        client.download("missing.pdf")

    assert exc_info.value.status_code == status_code
    assert exc_info.value.path == "missing.pdf"


def test_transport_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(httpx.MockTransport(handler))

    with pytest.raises(BlobStoreError) as exc_info:
        client.upload("a.pdf", b"data", "application/pdf")

    assert exc_info.value.status_code is None
    assert "connection refused" in str(exc_info.value)


def test_settings_are_used_by_default() -> None:
    client = BlobStoreClient()

    assert client.base_url == "https://storage.example.test"
    assert client.service_key == "test-service-key"
    assert client.bucket == "assets"


def test_missing_credentials_are_rejected(settings: t.Any) -> None:
    settings.OBJECT_STORAGE_SERVICE_KEY = ""

    with pytest.raises(ImproperlyConfigured):
        BlobStoreClient()


def test_trailing_slash_in_url_is_stripped() -> None:
    client = BlobStoreClient(base_url=f"{BASE_URL}/", service_key="k")

    assert client.base_url == BASE_URL
