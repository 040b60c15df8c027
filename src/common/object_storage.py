"""Object storage client for ticket PDFs and PDF templates.

Talks to a Supabase Storage compatible HTTP API:

- ``POST {url}/storage/v1/object/{bucket}/{path}`` uploads an object
- ``GET {url}/storage/v1/object/{bucket}/{path}`` downloads it

Requests authenticate with the service key as a bearer token. Every
transport failure or non-2xx response is raised as ``BlobStoreError`` so
callers decide whether a failure is fatal.
"""

import typing as t
from functools import lru_cache
from urllib.parse import quote

import httpx
import structlog
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

logger = structlog.get_logger(__name__)


class BlobStoreError(Exception):
    """Raised when an object storage request fails.

    Attributes:
        path: Object path the request was made for.
        status_code: HTTP status code, if a response was received.
    """

    def __init__(self, message: str, path: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.path = path
        self.status_code = status_code


class BlobStore(t.Protocol):
    def upload(self, path: str, data: bytes, content_type: str) -> str: ...

    def download(self, path: str) -> bytes: ...


class BlobStoreClient:
    """Upload and download objects in a single storage bucket."""

    def __init__(
        self,
        base_url: str | None = None,
        service_key: str | None = None,
        bucket: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Storage service URL. Defaults to ``OBJECT_STORAGE_URL``.
            service_key: Service credential. Defaults to ``OBJECT_STORAGE_SERVICE_KEY``.
            bucket: Bucket name. Defaults to ``OBJECT_STORAGE_BUCKET``.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used to stub the network in tests.

        Raises:
            ImproperlyConfigured: If the URL or the service key is missing.
        """
        self.base_url = (base_url or settings.OBJECT_STORAGE_URL).rstrip("/")
        self.service_key = service_key or settings.OBJECT_STORAGE_SERVICE_KEY
        self.bucket = bucket or settings.OBJECT_STORAGE_BUCKET
        if not self.base_url or not self.service_key:
            raise ImproperlyConfigured("OBJECT_STORAGE_URL and OBJECT_STORAGE_SERVICE_KEY must be set.")

        self._client = httpx.Client(
            base_url=f"{self.base_url}/storage/v1",
            headers={
                "Authorization": f"Bearer {self.service_key}",
                "apikey": self.service_key,
            },
            timeout=httpx.Timeout(timeout or settings.OBJECT_STORAGE_TIMEOUT, connect=10.0),
            transport=transport,
        )

    def object_url(self, path: str) -> str:
        """Return the API path of an object, relative to the client base URL."""
        return f"/object/{quote(self.bucket)}/{quote(path.lstrip('/'))}"

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        """Upload an object, overwriting any existing object at the same path.

        Args:
            path: Object path inside the bucket.
            data: Object content.
            content_type: MIME type stored with the object.

        Returns:
            The path the object was stored under.

        Raises:
            BlobStoreError: If the upload fails.
        """
        headers = {
            "Content-Type": content_type,
            "cache-control": f"max-age={settings.OBJECT_STORAGE_CACHE_CONTROL}",
            "x-upsert": "true",
        }
        response = self._request("POST", path, content=data, headers=headers)
        logger.info("object_uploaded", bucket=self.bucket, path=path, size=len(data), status=response.status_code)
        return path

    def download(self, path: str) -> bytes:
        """Download an object.

        Raises:
            BlobStoreError: If the object is missing or the request fails.
        """
        response = self._request("GET", path)
        return response.content

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, **kwargs: t.Any) -> httpx.Response:
        try:
            response = self._client.request(method, self.object_url(path), **kwargs)
        except httpx.HTTPError as e:
            logger.warning("object_storage_request_failed", method=method, bucket=self.bucket, path=path, error=str(e))
            raise BlobStoreError(f"{method} {path} failed: {e}", path=path) from e

        if response.is_success:
            return response

        logger.warning(
            "object_storage_error_response",
            method=method,
            bucket=self.bucket,
            path=path,
            status=response.status_code,
            body=response.text[:200],
        )
        raise BlobStoreError(
            f"{method} {path} returned status {response.status_code}",
            path=path,
            status_code=response.status_code,
        )


@lru_cache(maxsize=1)
def get_blob_store() -> BlobStoreClient:
    """Get a cached BlobStoreClient instance.

    The underlying httpx client keeps a connection pool, so one instance
    lives for the process lifetime.
    """
    return BlobStoreClient()
