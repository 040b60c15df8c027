"""
Project-wide fixtures: Celery eager mode, object storage settings and an
in-memory blob store standing in for the storage service.
"""

import typing as t

import faker
import pymupdf
import pytest
from django.conf import settings
from pytest import MonkeyPatch

from boxoffice.celery import app as celery_app
from common.object_storage import BlobStoreError

A4_WIDTH = 595
A4_HEIGHT = 842


def make_template_pdf(pages: int = 1, width: float = A4_WIDTH, height: float = A4_HEIGHT) -> bytes:
    """Build a blank PDF usable as a ticket template."""
    doc = pymupdf.open()
    for _ in range(pages):
        doc.new_page(width=width, height=height)
    data = doc.tobytes()
    doc.close()
    return data


class InMemoryBlobStore:
    """Blob store keeping objects in a dict. Records every upload."""

    def __init__(self, objects: dict[str, bytes] | None = None) -> None:
        self.objects: dict[str, bytes] = dict(objects or {})
        self.uploads: list[tuple[str, str]] = []
        self.downloads: list[str] = []

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        self.uploads.append((path, content_type))
        self.objects[path] = data
        return path

    def download(self, path: str) -> bytes:
        self.downloads.append(path)
        try:
            return self.objects[path]
        except KeyError as e:
            raise BlobStoreError(f"GET {path} returned status 404", path=path, status_code=404) from e


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any) -> None:
    """Enable Celery eager mode for tests so tasks execute synchronously."""
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True
    celery_app.conf.update(task_always_eager=True, task_eager_propagates=True)


@pytest.fixture(autouse=True)
def object_storage_settings(settings: t.Any) -> None:
    """Point the storage client at a fake service."""
    settings.OBJECT_STORAGE_URL = "https://storage.example.test"
    settings.OBJECT_STORAGE_SERVICE_KEY = "test-service-key"
    settings.OBJECT_STORAGE_BUCKET = "assets"


@pytest.fixture
def template_pdf() -> bytes:
    return make_template_pdf()


@pytest.fixture
def blob_store(template_pdf: bytes) -> InMemoryBlobStore:
    """A blob store that already holds the default ticket template."""
    return InMemoryBlobStore({settings.TICKET_PDF_TEMPLATE_PATH: template_pdf})


@pytest.fixture(autouse=True)
def use_in_memory_blob_store(monkeypatch: MonkeyPatch, blob_store: InMemoryBlobStore) -> InMemoryBlobStore:
    """Route every object storage access through the in-memory store.

    This fixture is autouse=True, so no test ever talks to a real storage service.
    """
    monkeypatch.setattr("common.object_storage.get_blob_store", lambda: blob_store)
    return blob_store


@pytest.fixture
def fake() -> faker.Faker:
    return faker.Faker()
