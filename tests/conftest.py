from __future__ import annotations

import io
from datetime import datetime, timedelta, timezone

import pytest

from api import create_app
from models import storage
from utils.assets import UploadedAsset, UploadError


class FakeClock:
    def __init__(self):
        self.now = datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeUploader:
    """In-memory stand-in for the ImageKit client."""

    def __init__(self):
        self.files: dict[str, str] = {}
        self.deleted: list[str] = []
        self.fail_upload = False
        self.fail_delete = False
        self._seq = 0

    def upload(self, stream, filename):
        if self.fail_upload:
            raise UploadError("asset host unavailable")
        stream.read()
        self._seq += 1
        file_id = f"file-{self._seq}"
        url = f"https://ik.example.test/avatars/{filename}"
        self.files[file_id] = url
        return UploadedAsset(url=url, file_id=file_id)

    def delete(self, file_id):
        if self.fail_delete:
            raise UploadError("delete failed")
        self.files.pop(file_id, None)
        self.deleted.append(file_id)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
def app(clock, uploader):
    app = create_app("testing", uploader=uploader, clock=clock)
    yield app
    storage.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sessions(app):
    return app.extensions["session_service"]


@pytest.fixture
def accounts(app):
    return app.extensions["account_service"]


@pytest.fixture
def alice(accounts):
    result = accounts.register("alice", "alice@x.com", "secret123", io.BytesIO(b"png"), "alice.png")
    return result.unwrap()
