"""
Avatar uploads to ImageKit over its REST API (via requests).

upload() returns the public url and the ImageKit fileId; delete() removes a
file by id and is what registration calls to undo an upload.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import BinaryIO, Protocol

import requests

logger = logging.getLogger(__name__)


class UploadError(Exception):
    """The asset host rejected the request or could not be reached."""


@dataclass(frozen=True)
class UploadedAsset:
    url: str
    file_id: str


class AssetUploader(Protocol):
    def upload(self, stream: BinaryIO, filename: str) -> UploadedAsset: ...

    def delete(self, file_id: str) -> None: ...


class ImageKitUploader:
    def __init__(self, private_key: str, upload_url: str, api_url: str,
                 folder: str = "/", timeout: float = 10.0):
        self.private_key = private_key
        self.upload_url = upload_url.rstrip("/")
        self.api_url = api_url.rstrip("/")
        self.folder = folder
        self.timeout = timeout

    @property
    def _auth(self):
        # ImageKit: private key as the basic-auth username, empty password
        return (self.private_key, "")

    def upload(self, stream: BinaryIO, filename: str) -> UploadedAsset:
        if not self.private_key:
            raise UploadError("ImageKit private key is not configured")
        try:
            resp = requests.post(
                f"{self.upload_url}/api/v1/files/upload",
                auth=self._auth,
                files={"file": (filename, stream)},
                data={"fileName": filename, "folder": self.folder, "useUniqueFileName": "true"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            body = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise UploadError(f"upload of {filename!r} failed: {exc}") from exc

        try:
            return UploadedAsset(url=body["url"], file_id=body["fileId"])
        except (KeyError, TypeError) as exc:
            raise UploadError("unexpected upload response") from exc

    def delete(self, file_id: str) -> None:
        try:
            resp = requests.delete(
                f"{self.api_url}/v1/files/{file_id}",
                auth=self._auth,
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise UploadError(f"delete of {file_id!r} failed: {exc}") from exc
        logger.info("Deleted asset %s", file_id)


def uploader_from_config(config) -> ImageKitUploader:
    return ImageKitUploader(
        private_key=config.get("IMAGEKIT_PRIVATE_KEY", ""),
        upload_url=config.get("IMAGEKIT_UPLOAD_URL", "https://upload.imagekit.io"),
        api_url=config.get("IMAGEKIT_API_URL", "https://api.imagekit.io"),
        folder=config.get("IMAGEKIT_FOLDER", "/"),
        timeout=config.get("UPLOAD_TIMEOUT_SECONDS", 10.0),
    )
