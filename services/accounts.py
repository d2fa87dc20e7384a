from __future__ import annotations

import logging
from typing import BinaryIO

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from models.user import User
from services.errors import (
    ServiceError,
    conflict,
    upstream_failure,
    validation_failed,
)
from services.result import Err, Ok, Result
from utils.assets import AssetUploader, UploadError
from utils.security import hash_password

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(self, storage, uploader: AssetUploader):
        self.storage = storage
        self.uploader = uploader

    def register(self, username: str, email: str, secret: str,
                 avatar: BinaryIO | None, avatar_name: str = "avatar") -> Result[User, ServiceError]:
        """
        Create an account after uploading its avatar.
        If anything fails once the avatar is on the asset host, the upload is
        deleted again before the error is returned.
        """
        username = (username or "").strip()
        email = (email or "").strip().lower()
        if not username or not email or not secret:
            return Err(validation_failed("All fields are required"))
        if avatar is None:
            return Err(validation_failed("Avatar is required"))

        session = self.storage.get_session()
        existing = session.query(User).filter(
            or_(User.username == username, User.email == email)
        ).first()
        if existing:
            return Err(conflict("User already exists"))

        try:
            asset = self.uploader.upload(avatar, avatar_name)
        except UploadError as exc:
            logger.error("Avatar upload failed: %s", exc)
            return Err(upstream_failure("Avatar upload failed"))

        try:
            user = User(
                username=username,
                email=email,
                password_hash=hash_password(secret),
                avatar=asset.url,
                avatar_file_id=asset.file_id,
            )
            self.storage.new(user)
            self.storage.save()
        except IntegrityError:
            # lost a race with a concurrent registration of the same name
            self._discard_asset(asset.file_id)
            return Err(conflict("User already exists"))
        except Exception:
            self.storage.rollback()
            self._discard_asset(asset.file_id)
            raise

        logger.info("Registered account %s", user.id)
        return Ok(user)

    def _discard_asset(self, file_id: str) -> None:
        try:
            self.uploader.delete(file_id)
        except Exception:
            logger.exception("Could not delete orphaned asset %s", file_id)
