"""
Session store: the persisted refresh token of each account.

Each write is a single UPDATE on one users row followed by a commit, so a
concurrent reader sees either the old token or the new one, never a mix.
compare_and_set() is what makes rotation single-use: the UPDATE only matches
while the row still holds the token the caller presented.
"""
from __future__ import annotations

from sqlalchemy import select, update

from models.user import User


class SessionStore:
    def __init__(self, storage):
        self.storage = storage

    def get_current_refresh_token(self, account_id: str) -> str | None:
        session = self.storage.get_session()
        return session.execute(
            select(User.refresh_token).where(User.id == account_id)
        ).scalar_one_or_none()

    def set_current_refresh_token(self, account_id: str, token: str) -> None:
        self._write(
            update(User).where(User.id == account_id).values(refresh_token=token)
        )

    def clear_refresh_token(self, account_id: str) -> None:
        self._write(
            update(User).where(User.id == account_id).values(refresh_token=None)
        )

    def compare_and_set(self, account_id: str, expected: str, new: str) -> bool:
        """Replace expected with new; False if the stored token was no longer expected."""
        rowcount = self._write(
            update(User)
            .where(User.id == account_id, User.refresh_token == expected)
            .values(refresh_token=new)
        )
        return rowcount == 1

    def _write(self, stmt) -> int:
        session = self.storage.get_session()
        result = session.execute(stmt.execution_options(synchronize_session=False))
        self.storage.save()
        # loaded User objects must not keep serving the previous token
        session.expire_all()
        return result.rowcount
