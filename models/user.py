from models.base_model import Base, BaseModel
from sqlalchemy import Column, String, Text


class User(BaseModel, Base):
    """A registered account.

    refresh_token holds the single live refresh token for the account, or
    NULL when there is no active session. Only the session store writes it.
    """
    __tablename__ = "users"
    username = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    avatar = Column(String(1024), nullable=False)
    avatar_file_id = Column(String(255), nullable=False)
    refresh_token = Column(Text, nullable=True)

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")

    def __repr__(self):
        return f"<User username={self.username}>"
