"""Auth account — credentials owned by the auth provider, maps to the 'auth_accounts' table."""

from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.sql import func

from agenda.infrastructure.database import Base


class AuthAccount(Base):
    __tablename__ = "auth_accounts"

    uid = Column(String(64), primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    display_name = Column(String(200), nullable=True)
    photo_url = Column(String(1000), nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<AuthAccount {self.email}>"
