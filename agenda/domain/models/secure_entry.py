"""Secure entry — encrypted key/value pair of the local secure store."""

from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func

from agenda.infrastructure.database import Base


class SecureEntry(Base):
    __tablename__ = "secure_entries"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)  # Fernet token
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<SecureEntry {self.key}>"
