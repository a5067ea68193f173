"""Document record — one schemaless document of a collection ('clients', 'schedules', 'users', 'salons')."""

from sqlalchemy import Column, String, JSON, DateTime
from sqlalchemy.sql import func

from agenda.infrastructure.database import Base


class DocumentRecord(Base):
    __tablename__ = "documents"

    collection = Column(String(100), primary_key=True)
    id = Column(String(100), primary_key=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<DocumentRecord {self.collection}/{self.id}>"
