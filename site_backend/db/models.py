"""SQLAlchemy models: one generic table of JSON documents keyed by collection."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String, Text, JSON, func

from .session import Base


class Document(Base):
    __tablename__ = "documents"

    collection = Column(String(64), primary_key=True)
    key = Column(String(255), primary_key=True)
    data = Column(JSON, nullable=False, default=dict)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class DocumentBackup(Base):
    __tablename__ = "document_backups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    collection = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
