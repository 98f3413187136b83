"""SQLAlchemy ORM models for blob persistence.

Two tables:
- blobs: one row per live blob (metadata plus a pointer to its content)
- chunks: the chunk payloads, keyed by (content_id, n), used when chunks are
  kept in the database
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    DateTime,
    Integer,
    LargeBinary,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class BlobTable(Base):
    """Blob records.

    ``content_id`` names the chunk namespace holding the current content.
    It equals ``id`` after the first upload and changes on every content
    replace, so the swap to new content is a single row update.
    """

    __tablename__ = "blobs"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)

    # Original filename of the uploaded stream
    filename: Mapped[str] = mapped_column(Text, nullable=False)

    # User-supplied label, mutable
    title: Mapped[str] = mapped_column(Text, nullable=False)

    length: Mapped[int] = mapped_column(BigInteger, nullable=False)
    content_type: Mapped[str] = mapped_column(String(255), nullable=False)
    chunk_size: Mapped[int] = mapped_column(Integer, nullable=False)
    chunk_count: Mapped[int] = mapped_column(Integer, nullable=False)

    content_id: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class ChunkTable(Base):
    """Chunk payloads for the database chunk store."""

    __tablename__ = "chunks"

    content_id: Mapped[str] = mapped_column(String(32), primary_key=True)

    # Zero-based sequence index within the content
    n: Mapped[int] = mapped_column(Integer, primary_key=True)

    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
