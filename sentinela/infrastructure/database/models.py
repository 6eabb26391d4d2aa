"""SQLAlchemy models for the Sentinela service."""
from datetime import datetime
from typing import List, Optional

from pgvector.sqlalchemy import Vector
from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from sentinela.core.config import settings
from sentinela.domain.entities.media import MediaType


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Person(Base):
    """Identity record; confidential rows are visible to privileged roles only."""

    __tablename__ = "people"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    nickname: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    cpf: Mapped[Optional[str]] = mapped_column(
        String(14),
        unique=True,
        nullable=True,
        comment="Taxpayer identifier, digits only"
    )
    rg: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    voter_id: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    identity_key: Mapped[Optional[str]] = mapped_column(
        String(512),
        unique=True,
        nullable=True,
        comment="Normalized full name and mother's name"
    )

    address_primary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    address_secondary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    mother_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    father_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    warrant_status: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    warrant_file_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_confidential: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default="false"
    )

    created_by: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_by: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    # Relationships
    media: Mapped[List["Media"]] = relationship(
        back_populates="person",
        cascade="all, delete-orphan",
        passive_deletes=True
    )


class Media(Base):
    """Photographic asset attached to a person; FACE rows may carry an embedding."""

    __tablename__ = "media"
    __table_args__ = (
        Index("idx_media_person_type", "person_id", "type"),
        Index(
            "idx_media_embedding_cosine",
            "embedding",
            postgresql_using="hnsw",
            postgresql_ops={"embedding": "vector_cosine_ops"},
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[MediaType] = mapped_column(
        Enum(MediaType, name="media_type_enum"),
        nullable=False
    )
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    label: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    person_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("people.id", ondelete="CASCADE"),
        nullable=False
    )
    embedding: Mapped[Optional[List[float]]] = mapped_column(
        Vector(settings.EMBEDDING_DIM),
        nullable=True,
        comment="Face feature vector, set once by the ingestion worker"
    )

    # Relationships
    person: Mapped[Person] = relationship(back_populates="media")

    @property
    def has_embedding(self) -> bool:
        return self.embedding is not None
