"""
Database models for posts.

Defines the SQLAlchemy Base with a naming convention for deterministic
constraint and index names.
"""

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    DateTime,
    Identity,
    Index,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Text,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all database models."""

    metadata = MetaData(naming_convention=naming_convention)


class Posts(Base):
    __tablename__ = "posts"
    __table_args__ = (
        PrimaryKeyConstraint("id", name="posts_pkey"),
        Index("idx_posts_author", "author_id"),
        Index("idx_posts_status_created", "status", "created_at"),
    )

    # IDs start at 1; 0 is reserved as the exclude-all inclusion sentinel
    id: Mapped[int] = mapped_column(BigInteger, Identity(start=1))
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(20), server_default=text("'publish'"))
    author_id: Mapped[int | None] = mapped_column(BigInteger)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=text("CURRENT_TIMESTAMP")
    )
