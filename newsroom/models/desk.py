from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from newsroom.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Desk(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A news desk / department (national, sports, business...)."""

    __tablename__ = "desks"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    code: Mapped[str] = mapped_column(String(20), unique=True, index=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str] = mapped_column(String(7), default="#3498db", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    users = relationship("User", back_populates="desk", lazy="noload")
