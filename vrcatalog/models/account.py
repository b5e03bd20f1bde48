"""
Account SQLAlchemy model.
Accounts are provisioned from identity-provider claims and never deleted.
"""

from datetime import datetime

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from vrcatalog.db.base import Base, UTCDateTime
from vrcatalog.models.asset import utcnow


class Account(Base):
    """Catalog account. The primary key is the identity provider's subject."""
    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        comment="Identity provider subject",
    )
    display_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
        comment="Name from the identity provider",
    )
    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Self-service profile description",
    )
    create_time: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
    )
    update_time: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, display_name={self.display_name})>"
