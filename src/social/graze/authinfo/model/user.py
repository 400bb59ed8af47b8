"""Local user account model.

The auth info store only reads this table; accounts are owned by the user service.
"""
from datetime import datetime
from typing import Optional
from sqlalchemy import Boolean, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column

from social.graze.authinfo.model.base import Base, bigintpk, str190, str255


class User(Base):
    __tablename__ = "user"

    id: Mapped[bigintpk]
    login: Mapped[str190]
    email: Mapped[str190]
    name: Mapped[str255] = mapped_column(default="")
    is_disabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    updated: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("idx_user_login", "login", unique=True),
        Index("idx_user_email", "email", unique=True),
    )
