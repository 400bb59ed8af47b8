"""External identity records for users authenticated through an auth module.

Provides the SQLAlchemy model for the ``user_auth`` table. Rows are appended on each
login, so a user may have several rows for the same auth module; readers select the
most recently created one.
"""
from datetime import datetime
from typing import Optional
from sqlalchemy import DateTime, Index, Text
from sqlalchemy.orm import Mapped, mapped_column

from social.graze.authinfo.model.base import Base, bigint, bigintpk, str190


SECRET_COLUMNS = (
    "o_auth_access_token",
    "o_auth_refresh_token",
    "o_auth_token_type",
    "o_auth_id_token",
)
"""Columns holding base64 encoded ciphertext at rest."""


class UserAuth(Base):
    """An external identity attached to a local user.

    The ``o_auth_*`` token columns hold base64 encoded ciphertext in the database and
    plaintext on instances returned by ``AuthInfoStore.get_auth_info``. An empty string
    means the provider did not return that value.
    """
    __tablename__ = "user_auth"

    id: Mapped[bigintpk]
    user_id: Mapped[int] = mapped_column(bigint, nullable=False)
    auth_module: Mapped[str190]
    auth_id: Mapped[str190]
    o_auth_access_token: Mapped[str] = mapped_column(Text, nullable=False, default="")
    o_auth_refresh_token: Mapped[str] = mapped_column(Text, nullable=False, default="")
    o_auth_token_type: Mapped[str] = mapped_column(Text, nullable=False, default="")
    o_auth_id_token: Mapped[str] = mapped_column(Text, nullable=False, default="")
    o_auth_expiry: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_user_auth_auth_module_auth_id", "auth_module", "auth_id"),
        Index("idx_user_auth_user_id_auth_module", "user_id", "auth_module"),
    )
