import logging
from typing import Optional, Protocol
from sqlalchemy import select

from social.graze.authinfo.database import Database
from social.graze.authinfo.errors import UserNotFound
from social.graze.authinfo.model.user import User

logger = logging.getLogger(__name__)


class UserLookup(Protocol):
    async def get_user_by_login(self, login_or_email: str) -> User: ...


class SQLUserStore:
    """Reads local users from the ``user`` table."""

    def __init__(self, database: Database) -> None:
        self.database = database

    async def get_user_by_login(self, login_or_email: str) -> User:
        """
        Find a user by login, falling back to email when the value looks like one.

        Raises:
            UserNotFound: If neither the login nor the email matches a user
        """
        if not login_or_email:
            raise UserNotFound.no_user(login_or_email)

        async with self.database.session() as database_session:
            user: Optional[User] = (
                await database_session.scalars(
                    select(User).where(User.login == login_or_email)
                )
            ).first()

            if user is None and "@" in login_or_email:
                user = (
                    await database_session.scalars(
                        select(User).where(User.email == login_or_email)
                    )
                ).first()

        if user is None:
            raise UserNotFound.no_user(login_or_email)

        return user
