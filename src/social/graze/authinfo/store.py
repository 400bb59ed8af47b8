"""
Auth info store.

Persists external identity records (``UserAuth``) and encrypts OAuth token material at
the storage boundary. Token fields are encrypted with the secrets service and base64
encoded before they are written, and decoded and decrypted after they are read.

Reads use a plain session. Every write runs in a single transactional session, so a
failure at any step leaves no partial state behind. Encryption happens before the
transaction is opened.
"""

import base64
import binascii
import contextlib
import logging
from datetime import datetime, timezone
from time import time
from typing import Any, Callable, Dict, Iterator, Optional, Tuple
from sqlalchemy import delete, select, update
import sentry_sdk

from social.graze.authinfo.commands import (
    DeleteAuthInfoCommand,
    ExternalUserInfo,
    GetAuthInfoQuery,
    GetExternalUserInfoByLoginQuery,
    OAuthToken,
    SetAuthInfoCommand,
    UpdateAuthInfoCommand,
)
from social.graze.authinfo.database import Database
from social.graze.authinfo.dispatch import HandlerRegistry
from social.graze.authinfo.encryption import EncryptionScope, SecretsService
from social.graze.authinfo.errors import AuthInfoError, SecretsError, UserNotFound
from social.graze.authinfo.metrics import MetricsClient, NoOpMetricsClient
from social.graze.authinfo.model.user import User
from social.graze.authinfo.model.user_auth import SECRET_COLUMNS, UserAuth
from social.graze.authinfo.users import UserLookup

logger = logging.getLogger(__name__)

DELETE_MATCH_COLUMNS = (
    "id",
    "user_id",
    "auth_module",
    "auth_id",
    "o_auth_expiry",
    "created",
)
"""
Columns compared when deleting a record. Token columns are left out: callers hold
plaintext while the table holds ciphertext, and Fernet ciphertext is not deterministic.
"""


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _populated(value: Any) -> bool:
    return value is not None and value != "" and value != 0


class AuthInfoStore:
    def __init__(
        self,
        database: Database,
        secrets_service: SecretsService,
        user_store: UserLookup,
        metrics_client: Optional[MetricsClient] = None,
        clock: Callable[[], datetime] = utc_now,
        metric_prefix: str = "authinfo",
    ) -> None:
        self.database = database
        self.secrets_service = secrets_service
        self.user_store = user_store
        self.metrics_client = metrics_client or NoOpMetricsClient()
        self.clock = clock
        self.metric_prefix = metric_prefix

    def register_handlers(self, registry: HandlerRegistry) -> None:
        registry.add_handler(
            GetExternalUserInfoByLoginQuery, self.get_external_user_info_by_login
        )
        registry.add_handler(GetAuthInfoQuery, self.get_auth_info)
        registry.add_handler(SetAuthInfoCommand, self.set_auth_info)
        registry.add_handler(UpdateAuthInfoCommand, self.update_auth_info)
        registry.add_handler(DeleteAuthInfoCommand, self.delete_auth_info)

    @contextlib.contextmanager
    def _measure(self, operation: str) -> Iterator[None]:
        metric = f"{self.metric_prefix}.store.{operation}"
        start_time = time()
        try:
            yield
        except UserNotFound:
            self.metrics_client.increment(f"{metric}.not_found", 1)
            raise
        except Exception as e:
            self.metrics_client.increment(
                f"{metric}.exception", 1, tag_dict={"exception": type(e).__name__}
            )
            if isinstance(e, SecretsError):
                logger.exception("%s: secret handling failed", operation)
            sentry_sdk.capture_exception(e)
            raise
        finally:
            self.metrics_client.timer(f"{metric}.time", time() - start_time)

    async def get_external_user_info_by_login(
        self, query: GetExternalUserInfoByLoginQuery
    ) -> ExternalUserInfo:
        with self._measure("get_external_user_info_by_login"):
            user = await self.user_store.get_user_by_login(query.login_or_email)

            auth_info = await self.get_auth_info(GetAuthInfoQuery(user_id=user.id))

            query.result = ExternalUserInfo(
                user_id=user.id,
                login=user.login,
                email=user.email,
                name=user.name,
                is_disabled=user.is_disabled,
                auth_module=auth_info.auth_module,
                auth_id=auth_info.auth_id,
            )
            return query.result

    async def get_auth_info(self, query: GetAuthInfoQuery) -> UserAuth:
        """
        Return the most recently created auth info matching the query.

        Only the populated fields of the query are matched on. Token fields of the
        returned record are decrypted.

        Raises:
            UserNotFound: If neither user_id nor auth_id is set, or nothing matches
            SecretsError: If any token field cannot be decoded or decrypted
        """
        with self._measure("get_auth_info"):
            if query.user_id == 0 and query.auth_id == "":
                raise UserNotFound.no_identity()

            conditions = []
            if query.user_id != 0:
                conditions.append(UserAuth.user_id == query.user_id)
            if query.auth_module != "":
                conditions.append(UserAuth.auth_module == query.auth_module)
            if query.auth_id != "":
                conditions.append(UserAuth.auth_id == query.auth_id)

            stmt = (
                select(UserAuth)
                .where(*conditions)
                .order_by(UserAuth.created.desc(), UserAuth.id.desc())
                .limit(1)
            )

            async with self.database.session() as database_session:
                user_auth: Optional[UserAuth] = (
                    await database_session.scalars(stmt)
                ).first()

            if user_auth is None:
                raise UserNotFound.no_auth_info()

            # All fields are decrypted before any is assigned so a failure leaves no
            # partially decrypted record behind.
            decrypted = {}
            for column in SECRET_COLUMNS:
                decrypted[column] = await self.decode_and_decrypt(
                    getattr(user_auth, column)
                )
            for column, value in decrypted.items():
                setattr(user_auth, column, value)

            query.result = user_auth
            return user_auth

    async def _encrypt_token(self, token: Optional[OAuthToken]) -> Dict[str, Any]:
        values: Dict[str, Any] = {column: "" for column in SECRET_COLUMNS}
        values["o_auth_expiry"] = None

        if token is None:
            return values

        values["o_auth_access_token"] = await self.encrypt_and_encode(token.access_token)
        values["o_auth_refresh_token"] = await self.encrypt_and_encode(
            token.refresh_token
        )
        values["o_auth_token_type"] = await self.encrypt_and_encode(token.token_type)

        id_token = token.extra("id_token")
        if isinstance(id_token, str) and id_token != "":
            values["o_auth_id_token"] = await self.encrypt_and_encode(id_token)

        values["o_auth_expiry"] = token.expiry
        return values

    async def set_auth_info(self, cmd: SetAuthInfoCommand) -> None:
        """Insert a new auth info record. Existing records are left in place."""
        with self._measure("set_auth_info"):
            token_values = await self._encrypt_token(cmd.o_auth_token)

            user_auth = UserAuth(
                user_id=cmd.user_id,
                auth_module=cmd.auth_module,
                auth_id=cmd.auth_id,
                created=self.clock(),
                **token_values,
            )

            async with self.database.transaction() as database_session:
                database_session.add(user_auth)

    async def update_auth_info(self, cmd: UpdateAuthInfoCommand) -> int:
        """
        Update every auth info record for the user and auth module.

        The match condition is the user id and auth module only. Records with a
        different auth id for the same module are updated too. Values that are not
        populated are not written, so updating without a token keeps the stored token.

        Returns:
            The number of rows updated
        """
        with self._measure("update_auth_info"):
            token_values = await self._encrypt_token(cmd.o_auth_token)

            values: Dict[str, Any] = {
                "user_id": cmd.user_id,
                "auth_module": cmd.auth_module,
                "auth_id": cmd.auth_id,
                "created": self.clock(),
                **token_values,
            }
            values = {key: value for key, value in values.items() if _populated(value)}

            stmt = (
                update(UserAuth)
                .where(
                    UserAuth.user_id == cmd.user_id,
                    UserAuth.auth_module == cmd.auth_module,
                )
                .values(**values)
                .execution_options(synchronize_session=False)
            )

            async with self.database.transaction() as database_session:
                result = await database_session.execute(stmt)
                rows = result.rowcount

            logger.debug(
                "Updated user_auth user_id=%s auth_module=%s rows=%s",
                cmd.user_id,
                cmd.auth_module,
                rows,
            )
            self.metrics_client.increment(
                f"{self.metric_prefix}.store.update.rows",
                rows,
                tag_dict={"auth_module": cmd.auth_module},
            )
            return rows

    async def delete_auth_info(self, cmd: DeleteAuthInfoCommand) -> int:
        """
        Delete auth info matching every populated column of the given record.

        Pass a record previously returned by ``get_auth_info``.

        Returns:
            The number of rows deleted

        Raises:
            AuthInfoError: If the record has no populated column to match on
        """
        with self._measure("delete_auth_info"):
            conditions = []
            for column in DELETE_MATCH_COLUMNS:
                value = getattr(cmd.user_auth, column)
                if _populated(value):
                    conditions.append(getattr(UserAuth, column) == value)

            if len(conditions) == 0:
                raise AuthInfoError.empty_delete_condition()

            stmt = (
                delete(UserAuth)
                .where(*conditions)
                .execution_options(synchronize_session=False)
            )

            async with self.database.transaction() as database_session:
                result = await database_session.execute(stmt)
                return result.rowcount

    async def get_user_by_id(self, user_id: int) -> Tuple[bool, Optional[User]]:
        async with self.database.session() as database_session:
            user = await database_session.get(User, user_id)
        return user is not None, user

    async def get_user(self, user: User) -> bool:
        """
        Find the first user matching the populated attributes of ``user`` and copy the
        stored columns onto it.
        """
        columns = [column.key for column in User.__table__.columns]
        conditions = [
            getattr(User, column) == getattr(user, column)
            for column in columns
            if _populated(getattr(user, column))
        ]

        async with self.database.session() as database_session:
            found: Optional[User] = (
                await database_session.scalars(
                    select(User).where(*conditions).order_by(User.id).limit(1)
                )
            ).first()

        if found is None:
            return False

        for column in columns:
            setattr(user, column, getattr(found, column))
        return True

    async def encrypt_and_encode(self, value: str) -> str:
        """Encrypt with the default key context, then encode with standard base64."""
        encrypted = await self.secrets_service.encrypt(
            value.encode("utf-8"), EncryptionScope.unscoped()
        )
        return base64.b64encode(encrypted).decode("ascii")

    async def decode_and_decrypt(self, value: str) -> str:
        """Decode standard base64, then decrypt. Empty input decodes to empty output."""
        # The secrets service must never see an empty payload.
        if value == "":
            return ""

        try:
            decoded = base64.b64decode(value, validate=True)
        except binascii.Error as e:
            raise SecretsError.decode_failed() from e

        decrypted = await self.secrets_service.decrypt(decoded)
        try:
            return decrypted.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SecretsError.decrypt_failed() from e
