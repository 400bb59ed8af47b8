import argparse
import asyncio
import base64
import json
import logging
from cryptography.fernet import Fernet

from social.graze.authinfo.config import Settings
from social.graze.authinfo.database import Database, create_database
from social.graze.authinfo.commands import GetExternalUserInfoByLoginQuery
from social.graze.authinfo.encryption import FernetSecretsService
from social.graze.authinfo.model.base import Base
from social.graze.authinfo.store import AuthInfoStore
from social.graze.authinfo.users import SQLUserStore

# Imported for their side effect of registering tables on Base.metadata.
from social.graze.authinfo.model import user, user_auth  # noqa: F401

logger = logging.getLogger(__name__)


async def genCryptoKey() -> None:
    key = Fernet.generate_key()
    print(base64.b64encode(key).decode("utf-8"))


async def initDatabase(database: Database) -> None:
    assert database.engine is not None
    async with database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("Tables created")


async def lookupUser(
    database: Database, settings: Settings, login_or_email: str
) -> None:
    store = AuthInfoStore(
        database,
        FernetSecretsService(settings.encryption_key),
        SQLUserStore(database),
    )
    external_user_info = await store.get_external_user_info_by_login(
        GetExternalUserInfoByLoginQuery(login_or_email=login_or_email)
    )
    print(json.dumps(vars(external_user_info), indent=2))


async def realMain() -> None:
    parser = argparse.ArgumentParser(
        prog="authinfo-util", description="Auth info store utilities"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    _ = subparsers.add_parser("gen-crypto", help="Generate an encryption key")
    _ = subparsers.add_parser("init-db", help="Create the user and user_auth tables")
    lookup = subparsers.add_parser(
        "lookup", help="Show the external identity of a user"
    )
    lookup.add_argument("login", help="The login or email of the user.")

    args = vars(parser.parse_args())
    command = args.get("command", None)

    if command == "gen-crypto":
        await genCryptoKey()
        return

    settings = Settings()  # type: ignore
    database = create_database(settings)
    try:
        if command == "init-db":
            await initDatabase(database)
        elif command == "lookup":
            await lookupUser(database, settings, args.get("login", ""))
    finally:
        await database.dispose()


def main() -> None:
    logging.basicConfig()
    asyncio.run(realMain())


if __name__ == "__main__":
    main()
