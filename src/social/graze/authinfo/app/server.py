import logging
from typing import Optional
from aio_statsd import TelegrafStatsdClient
from aiohttp import web
import sentry_sdk
from sentry_sdk.integrations.aiohttp import AioHttpIntegration

from social.graze.authinfo.app.keys import (
    AuthInfoStoreAppKey,
    DatabaseAppKey,
    HandlerRegistryAppKey,
    MetricsClientAppKey,
    SettingsAppKey,
)
from social.graze.authinfo.config import Settings
from social.graze.authinfo.database import create_database
from social.graze.authinfo.dispatch import HandlerRegistry
from social.graze.authinfo.encryption import FernetSecretsService
from social.graze.authinfo.metrics import MetricsClient, create_metrics_client
from social.graze.authinfo.store import AuthInfoStore
from social.graze.authinfo.users import SQLUserStore

logger = logging.getLogger(__name__)


async def create_metrics(settings: Settings) -> MetricsClient:
    if settings.metrics_backend == "telegraf":
        statsd_client = TelegrafStatsdClient(
            host=settings.statsd_host, port=settings.statsd_port, debug=settings.debug
        )
        await statsd_client.connect()
        return create_metrics_client("telegraf", telegraf_client=statsd_client)
    return create_metrics_client(settings.metrics_backend, debug=settings.debug)


async def auth_info_context(app: web.Application):
    logger.info("Starting up")
    settings: Settings = app[SettingsAppKey]

    database = create_database(settings)
    app[DatabaseAppKey] = database

    metrics_client = await create_metrics(settings)
    app[MetricsClientAppKey] = metrics_client

    store = AuthInfoStore(
        database,
        FernetSecretsService(settings.encryption_key),
        SQLUserStore(database),
        metrics_client=metrics_client,
        metric_prefix=settings.statsd_prefix,
    )
    app[AuthInfoStoreAppKey] = store

    registry = HandlerRegistry()
    store.register_handlers(registry)
    app[HandlerRegistryAppKey] = registry

    logger.info("Startup complete")

    yield

    logger.info("Shutting down")

    await database.dispose()
    await metrics_client.close()


@web.middleware
async def sentry_middleware(request: web.Request, handler):
    try:
        response = await handler(request)
        return response
    except Exception as e:
        sentry_sdk.capture_exception(e)
        raise e


async def handle_internal_alive(request: web.Request):
    return web.Response(status=200)


async def handle_internal_ready(request: web.Request):
    database = request.app[DatabaseAppKey]
    try:
        await database.ping()
    except Exception as e:
        logger.exception("handle_internal_ready: database unavailable")
        sentry_sdk.capture_exception(e)
        return web.Response(status=503)
    return web.Response(status=200)


async def start_web_server(settings: Optional[Settings] = None):

    if settings is None:
        settings = Settings()  # type: ignore
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            send_default_pii=False,
            integrations=[AioHttpIntegration()]
        )
    app = web.Application(middlewares=[sentry_middleware])

    app[SettingsAppKey] = settings

    app.add_routes(
        [
            web.get("/internal/alive", handle_internal_alive),
            web.get("/internal/ready", handle_internal_ready),
        ]
    )

    app.cleanup_ctx.append(auth_info_context)

    return app
