"""Typed application context keys for the aiohttp service host."""
from typing import Final
from aiohttp import web

from social.graze.authinfo.config import Settings
from social.graze.authinfo.database import Database
from social.graze.authinfo.dispatch import HandlerRegistry
from social.graze.authinfo.metrics import MetricsClient
from social.graze.authinfo.store import AuthInfoStore

SettingsAppKey: Final = web.AppKey("settings", Settings)
"""AppKey for accessing the application settings"""

DatabaseAppKey: Final = web.AppKey("database", Database)
"""AppKey for accessing the session provider"""

MetricsClientAppKey: Final = web.AppKey("metrics_client", MetricsClient)
"""AppKey for accessing the metrics client"""

AuthInfoStoreAppKey: Final = web.AppKey("auth_info_store", AuthInfoStore)
"""AppKey for accessing the auth info store"""

HandlerRegistryAppKey: Final = web.AppKey("handler_registry", HandlerRegistry)
"""AppKey for dispatching auth info queries and commands by type"""
