"""Explicit query and command dispatch.

A ``HandlerRegistry`` maps a query or command type to the coroutine that handles it. It
is constructed by the owner of the store and passed to callers that prefer dispatching
by message type over holding the store itself. There is no module level registry.
"""
import logging
from typing import Any, Awaitable, Callable, Dict

from social.graze.authinfo.errors import DispatchError

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Awaitable[Any]]


class HandlerRegistry:
    def __init__(self) -> None:
        self._handlers: Dict[type, Handler] = {}

    def add_handler(self, message_type: type, handler: Handler) -> None:
        if message_type in self._handlers:
            raise DispatchError.already_registered(message_type)
        self._handlers[message_type] = handler
        logger.debug("Registered handler for %s", message_type.__name__)

    def has_handler(self, message_type: type) -> bool:
        return message_type in self._handlers

    async def dispatch(self, message: Any) -> Any:
        handler = self._handlers.get(type(message))
        if handler is None:
            raise DispatchError.no_handler(type(message))
        return await handler(message)
