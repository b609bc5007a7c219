"""Method dispatch registry.

Handlers register themselves via the ``@registry.handler`` decorator and
receive the wallet state followed by the request's positional params.
The dispatcher maps JSON-RPC method names to async callables and checks
the parameter count, nothing more.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable

from wire.jsonrpc import METHOD_NOT_FOUND, MISC_ERROR

log = logging.getLogger(__name__)

# Type alias for an RPC handler: async (wallet, *params) -> result
HandlerFn = Callable[..., Awaitable[Any]]


class RpcFault(Exception):
    """A daemon-side error that becomes the response's ``error`` object."""

    def __init__(self, code: int, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


class MethodNotFoundError(RpcFault):
    """Raised when no handler is registered for the requested method."""

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(METHOD_NOT_FOUND, "Method not found")


class Registry:
    """A simple method → handler mapping.

    Usage::

        registry = Registry()

        @registry.handler("getblockcount")
        async def getblockcount(wallet):
            return wallet.blocks

        result = await registry.dispatch("getblockcount", [], wallet)
    """

    def __init__(self) -> None:
        self._handlers: dict[str, HandlerFn] = {}

    # -- Registration --------------------------------------------------
    def handler(self, method: str) -> Callable[[HandlerFn], HandlerFn]:
        """Decorator that registers *fn* under *method*."""

        def decorator(fn: HandlerFn) -> HandlerFn:
            if method in self._handlers:
                log.warning("overwriting handler for %r", method)
            self._handlers[method] = fn
            log.debug("registered handler %r → %s", method, fn.__qualname__)
            return fn

        return decorator

    # -- Dispatch ------------------------------------------------------
    async def dispatch(self, method: str, params: list[Any], wallet: Any) -> Any:
        """Call the handler for *method* and return its result.

        Raises ``MethodNotFoundError`` if the method is not registered and
        ``RpcFault(MISC_ERROR)`` with the handler's usage line when the
        parameter count does not fit, as bitcoind answers with its help text.
        """
        fn = self._handlers.get(method)
        if fn is None:
            raise MethodNotFoundError(method)
        try:
            inspect.signature(fn).bind(wallet, *params)
        except TypeError:
            raise RpcFault(MISC_ERROR, self.usage(method)) from None
        return await fn(wallet, *params)

    # -- Introspection -------------------------------------------------
    @property
    def methods(self) -> list[str]:
        return list(self._handlers.keys())

    def is_registered(self, method: str) -> bool:
        return method in self._handlers

    def usage(self, method: str) -> str:
        """``sendtoaddress <address> <amount> [comment] [comment_to]``."""
        parts = [method]
        params = list(inspect.signature(self._handlers[method]).parameters.values())[1:]
        for param in params:
            if param.default is inspect.Parameter.empty:
                parts.append(f"<{param.name}>")
            else:
                parts.append(f"[{param.name}]")
        return " ".join(parts)
