"""
Error Handler
Per-command error accounting with a circuit breaker
"""

import asyncio
import signal
import time
import traceback
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Dict, Optional

from guildbot.utils.logger import get_logger

# Seconds an error counts against its context, and how long a circuit stays open
WINDOW = 60


class ErrorHandler:
    """
    Counts errors by context and error type over a sliding minute.

    When one context and error type reaches max_errors_per_minute, the context
    (for example "command:ban") is broken for a minute and the command handler
    skips it until the circuit closes again.
    """

    def __init__(self, max_errors_per_minute: int = 10, clock: Callable[[], float] = time.monotonic):
        self.logger = get_logger("ErrorHandler")
        self.max_errors_per_minute = max_errors_per_minute
        self.circuit_breakers: Dict[str, float] = {}
        self._clock = clock
        self._errors: Dict[str, Deque[float]] = {}
        self._cleanup_task: Optional[asyncio.Task] = None
        self._on_shutdown: Optional[Callable[[], Awaitable[None]]] = None

    @staticmethod
    def command_context(command_name: str) -> str:
        return f"command:{command_name}"

    @property
    def error_counts(self) -> Dict[str, int]:
        """Errors within the last minute, keyed by "context:ErrorType"."""
        now = self._clock()
        counts = {}
        for key, stamps in self._errors.items():
            self._expire(stamps, now)
            if stamps:
                counts[key] = len(stamps)
        return counts

    def initialize(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        on_shutdown: Optional[Callable[[], Awaitable[None]]] = None,
    ) -> None:
        """
        Install the loop exception handler, signal handlers and cleanup task.

        Must be called from a running event loop.
        """
        if loop is None:
            loop = asyncio.get_running_loop()

        loop.set_exception_handler(self._async_exception_handler)
        self._on_shutdown = on_shutdown

        try:
            loop.add_signal_handler(signal.SIGINT, self._signal_handler, signal.SIGINT)
            loop.add_signal_handler(signal.SIGTERM, self._signal_handler, signal.SIGTERM)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

        self._cleanup_task = loop.create_task(self._periodic_cleanup())

        self.logger.info("Error handlers initialized")

    def _signal_handler(self, sig: signal.Signals) -> None:
        self.logger.info(f"Received signal {sig.name}, shutting down...")
        asyncio.ensure_future(self.shutdown())

    def _async_exception_handler(self, loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
        exception = context.get("exception")
        if exception:
            self.handle_exception(exception, "loop")
        else:
            self.logger.error(f"Async error: {context.get('message', 'Unknown async error')}")

    def handle_exception(self, error: BaseException, context: str = "") -> bool:
        """
        Log an error and count it against its context.

        Args:
            error: The exception that occurred
            context: Where it happened, e.g. "command:ban"

        Returns:
            True if this error opened the circuit for the context
        """
        name = type(error).__name__
        self.logger.error(f"[{context}] {name}: {error}" if context else f"{name}: {error}")
        self.logger.debug(
            "Traceback:\n" + "".join(traceback.format_exception(type(error), error, error.__traceback__))
        )

        now = self._clock()
        stamps = self._errors.setdefault(f"{context}:{name}", deque())
        stamps.append(now)
        self._expire(stamps, now)

        if len(stamps) < self.max_errors_per_minute:
            return False

        self.logger.warning(f"Circuit breaker triggered for: {context}")
        self.circuit_breakers[context] = now + WINDOW
        return True

    def is_circuit_broken(self, context: str) -> bool:
        """Check if a context is circuit broken, closing expired circuits."""
        break_until = self.circuit_breakers.get(context)
        if break_until is None:
            return False

        if self._clock() > break_until:
            del self.circuit_breakers[context]
            for key in [k for k in self._errors if k.startswith(f"{context}:")]:
                del self._errors[key]
            self.logger.info(f"Circuit closed for: {context}")
            return False

        return True

    def _expire(self, stamps: Deque[float], now: float) -> None:
        while stamps and now - stamps[0] >= WINDOW:
            stamps.popleft()

    async def _periodic_cleanup(self) -> None:
        while True:
            await asyncio.sleep(WINDOW)
            self._drop_expired()

    def _drop_expired(self) -> None:
        now = self._clock()
        for key in list(self._errors):
            self._expire(self._errors[key], now)
            if not self._errors[key]:
                del self._errors[key]

    async def shutdown(self) -> None:
        """Clean shutdown."""
        self.logger.info("Shutting down error handler...")

        if self._cleanup_task:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None

        self._errors.clear()
        self.circuit_breakers.clear()

        if self._on_shutdown:
            await self._on_shutdown()


_error_handler: Optional[ErrorHandler] = None


def get_error_handler() -> ErrorHandler:
    """Get the global error handler instance."""
    global _error_handler
    if _error_handler is None:
        _error_handler = ErrorHandler()
    return _error_handler


def setup_error_handler(
    loop: Optional[asyncio.AbstractEventLoop] = None,
    on_shutdown: Optional[Callable[[], Awaitable[None]]] = None,
) -> ErrorHandler:
    """Set up the global error handler."""
    handler = get_error_handler()
    handler.initialize(loop, on_shutdown)
    return handler
