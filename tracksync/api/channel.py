"""Correlated request/response messaging between isolated contexts.

Messages are plain dicts. A request carries ``command`` and a ``requestId``;
its answer carries the same ``requestId`` and either a ``response`` or an
``error`` key, and no ``command``. A request nobody handles is answered with
an ``error``. Messages without a ``requestId`` are events and go to
subscribers of their command.
"""

import asyncio
import inspect
import logging
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

from tracksync.core.errors import ChannelError

logger = logging.getLogger(__name__)

Send = Callable[[dict[str, Any]], Awaitable[None]]
Handler = Callable[[dict[str, Any]], Any]


async def _call(handler: Handler, message: dict[str, Any]) -> Any:
    result = handler(message)
    if inspect.isawaitable(result):
        result = await result
    return result


class RequestChannel:
    """One end of a message channel."""

    def __init__(self, send: Send, name: str = "channel"):
        self._send = send
        self.name = name
        self._pending: dict[str, asyncio.Future] = {}
        self._listeners: dict[str, list[Handler]] = {}

    async def request(
        self,
        command: str,
        payload: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Send a request and wait for the matching response.

        Args:
            command: Command name understood by the other side
            payload: Extra message fields
            timeout: Seconds to wait; None waits indefinitely

        Returns:
            The ``response`` value of the answer

        Raises:
            ChannelError: If sending fails or the timeout elapses. Also
                raised when the other end has no handler for ``command``.
        """
        request_id = str(uuid.uuid4())
        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        message = {**(payload or {}), "command": command, "requestId": request_id}

        try:
            try:
                await self._send(message)
            except Exception as e:
                raise ChannelError(f"{self.name}: failed to send '{command}': {e}") from e

            if timeout is None:
                return await future
            return await asyncio.wait_for(future, timeout)
        except asyncio.TimeoutError as e:
            raise ChannelError(f"{self.name}: no response to '{command}' within {timeout}s") from e
        finally:
            self._pending.pop(request_id, None)

    async def post(self, command: str, payload: dict[str, Any] | None = None) -> None:
        """Fire-and-forget event."""
        try:
            await self._send({**(payload or {}), "command": command})
        except Exception as e:
            raise ChannelError(f"{self.name}: failed to post '{command}': {e}") from e

    def subscribe(self, command: str, handler: Handler) -> Callable[[], None]:
        """Register a handler for inbound ``command`` messages.

        A handler subscribed to a request command answers it with its return
        value. Returns a function that removes the handler.
        """
        self._listeners.setdefault(command, []).append(handler)

        def unsubscribe() -> None:
            handlers = self._listeners.get(command, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def listener_count(self, command: str) -> int:
        return len(self._listeners.get(command, []))

    async def deliver(self, message: dict[str, Any]) -> None:
        """Route one inbound message."""
        request_id = message.get("requestId")
        command = message.get("command")

        if request_id is not None and command is None:
            future = self._pending.get(request_id)
            if future is None or future.done():
                logger.debug(f"{self.name}: dropping response for unknown request {request_id}")
                return
            if "error" in message:
                future.set_exception(ChannelError(f"{self.name}: {message['error']}"))
            else:
                future.set_result(message.get("response"))
            return

        handlers = list(self._listeners.get(command, []))
        if not handlers:
            logger.debug(f"{self.name}: no listener for '{command}'")
            if request_id is not None:
                await self._send({"requestId": request_id, "error": f"no handler for '{command}'"})
            return

        if request_id is not None:
            response = await _call(handlers[0], message)
            await self._send({"requestId": request_id, "response": response})
            return

        for handler in handlers:
            await _call(handler, message)

    @classmethod
    def local(cls, handler: Handler, name: str = "local") -> "RequestChannel":
        """Channel whose other end is an in-process responder.

        Requests are answered with ``handler``'s return value; posts are
        passed to ``handler`` and its result dropped.
        """
        channel: RequestChannel

        async def send(message: dict[str, Any]) -> None:
            result = await _call(handler, message)
            if "requestId" in message:
                await channel.deliver({"requestId": message["requestId"], "response": result})

        channel = cls(send, name)
        return channel

    @classmethod
    def pair(cls, first: str = "core", second: str = "page") -> tuple["RequestChannel", "RequestChannel"]:
        """Two channels wired to each other's ``deliver``."""
        a: RequestChannel
        b: RequestChannel

        async def send_to_b(message: dict[str, Any]) -> None:
            await b.deliver(message)

        async def send_to_a(message: dict[str, Any]) -> None:
            await a.deliver(message)

        a = cls(send_to_b, first)
        b = cls(send_to_a, second)
        return a, b
