"""Picker UI bridge - connection manager and command dispatch."""

import asyncio
import inspect
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from pydantic import ValidationError

from tracksync.models.commands import KNOWN_COMMANDS, BridgeCommand, bridge_command_adapter

logger = logging.getLogger(__name__)

CommandHandler = Callable[[BridgeCommand], Awaitable[None] | None]


class Connection(Protocol):
    async def send_text(self, data: str) -> None: ...


class UiBridge:
    """Manages picker connections, pushes state, and dispatches commands."""

    def __init__(self) -> None:
        self.active_connections: list[Connection] = []
        self._lock = asyncio.Lock()
        self._handlers: list[CommandHandler] = []
        self.hidden = True
        self.language: str | None = None

    @property
    def loaded(self) -> bool:
        return bool(self.active_connections)

    async def connect(self, connection: Connection) -> bool:
        """Register a picker connection. Returns True if it was new."""
        async with self._lock:
            if connection in self.active_connections:
                return False
            self.active_connections.append(connection)
        logger.info(f"Picker connected. Total connections: {len(self.active_connections)}")
        return True

    async def disconnect(self, connection: Connection) -> None:
        """Remove a picker connection."""
        async with self._lock:
            if connection in self.active_connections:
                self.active_connections.remove(connection)
        logger.info(f"Picker disconnected. Total connections: {len(self.active_connections)}")

    async def broadcast(self, message: dict[str, Any]) -> None:
        """Send a message to all connected pickers."""
        if not self.active_connections:
            return

        json_message = json.dumps(message)
        disconnected = []

        async with self._lock:
            for connection in self.active_connections:
                try:
                    await connection.send_text(json_message)
                except Exception as e:
                    logger.warning(f"Failed to send message: {e}")
                    disconnected.append(connection)

            # Clean up disconnected clients
            for conn in disconnected:
                self.active_connections.remove(conn)

    async def update_state(self, state: dict[str, Any]) -> None:
        """Merge ``state`` into the picker's current state."""
        await self.broadcast({"type": "state", "state": state})

    async def send_sync_state(self, state: str) -> None:
        await self.broadcast({"type": "sync_state", "state": state})

    def show(self) -> None:
        self.hidden = False

    def hide(self) -> None:
        self.hidden = True

    def on_message(self, handler: CommandHandler) -> Callable[[], None]:
        """Register a command handler; returns a function removing it."""
        self._handlers.append(handler)

        def remove() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return remove

    async def receive(self, raw: str | dict[str, Any]) -> BridgeCommand | None:
        """Parse one inbound picker message and dispatch it.

        Unknown or malformed commands are logged and ignored.
        """
        try:
            data = json.loads(raw) if isinstance(raw, str) else raw
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring malformed picker message: {e}")
            return None

        if not isinstance(data, dict) or data.get("command") not in KNOWN_COMMANDS:
            command = data.get("command") if isinstance(data, dict) else None
            logger.debug(f"Ignoring unknown picker command: {command}")
            return None

        try:
            command = bridge_command_adapter.validate_python(data)
        except ValidationError as e:
            logger.warning(f"Ignoring invalid '{data['command']}' command: {e}")
            return None

        for handler in list(self._handlers):
            result = handler(command)
            if inspect.isawaitable(result):
                await result
        return command
