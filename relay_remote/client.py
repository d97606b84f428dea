"""
Relay remote: the client side of a relay API connection.

A :class:`RelayRemote` mirrors the state of a remote chat client into a
local conversation store: buffers become conversations, with their lines
and nicklist, and text typed in a mirrored conversation is sent back to
the remote. The connection itself is opened by the caller; the remote
only needs an open WebSocket (or any callable sending text frames).

Usage::

    import websockets
    from relay_remote import RelayRemote

    remote = RelayRemote("home")
    async with websockets.connect("wss://example.com:9000/api") as ws:
        await ws.send('{"request": "GET /api/buffers?lines=-100&nicks=true"}')
        await remote.listen(ws)
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

from relay_remote.events import DispatchStatus, EventManager, dispatch
from relay_remote.store import ConversationStore, MemoryStore
from relay_remote.sync import sync_with_remote
from relay_remote.types import RemoteConfig, VersionInfo

logger = logging.getLogger(__name__)

# Sends one serialized JSON frame to the remote
Sender = Callable[[str], Any]


class RelayRemote:
    """
    One remote: its name, sync state, conversation store and outbound link.

    Messages are applied with :meth:`receive` (or by the listen loop
    started with :meth:`start`); outbound requests go through
    :meth:`send_json`.
    """

    def __init__(
        self,
        name: str,
        store: ConversationStore | None = None,
        sender: Sender | None = None,
        sync_colors: str = "weechat",
        debug: int = 0,
        outbox_size: int = 0,
    ) -> None:
        self.config = RemoteConfig(
            name=name,
            sync_colors=sync_colors,
            debug=debug,
            outbox_size=outbox_size,
        )
        self.store: ConversationStore = store if store is not None else MemoryStore()
        self._sender = sender
        self._events = EventManager(self)

        # State
        self.synced = False
        self.version: VersionInfo | None = None

    @classmethod
    def from_config(
        cls,
        config: RemoteConfig,
        store: ConversationStore | None = None,
        sender: Sender | None = None,
    ) -> RelayRemote:
        return cls(
            config.name,
            store=store,
            sender=sender,
            sync_colors=config.sync_colors,
            debug=config.debug,
            outbox_size=config.outbox_size,
        )

    @property
    def name(self) -> str:
        """Remote name, used to namespace mirrored conversations."""
        return self.config.name

    @property
    def is_connected(self) -> bool:
        """Whether a WebSocket is attached and being listened to."""
        return self._events.is_running

    def __repr__(self) -> str:
        return f"RelayRemote({self.name!r}, synced={self.synced})"

    # ---- Inbound ----

    def receive(self, raw: str) -> DispatchStatus:
        """Apply one message received from the remote."""
        return dispatch(self, raw)

    # ---- Outbound ----

    def send_json(self, payload: dict[str, Any]) -> bool:
        """Send a JSON request to the remote, without waiting for an answer.

        Returns False if there was nowhere to send it.
        """
        text = json.dumps(payload, separators=(",", ":"))
        if self.config.debug >= 2:
            logger.debug('send to remote %s: "%s"', self.name, text)
        if self._sender is not None:
            self._sender(text)
            return True
        if self._events.send(text):
            return True
        logger.warning("remote[%s]: not connected, request dropped: %s", self.name, text)
        return False

    def resync(self) -> None:
        """Request a full sync again, whatever the current sync state."""
        sync_with_remote(self)

    # ---- Connection ----

    def start(self, ws: Any) -> None:
        """Start processing events on an already-open WebSocket."""
        self.synced = False
        self._events.start(ws)
        logger.info("remote[%s]: attached to connection", self.name)

    async def stop(self) -> None:
        """Stop processing events. The WebSocket is left open."""
        await self._events.stop()
        self.synced = False
        logger.info("remote[%s]: detached from connection", self.name)

    async def listen(self, ws: Any) -> None:
        """Process events on ``ws`` until the remote closes the connection."""
        self.start(ws)
        try:
            await self._events.wait_closed()
        finally:
            await self.stop()
