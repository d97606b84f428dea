"""
Event dispatch for the relay remote engine.

Parses messages received from a remote, routes each body element to the
handler of its body type and triggers the sync handshake. Also runs the
listen/write loops over an already-open WebSocket.
"""

from __future__ import annotations

import asyncio
import json
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from websockets.exceptions import ConnectionClosed

from relay_remote.errors import HandlerFailedError, InvalidDataError, StoreError
from relay_remote.handlers import RemoteEvent, get_handler
from relay_remote.locator import find_conversation
from relay_remote.sync import sync_with_remote
from relay_remote.types import BodyType, Envelope

if TYPE_CHECKING:
    from relay_remote.client import RelayRemote

logger = logging.getLogger(__name__)
report = logging.getLogger("relay_remote.remote")

# Codes of a successful response without body
ACK_CODES = frozenset({200, 204})


class DispatchStatus(str, Enum):
    """Outcome of dispatching one message."""

    OK = "ok"
    ACK = "ack"
    IGNORED = "ignored"
    INVALID_DATA = "invalid_data"
    HANDLER_FAILED = "handler_failed"


def parse_envelope(raw: str) -> Envelope:
    """Decode a message received from a remote.

    Raises:
        InvalidDataError: if the message is not a JSON object.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError, RecursionError) as e:
        raise InvalidDataError(raw, "malformed JSON") from e
    if not isinstance(data, dict):
        raise InvalidDataError(raw, "not a JSON object")
    return Envelope.from_json(data)


def dispatch(remote: RelayRemote, raw: str) -> DispatchStatus:
    """Apply one message received from ``remote``.

    Never raises on bad input: invalid messages and handler failures are
    reported on the ``relay_remote.remote`` logger and dropped.
    """
    if remote.config.debug >= 2:
        logger.debug('recv from remote %s: "%s"', remote.name, raw)
    try:
        envelope = parse_envelope(raw)
        return _apply(remote, envelope, raw)
    except InvalidDataError:
        report.error('remote[%s]: invalid data received from remote: "%s"', remote.name, raw)
        return DispatchStatus.INVALID_DATA
    except HandlerFailedError as e:
        report.error(
            'remote[%s]: callback failed for body type "%s" (%d/%d failed): "%s"',
            remote.name,
            e.body_type,
            e.failures,
            e.total,
            raw,
        )
        return DispatchStatus.HANDLER_FAILED


def _apply(remote: RelayRemote, envelope: Envelope, raw: str) -> DispatchStatus:
    if envelope.body_type is None:
        if envelope.code in ACK_CODES:
            return DispatchStatus.ACK
        raise InvalidDataError(raw, f"no body type (code {envelope.code})")

    name = None
    conversation = None
    if envelope.event is not None:
        name = envelope.event.name
        conversation = find_conversation(remote.store, remote.name, envelope.event.buffer_id)

    handler = get_handler(envelope.body_type)
    if handler is None:
        logger.debug("remote[%s]: ignoring body type %r", remote.name, envelope.body_type)
        return DispatchStatus.IGNORED

    # Every element is applied even if an earlier one failed
    bodies = envelope.bodies
    failures = 0
    for body in bodies:
        event = RemoteEvent(remote=remote, name=name, conversation=conversation, payload=body)
        try:
            handler(event)
        except StoreError as e:
            failures += 1
            logger.warning("remote[%s]: %s handler failed: %s", remote.name, envelope.body_type, e)
    if failures:
        raise HandlerFailedError(envelope.body_type, failures, len(bodies))

    if (
        not remote.synced
        and envelope.code == 200
        and envelope.body_type == BodyType.BUFFER.value
    ):
        sync_with_remote(remote)

    return DispatchStatus.OK


class EventManager:
    """Runs the receive and send loops of a remote over an open WebSocket."""

    def __init__(self, remote: RelayRemote) -> None:
        self._remote = remote
        self._outbox: asyncio.Queue[str] | None = None
        self._listen_task: asyncio.Task[None] | None = None
        self._write_task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._listen_task is not None and not self._listen_task.done()

    def send(self, text: str) -> bool:
        """Queue a frame for the remote; False if it could not be queued."""
        if self._outbox is None:
            return False
        if self._write_task is None or self._write_task.done():
            logger.warning("remote[%s]: write loop stopped, message dropped", self._remote.name)
            return False
        try:
            self._outbox.put_nowait(text)
        except asyncio.QueueFull:
            logger.warning("remote[%s]: outbox full, message dropped", self._remote.name)
            return False
        return True

    async def _listen_loop(self, ws: Any) -> None:
        """Dispatch every frame received, one at a time, in order."""
        try:
            async for raw in ws:
                if isinstance(raw, bytes):
                    raw = raw.decode("utf-8", errors="replace")
                try:
                    dispatch(self._remote, raw)
                except Exception:
                    logger.exception("Error while processing message from remote %s", self._remote.name)
        except ConnectionClosed as e:
            logger.info("remote[%s]: connection closed (%s)", self._remote.name, e)
        finally:
            self._remote.synced = False

    async def _write_loop(self, ws: Any, outbox: asyncio.Queue[str]) -> None:
        try:
            while True:
                text = await outbox.get()
                await ws.send(text)
        except ConnectionClosed:
            logger.debug("remote[%s]: write loop ended, connection closed", self._remote.name)
        except Exception:
            logger.exception("Error while sending to remote %s", self._remote.name)

    def start(self, ws: Any) -> None:
        """Start processing events on the given WebSocket."""
        self._outbox = asyncio.Queue(maxsize=self._remote.config.outbox_size)
        self._listen_task = asyncio.create_task(self._listen_loop(ws))
        self._write_task = asyncio.create_task(self._write_loop(ws, self._outbox))

    async def wait_closed(self) -> None:
        """Wait until the remote closes the connection."""
        if self._listen_task is not None:
            await asyncio.shield(self._listen_task)

    async def stop(self) -> None:
        """Stop both loops."""
        for task in (self._listen_task, self._write_task):
            if task is None:
                continue
            if not task.done():
                task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.exception("Event loop task of remote %s failed", self._remote.name)
        self._listen_task = None
        self._write_task = None
        self._outbox = None
