"""Synchronization handshake with a remote."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from relay_remote.types import SyncBody, SyncRequest

if TYPE_CHECKING:
    from relay_remote.client import RelayRemote

logger = logging.getLogger(__name__)


def sync_with_remote(remote: RelayRemote) -> None:
    """Ask the remote for its full state and for updates from now on.

    The remote is marked as synced as soon as the request is handed to
    the sender; no acknowledgment is awaited.
    """
    request = SyncRequest(body=SyncBody(colors=remote.config.sync_colors))
    remote.send_json(request.model_dump())
    remote.synced = True
    logger.debug("remote[%s]: sync requested", remote.name)
