"""Forward text typed in a mirrored conversation to its remote."""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING

from relay_remote.locator import get_conversation_remote_id
from relay_remote.store import Conversation, InputCallback
from relay_remote.types import InputBody, InputRequest

if TYPE_CHECKING:
    from relay_remote.client import RelayRemote

logger = logging.getLogger(__name__)


def send_input(remote: RelayRemote, conversation: Conversation, text: str) -> bool:
    """Send ``text`` as a command on the remote conversation.

    Fire and forget: always returns True, even when nothing was sent.
    """
    buffer_id = get_conversation_remote_id(conversation)
    if buffer_id < 0:
        logger.debug("remote[%s]: %r has no remote id, input dropped", remote.name, conversation)
        return True
    request = InputRequest(body=InputBody(buffer_id=buffer_id, command=text))
    remote.send_json(request.model_dump())
    return True


def make_input_callback(remote: RelayRemote) -> InputCallback:
    """Input callback bound to ``remote``, for conversations it creates."""
    return functools.partial(send_input, remote)
