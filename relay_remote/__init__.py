"""
Relay remote client for Python.

Keeps a local mirror of a remote chat client's buffers (conversations),
their lines and nicklists, by applying the JSON events the remote sends
over its relay API, and forwards input typed in mirrored conversations
back to the remote.

Example::

    from relay_remote import RelayRemote

    sent = []
    remote = RelayRemote("home", sender=sent.append)

    remote.receive('{"code": 200, "body_type": "buffer", "body": '
                   '[{"id": 1, "name": "core.weechat", "number": 1}]}')

    conversation = remote.store.conversations()[0]
    print(conversation.full_name)    # remote.home.core.weechat
    print(remote.synced)             # True, sync request is in ``sent``
"""

from relay_remote.client import RelayRemote
from relay_remote.errors import (
    RelayRemoteError,
    InvalidDataError,
    HandlerFailedError,
    StoreError,
)
from relay_remote.events import DispatchStatus, dispatch, parse_envelope
from relay_remote.store import (
    Conversation,
    ConversationStore,
    Line,
    MemoryStore,
    Nick,
    NickGroup,
)
from relay_remote.types import (
    RemoteConfig,
    BodyType,
    Envelope,
    EventInfo,
    BufferPayload,
    LinePayload,
    NickGroupPayload,
    NickPayload,
    VersionInfo,
)

__all__ = [
    "RelayRemote",
    "RemoteConfig",
    "RelayRemoteError",
    "InvalidDataError",
    "HandlerFailedError",
    "StoreError",
    "DispatchStatus",
    "dispatch",
    "parse_envelope",
    "Conversation",
    "ConversationStore",
    "Line",
    "MemoryStore",
    "Nick",
    "NickGroup",
    "BodyType",
    "Envelope",
    "EventInfo",
    "BufferPayload",
    "LinePayload",
    "NickGroupPayload",
    "NickPayload",
    "VersionInfo",
]

__version__ = "0.1.0"
