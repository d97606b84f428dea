"""
Handlers applying each body type received from a remote.

A handler gets a :class:`RemoteEvent` holding one body element and
mutates the conversation store accordingly. Handlers return nothing;
a :class:`~relay_remote.errors.StoreError` escaping a handler is a hard
failure for that element.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Mapping

from relay_remote.bridge import make_input_callback
from relay_remote.json_fields import get_int
from relay_remote.locator import (
    LOCALVAR_REMOTE,
    LOCALVAR_REMOTE_ID,
    LOCALVAR_REMOTE_NUMBER,
    find_conversation,
)
from relay_remote.nicklist import remove_group, remove_nick, upsert_group_tree, upsert_nick
from relay_remote.store import Conversation
from relay_remote.timeutil import parse_time
from relay_remote.types import (
    BodyType,
    BufferPayload,
    LinePayload,
    NickGroupPayload,
    NickPayload,
    VersionInfo,
)

if TYPE_CHECKING:
    from relay_remote.client import RelayRemote

logger = logging.getLogger(__name__)
report = logging.getLogger("relay_remote.remote")

EVENT_GROUP_REMOVING = "nicklist_group_removing"
EVENT_NICK_REMOVING = "nicklist_nick_removing"


@dataclass
class RemoteEvent:
    """Context of one handler call: the event metadata and one body element."""

    remote: RelayRemote
    name: str | None = None
    conversation: Conversation | None = None
    payload: Any = None


Handler = Callable[[RemoteEvent], None]


# ============================================================
#  line
# ============================================================


def apply_line(conversation: Conversation, line: LinePayload) -> None:
    """Write a line into a conversation.

    Lines with ``y >= 0`` go to a fixed position of a free-content
    conversation; the others are appended.
    """
    date, date_usec = parse_time(line.date) or (0, 0)
    tags = ",".join(line.tags)
    message = line.message or ""
    text = f"{line.prefix}\t{message}" if line.prefix else message
    if line.y >= 0:
        conversation.write_line_at(line.y, date, date_usec, tags, text)
    else:
        conversation.append_line(date, date_usec, tags, text)


def handle_line(event: RemoteEvent) -> None:
    if event.conversation is None:
        return
    apply_line(event.conversation, LinePayload.from_json(event.payload))


# ============================================================
#  nick_group / nick
# ============================================================


def handle_nick_group(event: RemoteEvent) -> None:
    if event.conversation is None:
        return
    if event.name == EVENT_GROUP_REMOVING:
        remove_group(event.conversation, get_int(event.payload, "id"))
    else:
        upsert_group_tree(event.conversation, NickGroupPayload.from_json(event.payload))


def handle_nick(event: RemoteEvent) -> None:
    if event.conversation is None:
        return
    if event.name == EVENT_NICK_REMOVING:
        remove_nick(event.conversation, get_int(event.payload, "id"))
    else:
        upsert_nick(event.conversation, NickPayload.from_json(event.payload))


# ============================================================
#  buffer
# ============================================================


def buffer_properties(remote_name: str, buffer: BufferPayload) -> dict[str, str | None]:
    """Properties applied on every create or update of a conversation.

    This is a full overwrite: absent fields reset the property.
    """
    return {
        "type": buffer.type,
        "short_name": buffer.short_name,
        "title": buffer.title,
        "nicklist": "1" if buffer.nicklist else "0",
        "nicklist_case_sensitive": "1" if buffer.nicklist_case_sensitive else "0",
        "nicklist_display_groups": "1" if buffer.nicklist_display_groups else "0",
        f"localvar_set_{LOCALVAR_REMOTE}": remote_name,
        f"localvar_set_{LOCALVAR_REMOTE_ID}": str(buffer.id),
        f"localvar_set_{LOCALVAR_REMOTE_NUMBER}": str(buffer.number),
        "input_get_any_user_data": "1",
    }


def handle_buffer(event: RemoteEvent) -> None:
    remote = event.remote
    buffer = BufferPayload.from_json(event.payload)
    properties = buffer_properties(remote.name, buffer)

    conversation = find_conversation(remote.store, remote.name, buffer.id)
    if conversation is not None:
        conversation.set_properties(properties)
    elif buffer.name is not None:
        conversation = remote.store.create_conversation(
            f"remote.{remote.name}.{buffer.name}",
            properties,
            make_input_callback(remote),
        )
    if conversation is None:
        logger.debug("remote[%s]: no conversation for buffer %d, skipped", remote.name, buffer.id)
        return

    for binding in buffer.keys:
        conversation.set(f"key_bind_{binding.key}", binding.command)

    for line in buffer.lines:
        apply_line(conversation, line)

    if buffer.nicklist_root is not None:
        upsert_group_tree(conversation, buffer.nicklist_root)


# ============================================================
#  version
# ============================================================


def handle_version(event: RemoteEvent) -> None:
    info = VersionInfo.from_json(event.payload)
    event.remote.version = info
    report.info(
        "remote[%s]: WeeChat: %s (%s), API: %s",
        event.remote.name,
        info.weechat_version,
        info.weechat_version_git,
        info.relay_api_version,
    )


HANDLERS: Mapping[BodyType, Handler] = MappingProxyType(
    {
        BodyType.BUFFER: handle_buffer,
        BodyType.LINE: handle_line,
        BodyType.NICK_GROUP: handle_nick_group,
        BodyType.NICK: handle_nick,
        BodyType.VERSION: handle_version,
    }
)


def get_handler(body_type: str) -> Handler | None:
    """Return the handler for a body type, None for unknown types."""
    try:
        return HANDLERS[BodyType(body_type)]
    except ValueError:
        return None
