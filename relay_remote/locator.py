"""
Find mirrored entities from the ids assigned by the remote.

Conversations carry their identity in two local variables: the name of
the remote they mirror and the remote id of the conversation. Groups and
nicks are found through the per-conversation id index of the store.
"""

from __future__ import annotations

import re

from relay_remote.store import Conversation, ConversationStore, Nick, NickGroup

LOCALVAR_REMOTE = "relay_remote"
LOCALVAR_REMOTE_ID = "relay_remote_id"
LOCALVAR_REMOTE_NUMBER = "relay_remote_number"

_INT_RE = re.compile(r"^[+-]?\d+$")


def encode_id_key(entity_id: int) -> str:
    """Key used by name-indexed nicklists to look an entity up by id."""
    return f"==id:{entity_id}"


def find_conversation(
    store: ConversationStore, remote_name: str, conversation_id: int
) -> Conversation | None:
    """Return the conversation mirroring ``conversation_id`` on this remote."""
    if conversation_id < 0:
        return None
    str_id = str(conversation_id)
    for conversation in store.conversations():
        if (
            conversation.get(f"localvar_{LOCALVAR_REMOTE}") == remote_name
            and conversation.get(f"localvar_{LOCALVAR_REMOTE_ID}") == str_id
        ):
            return conversation
    return None


def get_conversation_remote_id(conversation: Conversation | None) -> int:
    """Return the remote id stored on a conversation, -1 if there is none."""
    if conversation is None:
        return -1
    str_id = conversation.get(f"localvar_{LOCALVAR_REMOTE_ID}")
    if not str_id or not _INT_RE.match(str_id):
        return -1
    return int(str_id)


def find_group(conversation: Conversation, group_id: int) -> NickGroup | None:
    return conversation.search_group(group_id)


def find_nick(conversation: Conversation, nick_id: int) -> Nick | None:
    return conversation.search_nick(nick_id)
