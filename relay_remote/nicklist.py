"""
Apply nicklist snapshots and deltas to a mirrored conversation.

These functions work on typed payloads and a conversation only, with no
knowledge of envelopes or transport. Creates whose parent group is not
known locally are dropped: the remote is authoritative and will send
the entity again on the next sync.
"""

from __future__ import annotations

import logging

from relay_remote.locator import encode_id_key, find_group, find_nick
from relay_remote.store import Conversation
from relay_remote.types import NickGroupPayload, NickPayload

logger = logging.getLogger(__name__)


def upsert_group_tree(conversation: Conversation, node: NickGroupPayload) -> None:
    """Add or update a group, then its subgroups and nicks, recursively.

    A node without parent (``parent_group_id < 0``) is the remote's
    nicklist root: it is bound to the local root group instead of being
    created.
    """
    group = find_group(conversation, node.id)
    if group is not None:
        conversation.group_set(group, "id", node.id)
        conversation.group_set(group, "color", node.color_name)
        conversation.group_set(group, "visible", node.visible)
    elif node.parent_group_id < 0:
        _bind_root(conversation, node)
    else:
        parent = find_group(conversation, node.parent_group_id)
        if parent is None:
            logger.debug(
                "%s: parent group %s not found, group %s dropped",
                conversation.full_name,
                encode_id_key(node.parent_group_id),
                encode_id_key(node.id),
            )
        else:
            group = conversation.add_group(parent, node.name, node.color_name, node.visible)
            if group is not None:
                conversation.group_set(group, "id", node.id)

    for child in node.groups:
        upsert_group_tree(conversation, child)
    for nick in node.nicks:
        upsert_nick(conversation, nick)


def _bind_root(conversation: Conversation, node: NickGroupPayload) -> None:
    root = conversation.nicklist_root
    if node.id < 0 or root.id not in (None, node.id):
        logger.debug(
            "%s: root group already bound, group %s dropped",
            conversation.full_name,
            encode_id_key(node.id),
        )
        return
    conversation.group_set(root, "id", node.id)
    conversation.group_set(root, "color", node.color_name)
    conversation.group_set(root, "visible", node.visible)


def upsert_nick(conversation: Conversation, node: NickPayload) -> None:
    """Add or update a nick. The name of an existing nick is never changed."""
    nick = find_nick(conversation, node.id)
    if nick is not None:
        conversation.nick_set(nick, "id", node.id)
        conversation.nick_set(nick, "color", node.color_name)
        conversation.nick_set(nick, "prefix", node.prefix)
        conversation.nick_set(nick, "prefix_color", node.prefix_color_name)
        conversation.nick_set(nick, "visible", node.visible)
        return

    if node.parent_group_id < 0:
        return
    parent = find_group(conversation, node.parent_group_id)
    if parent is None:
        logger.debug(
            "%s: parent group %s not found, nick %s dropped",
            conversation.full_name,
            encode_id_key(node.parent_group_id),
            encode_id_key(node.id),
        )
        return
    nick = conversation.add_nick(
        parent,
        node.name,
        node.color_name,
        node.prefix,
        node.prefix_color_name,
        node.visible,
    )
    if nick is not None:
        conversation.nick_set(nick, "id", node.id)


def remove_group(conversation: Conversation, group_id: int) -> bool:
    """Remove the group with this id; returns False if it is unknown."""
    group = find_group(conversation, group_id)
    if group is None:
        return False
    conversation.remove_group(group)
    return True


def remove_nick(conversation: Conversation, nick_id: int) -> bool:
    """Remove the nick with this id; returns False if it is unknown."""
    nick = find_nick(conversation, nick_id)
    if nick is None:
        return False
    conversation.remove_nick(nick)
    return True
