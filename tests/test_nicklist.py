"""
Unit tests for nicklist reconciliation.

Works directly on a conversation and typed payloads, no envelopes.
"""

from __future__ import annotations

from relay_remote.nicklist import remove_group, remove_nick, upsert_group_tree, upsert_nick
from relay_remote.store import Conversation
from relay_remote.types import NickGroupPayload, NickPayload


def _snapshot() -> NickGroupPayload:
    return NickGroupPayload.from_json(
        {
            "id": 10,
            "parent_group_id": -1,
            "name": "root",
            "visible": False,
            "groups": [
                {
                    "id": 11,
                    "parent_group_id": 10,
                    "name": "000|o",
                    "color_name": "weechat.color.nicklist_group",
                    "visible": True,
                    "groups": [],
                    "nicks": [
                        {
                            "id": 20,
                            "parent_group_id": 11,
                            "name": "alice",
                            "color_name": "lightgreen",
                            "prefix": "@",
                            "prefix_color_name": "lightgreen",
                            "visible": True,
                        }
                    ],
                },
                {
                    "id": 12,
                    "parent_group_id": 10,
                    "name": "999|...",
                    "visible": True,
                    "nicks": [
                        {"id": 21, "parent_group_id": 12, "name": "bob", "visible": True},
                    ],
                },
            ],
            "nicks": [],
        }
    )


# ============================================================
#  Snapshot
# ============================================================


def test_snapshot_builds_tree() -> None:
    """A full nicklist binds the root and creates groups and nicks under it."""
    conversation = Conversation("remote.home.irc.libera.#python")
    upsert_group_tree(conversation, _snapshot())

    assert conversation.nicklist_root.id == 10
    assert [g.name for g in conversation.iter_groups()] == ["000|o", "999|..."]

    alice = conversation.search_nick(20)
    assert alice is not None
    assert alice.name == "alice"
    assert alice.prefix == "@"
    assert alice.group is conversation.search_group(11)
    assert conversation.search_nick(21).group.name == "999|..."


def test_snapshot_is_idempotent() -> None:
    """Applying the same snapshot twice creates nothing new."""
    conversation = Conversation("remote.home.irc.libera.#python")
    upsert_group_tree(conversation, _snapshot())
    upsert_group_tree(conversation, _snapshot())

    assert len(list(conversation.iter_groups())) == 2
    assert len(list(conversation.iter_nicks())) == 2


def test_root_is_not_rebound() -> None:
    """A second root with another id is dropped."""
    conversation = Conversation("remote.home.core.weechat")
    upsert_group_tree(conversation, _snapshot())
    upsert_group_tree(conversation, NickGroupPayload(id=99, parent_group_id=-1, name="root"))

    assert conversation.nicklist_root.id == 10
    assert conversation.search_group(99) is None


# ============================================================
#  Groups
# ============================================================


def test_group_without_parent_is_dropped() -> None:
    conversation = Conversation("remote.home.core.weechat")
    upsert_group_tree(
        conversation,
        NickGroupPayload(id=30, parent_group_id=404, name="ops", visible=True),
    )

    assert conversation.search_group(30) is None
    assert list(conversation.iter_groups()) == []


def test_group_update() -> None:
    conversation = Conversation("remote.home.irc.libera.#python")
    upsert_group_tree(conversation, _snapshot())
    upsert_group_tree(
        conversation,
        NickGroupPayload(id=11, parent_group_id=10, name="000|o", color_name="red", visible=False),
    )

    group = conversation.search_group(11)
    assert group.color == "red"
    assert group.visible is False


def test_remove_group_removes_its_nicks() -> None:
    conversation = Conversation("remote.home.irc.libera.#python")
    upsert_group_tree(conversation, _snapshot())

    assert remove_group(conversation, 11) is True
    assert conversation.search_group(11) is None
    assert conversation.search_nick(20) is None
    assert conversation.search_nick(21) is not None
    assert remove_group(conversation, 11) is False


# ============================================================
#  Nicks
# ============================================================


def test_nick_update_keeps_name() -> None:
    conversation = Conversation("remote.home.irc.libera.#python")
    upsert_group_tree(conversation, _snapshot())
    upsert_nick(
        conversation,
        NickPayload(id=20, parent_group_id=11, name="mallory", prefix="+", visible=True),
    )

    nick = conversation.search_nick(20)
    assert nick.name == "alice"
    assert nick.prefix == "+"
    assert nick.color is None


def test_nick_before_parent_converges() -> None:
    """A nick arriving before its group is dropped, and accepted once re-sent."""
    conversation = Conversation("remote.home.irc.libera.#python")
    upsert_group_tree(conversation, NickGroupPayload(id=10, parent_group_id=-1, name="root"))
    nick = NickPayload(id=40, parent_group_id=13, name="carol", visible=True)

    upsert_nick(conversation, nick)
    assert conversation.search_nick(40) is None

    upsert_group_tree(conversation, NickGroupPayload(id=13, parent_group_id=10, name="050|v"))
    upsert_nick(conversation, nick)
    assert conversation.search_nick(40).name == "carol"


def test_nick_without_parent_id_is_dropped() -> None:
    conversation = Conversation("remote.home.core.weechat")
    upsert_nick(conversation, NickPayload(id=41, name="dave"))

    assert conversation.search_nick(41) is None
    assert list(conversation.iter_nicks()) == []


def test_remove_nick() -> None:
    conversation = Conversation("remote.home.irc.libera.#python")
    upsert_group_tree(conversation, _snapshot())

    assert remove_nick(conversation, 21) is True
    assert remove_nick(conversation, 21) is False
    assert [n.name for n in conversation.iter_nicks()] == ["alice"]


def test_add_group_name_unique_below_parent() -> None:
    """A group name already used anywhere below the parent is refused."""
    conversation = Conversation("remote.home.test")
    ops = conversation.add_group(None, "ops", None, True)
    assert conversation.add_group(ops, "voiced", None, True) is not None

    assert conversation.add_group(None, "voiced", None, True) is None
    assert conversation.add_group(ops, "ops", None, True) is None
    assert conversation.add_group(None, "", None, True) is None
    assert [g.name for g in conversation.iter_groups()] == ["ops", "voiced"]
