"""
Unit tests for the body type handlers.

Handlers are called directly with a :class:`RemoteEvent`, the way the
dispatcher calls them for each body element.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import pytest

from relay_remote import RelayRemote
from relay_remote.handlers import (
    HANDLERS,
    RemoteEvent,
    apply_line,
    get_handler,
    handle_buffer,
    handle_line,
    handle_nick,
    handle_nick_group,
    handle_version,
)
from relay_remote.store import Conversation
from relay_remote.types import BodyType, LinePayload


def _buffer(remote: RelayRemote, **fields) -> Conversation | None:
    body = {"id": 1, "name": "irc.libera.#python", "number": 3}
    body.update(fields)
    handle_buffer(RemoteEvent(remote=remote, payload=body))
    conversations = remote.store.conversations()
    return conversations[-1] if conversations else None


# ============================================================
#  line
# ============================================================


def test_line_appended_with_prefix() -> None:
    conversation = Conversation("remote.home.irc.libera.#python")
    apply_line(
        conversation,
        LinePayload(
            date="2024-03-10T18:22:05.123456Z",
            prefix="alice",
            message="hello",
            tags=["irc_privmsg", "notify_message"],
        ),
    )

    line = conversation.lines[0]
    expected = datetime(2024, 3, 10, 18, 22, 5, tzinfo=timezone.utc).timestamp()
    assert line.y == -1
    assert (line.date, line.date_usec) == (int(expected), 123456)
    assert line.text == "alice\thello"
    assert line.prefix == "alice"
    assert line.tags == "irc_privmsg,notify_message"


def test_line_with_y_is_positional() -> None:
    """``y >= 0`` writes at a position; an unparsable date is the epoch."""
    conversation = Conversation("remote.home.fset")
    apply_line(conversation, LinePayload.from_json({"y": 5, "date": "", "prefix": "", "message": "hi"}))

    assert conversation.lines == []
    line = conversation.free_lines[5]
    assert (line.date, line.date_usec) == (0, 0)
    assert line.text == "hi"


def test_line_tags_joined() -> None:
    conversation = Conversation("remote.home.irc.libera.#python")
    apply_line(conversation, LinePayload.from_json({"message": "x", "tags": ["joined", "notify"]}))

    assert conversation.lines[0].tags == "joined,notify"
    assert conversation.lines[0].tag_list == ["joined", "notify"]


def test_line_without_conversation_is_noop(remote: RelayRemote) -> None:
    handle_line(RemoteEvent(remote=remote, payload={"message": "lost"}))
    assert remote.store.conversations() == []


# ============================================================
#  buffer
# ============================================================


def test_buffer_created_with_identity(remote: RelayRemote) -> None:
    conversation = _buffer(remote, title="Python help", type="formatted", nicklist=True)

    assert conversation.full_name == "remote.home.irc.libera.#python"
    assert conversation.get("localvar_relay_remote") == "home"
    assert conversation.get("localvar_relay_remote_id") == "1"
    assert conversation.get("localvar_relay_remote_number") == "3"
    assert conversation.get("title") == "Python help"
    assert conversation.get("nicklist") == "1"
    assert conversation.get("nicklist_display_groups") == "0"
    assert conversation.input_callback is not None


def test_buffer_update_overwrites_all_properties(remote: RelayRemote) -> None:
    """Fields absent from an update are reset, not kept."""
    _buffer(remote, title="Python help", short_name="#python")
    conversation = _buffer(remote, short_name="#py")

    assert len(remote.store.conversations()) == 1
    assert conversation.get("short_name") == "#py"
    assert conversation.get("title") is None


def test_buffer_keys_lines_and_nicklist(remote: RelayRemote) -> None:
    conversation = _buffer(
        remote,
        keys=[
            {"key": "meta-a", "command": "/buffer 1"},
            {"key": "meta-b", "command": 42},
        ],
        lines=[
            {"date": "2024-03-10T18:22:05Z", "prefix": "alice", "message": "one"},
            {"date": "2024-03-10T18:22:06Z", "prefix": "bob", "message": "two"},
        ],
        nicklist_root={
            "id": 100,
            "parent_group_id": -1,
            "nicks": [{"id": 101, "parent_group_id": 100, "name": "alice", "visible": True}],
        },
    )

    assert conversation.key_bindings == {"meta-a": "/buffer 1"}
    assert [line.message for line in conversation.lines] == ["one", "two"]
    assert conversation.search_nick(101).group is conversation.nicklist_root


def test_buffer_without_name_is_skipped(remote: RelayRemote) -> None:
    handle_buffer(RemoteEvent(remote=remote, payload={"id": 7, "lines": [{"message": "x"}]}))
    assert remote.store.conversations() == []


def test_buffer_name_taken_is_skipped(remote: RelayRemote) -> None:
    """The store refuses a second conversation with the same name."""
    _buffer(remote)
    _buffer(remote, id=2, lines=[{"message": "x"}])

    conversations = remote.store.conversations()
    assert len(conversations) == 1
    assert conversations[0].lines == []


# ============================================================
#  nick_group / nick
# ============================================================


def test_nick_events_need_conversation(remote: RelayRemote) -> None:
    conversation = _buffer(remote, nicklist_root={"id": 100, "parent_group_id": -1})

    handle_nick_group(
        RemoteEvent(
            remote=remote,
            name="nicklist_group_added",
            conversation=conversation,
            payload={"id": 102, "parent_group_id": 100, "name": "ops", "visible": True},
        )
    )
    handle_nick(
        RemoteEvent(
            remote=remote,
            name="nicklist_nick_added",
            conversation=conversation,
            payload={"id": 103, "parent_group_id": 102, "name": "carol", "visible": True},
        )
    )
    handle_nick(RemoteEvent(remote=remote, name="nicklist_nick_added", payload={"id": 104}))

    assert conversation.search_nick(103).group.name == "ops"

    handle_nick(
        RemoteEvent(
            remote=remote,
            name="nicklist_nick_removing",
            conversation=conversation,
            payload={"id": 103},
        )
    )
    assert conversation.search_nick(103) is None

    handle_nick_group(
        RemoteEvent(
            remote=remote,
            name="nicklist_group_removing",
            conversation=conversation,
            payload={"id": 102},
        )
    )
    assert conversation.search_group(102) is None


# ============================================================
#  version / table
# ============================================================


def test_version_reported(remote: RelayRemote, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="relay_remote.remote")
    handle_version(
        RemoteEvent(
            remote=remote,
            payload={
                "weechat_version": "4.4.0",
                "weechat_version_git": "v4.4.0-12",
                "relay_api_version": "0.1.0",
            },
        )
    )

    assert remote.version.relay_api_version == "0.1.0"
    assert "remote[home]: WeeChat: 4.4.0 (v4.4.0-12), API: 0.1.0" in caplog.text
    assert remote.store.conversations() == []


def test_handler_table() -> None:
    assert get_handler("buffer") is handle_buffer
    assert get_handler("future_feature") is None
    assert set(HANDLERS) == set(BodyType)
    with pytest.raises(TypeError):
        HANDLERS[BodyType.LINE] = handle_buffer  # type: ignore[index]
