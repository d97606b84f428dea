"""
Conversation store used by the relay remote engine.

The engine never owns mirrored entities: it borrows ``Conversation``,
``NickGroup`` and ``Nick`` handles from a store for the duration of one
event. Any object implementing :class:`ConversationStore` can be plugged
in; :class:`MemoryStore` keeps everything in memory and is what the
runtime uses by default.

Nicklist groups and nicks are indexed per conversation by the integer id
the remote assigned to them, so lookups never go through display names.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, Mapping, Protocol

from relay_remote.errors import StoreError

logger = logging.getLogger(__name__)

# Called with the conversation and the raw input text; returns True if handled
InputCallback = Callable[["Conversation", str], bool]

LOCALVAR_PREFIX = "localvar_"
LOCALVAR_SET_PREFIX = "localvar_set_"
LOCALVAR_DEL_PREFIX = "localvar_del_"
KEY_BIND_PREFIX = "key_bind_"
KEY_UNBIND_PREFIX = "key_unbind_"


@dataclass(eq=False)
class Line:
    """A line written into a conversation."""

    y: int
    date: int
    date_usec: int
    tags: str
    text: str

    @property
    def prefix(self) -> str:
        prefix, sep, _ = self.text.partition("\t")
        return prefix if sep else ""

    @property
    def message(self) -> str:
        prefix, sep, message = self.text.partition("\t")
        return message if sep else prefix

    @property
    def tag_list(self) -> list[str]:
        return self.tags.split(",") if self.tags else []


@dataclass(eq=False)
class NickGroup:
    """A group in a conversation nicklist."""

    name: str
    parent: NickGroup | None = field(default=None, repr=False)
    color: str | None = None
    visible: bool = True
    id: int | None = None
    groups: list[NickGroup] = field(default_factory=list, repr=False)
    nicks: list[Nick] = field(default_factory=list, repr=False)


@dataclass(eq=False)
class Nick:
    """A nick in a conversation nicklist."""

    name: str
    group: NickGroup = field(repr=False)
    color: str | None = None
    prefix: str | None = None
    prefix_color: str | None = None
    visible: bool = True
    id: int | None = None


class Conversation:
    """A local conversation: properties, lines and a nicklist.

    Properties are plain strings set with :meth:`set`. Two prefixes are
    special, as in the host client API: ``localvar_set_<name>`` stores a
    local variable (read back with ``get("localvar_<name>")``) and
    ``key_bind_<key>`` binds a key to a command.
    """

    def __init__(self, full_name: str, input_callback: InputCallback | None = None) -> None:
        self.full_name = full_name
        self.input_callback = input_callback
        self.properties: dict[str, str | None] = {}
        self.local_variables: dict[str, str] = {}
        self.key_bindings: dict[str, str] = {}
        self.lines: list[Line] = []
        self.free_lines: dict[int, Line] = {}
        self.nicklist_root = NickGroup(name="root")
        self._groups_by_id: dict[int, NickGroup] = {}
        self._nicks_by_id: dict[int, Nick] = {}

    def __repr__(self) -> str:
        return f"Conversation({self.full_name!r})"

    # -- Properties ---------------------------------------------------------

    def get(self, key: str) -> str | None:
        if key.startswith(LOCALVAR_PREFIX):
            return self.local_variables.get(key[len(LOCALVAR_PREFIX):])
        return self.properties.get(key)

    def set(self, key: str, value: str | None) -> None:
        if key.startswith(LOCALVAR_SET_PREFIX):
            name = key[len(LOCALVAR_SET_PREFIX):]
            if value is None:
                self.local_variables.pop(name, None)
            else:
                self.local_variables[name] = value
        elif key.startswith(LOCALVAR_DEL_PREFIX):
            self.local_variables.pop(key[len(LOCALVAR_DEL_PREFIX):], None)
        elif key.startswith(KEY_BIND_PREFIX):
            name = key[len(KEY_BIND_PREFIX):]
            if value is None:
                self.key_bindings.pop(name, None)
            else:
                self.key_bindings[name] = value
        elif key.startswith(KEY_UNBIND_PREFIX):
            self.key_bindings.pop(key[len(KEY_UNBIND_PREFIX):], None)
        else:
            self.properties[key] = value

    def set_properties(self, properties: Mapping[str, str | None]) -> None:
        for key, value in properties.items():
            self.set(key, value)

    def input(self, text: str) -> bool:
        """Submit user input, as if typed into the conversation."""
        if self.input_callback is None:
            return False
        return self.input_callback(self, text)

    # -- Lines --------------------------------------------------------------

    def write_line_at(self, y: int, date: int, date_usec: int, tags: str, text: str) -> Line:
        """Write a line at position ``y`` (free content), replacing any line there."""
        line = Line(y=y, date=date, date_usec=date_usec, tags=tags, text=text)
        self.free_lines[y] = line
        return line

    def append_line(self, date: int, date_usec: int, tags: str, text: str) -> Line:
        """Append a line at the end of the conversation (formatted content)."""
        line = Line(y=-1, date=date, date_usec=date_usec, tags=tags, text=text)
        self.lines.append(line)
        return line

    # -- Nicklist -----------------------------------------------------------

    def search_group(self, group_id: int) -> NickGroup | None:
        return self._groups_by_id.get(group_id)

    def search_nick(self, nick_id: int) -> Nick | None:
        return self._nicks_by_id.get(nick_id)

    def iter_groups(self, group: NickGroup | None = None) -> Iterator[NickGroup]:
        """Yield all groups below ``group`` (default: root), depth first."""
        for child in (group or self.nicklist_root).groups:
            yield child
            yield from self.iter_groups(child)

    def iter_nicks(self) -> Iterator[Nick]:
        yield from self.nicklist_root.nicks
        for group in self.iter_groups():
            yield from group.nicks

    def add_group(
        self,
        parent: NickGroup | None,
        name: str | None,
        color: str | None,
        visible: bool,
    ) -> NickGroup | None:
        """Add a group; returns None if the name is empty or already used.

        The name must not be used by ``parent`` or any group below it.
        """
        parent = parent or self.nicklist_root
        if not name:
            return None
        if parent.name == name or any(group.name == name for group in self.iter_groups(parent)):
            return None
        group = NickGroup(name=name, parent=parent, color=color, visible=visible)
        parent.groups.append(group)
        return group

    def add_nick(
        self,
        group: NickGroup | None,
        name: str | None,
        color: str | None,
        prefix: str | None,
        prefix_color: str | None,
        visible: bool,
    ) -> Nick | None:
        """Add a nick; returns None if the name is empty or already used."""
        group = group or self.nicklist_root
        if not name:
            return None
        if any(nick.name == name for nick in self.iter_nicks()):
            return None
        nick = Nick(
            name=name,
            group=group,
            color=color,
            prefix=prefix,
            prefix_color=prefix_color,
            visible=visible,
        )
        group.nicks.append(nick)
        return nick

    def remove_group(self, group: NickGroup) -> None:
        """Remove a group with all its subgroups and nicks.

        Removing the root group only empties it.
        """
        for child in list(group.groups):
            self.remove_group(child)
        for nick in list(group.nicks):
            self.remove_nick(nick)
        if group is self.nicklist_root:
            return
        if group.id is not None and self._groups_by_id.get(group.id) is group:
            del self._groups_by_id[group.id]
        if group.parent is not None and group in group.parent.groups:
            group.parent.groups.remove(group)
        group.parent = None

    def remove_nick(self, nick: Nick) -> None:
        if nick.id is not None and self._nicks_by_id.get(nick.id) is nick:
            del self._nicks_by_id[nick.id]
        if nick in nick.group.nicks:
            nick.group.nicks.remove(nick)

    def group_set(self, group: NickGroup, prop: str, value: Any) -> None:
        if prop == "id":
            if group.id is not None and self._groups_by_id.get(group.id) is group:
                del self._groups_by_id[group.id]
            group.id = value
            if value is not None:
                self._groups_by_id[value] = group
        elif prop == "color":
            group.color = value
        elif prop == "visible":
            group.visible = bool(value)
        else:
            raise StoreError(f"unknown nick group property: {prop}")

    def nick_set(self, nick: Nick, prop: str, value: Any) -> None:
        if prop == "id":
            if nick.id is not None and self._nicks_by_id.get(nick.id) is nick:
                del self._nicks_by_id[nick.id]
            nick.id = value
            if value is not None:
                self._nicks_by_id[value] = nick
        elif prop in ("color", "prefix", "prefix_color"):
            setattr(nick, prop, value)
        elif prop == "visible":
            nick.visible = bool(value)
        else:
            raise StoreError(f"unknown nick property: {prop}")


class ConversationStore(Protocol):
    """What the engine needs from the host's conversation storage."""

    def conversations(self) -> Iterable[Conversation]:
        ...

    def create_conversation(
        self,
        name: str,
        properties: Mapping[str, str | None],
        input_callback: InputCallback | None = None,
    ) -> Conversation | None:
        ...


class MemoryStore:
    """In-memory :class:`ConversationStore`."""

    def __init__(self) -> None:
        self._conversations: list[Conversation] = []

    def __len__(self) -> int:
        return len(self._conversations)

    def conversations(self) -> list[Conversation]:
        return list(self._conversations)

    def search(self, full_name: str) -> Conversation | None:
        for conversation in self._conversations:
            if conversation.full_name == full_name:
                return conversation
        return None

    def create_conversation(
        self,
        name: str,
        properties: Mapping[str, str | None],
        input_callback: InputCallback | None = None,
    ) -> Conversation | None:
        """Create a conversation; returns None if the name is empty or taken."""
        if not name or self.search(name) is not None:
            logger.debug("Conversation %r not created (empty or duplicate name)", name)
            return None
        conversation = Conversation(name, input_callback)
        conversation.set_properties(properties)
        self._conversations.append(conversation)
        logger.debug("Created conversation %s", name)
        return conversation

    def close(self, conversation: Conversation) -> None:
        """Close a conversation (host side; the engine never closes any)."""
        if conversation in self._conversations:
            self._conversations.remove(conversation)
