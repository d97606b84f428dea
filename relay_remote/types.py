"""
Pydantic models for the relay remote engine.

Inbound payloads are built with ``from_json`` rather than validated
directly: field decoding never fails, absent or mistyped fields take
their default value (see :mod:`relay_remote.json_fields`).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

from relay_remote.json_fields import get_bool, get_int, get_list, get_object, get_str


# ============================================================
#  Configuration
# ============================================================


class RemoteConfig(BaseModel):
    """Configuration of one remote."""

    name: str = Field(min_length=1)
    sync_colors: str = "weechat"
    debug: int = 0
    outbox_size: int = Field(0, ge=0)


# ============================================================
#  Envelope
# ============================================================


class BodyType(str, Enum):
    """Body types the engine knows how to apply."""

    BUFFER = "buffer"
    LINE = "line"
    NICK_GROUP = "nick_group"
    NICK = "nick"
    VERSION = "version"


class EventInfo(BaseModel):
    """The optional ``event`` object of an envelope."""

    name: str | None = None
    buffer_id: int = -1

    @classmethod
    def from_json(cls, obj: dict[str, Any]) -> EventInfo:
        return cls(name=get_str(obj, "name"), buffer_id=get_int(obj, "buffer_id"))


class Envelope(BaseModel):
    """A message received from the remote."""

    code: int = -1
    body_type: str | None = None
    event: EventInfo | None = None
    body: Any = None

    @classmethod
    def from_json(cls, obj: dict[str, Any]) -> Envelope:
        event = get_object(obj, "event")
        return cls(
            code=get_int(obj, "code"),
            body_type=get_str(obj, "body_type"),
            event=EventInfo.from_json(event) if event is not None else None,
            body=obj.get("body"),
        )

    @property
    def bodies(self) -> list[Any]:
        """The body elements, one per handler call."""
        if isinstance(self.body, list):
            return list(self.body)
        return [self.body]


# ============================================================
#  Payloads
# ============================================================


class LinePayload(BaseModel):
    """Body of type ``line``."""

    y: int = -1
    date: str | None = None
    prefix: str | None = None
    message: str | None = None
    tags: list[str] = Field(default_factory=list)

    @classmethod
    def from_json(cls, obj: Any) -> LinePayload:
        return cls(
            y=get_int(obj, "y"),
            date=get_str(obj, "date"),
            prefix=get_str(obj, "prefix"),
            message=get_str(obj, "message"),
            tags=[tag for tag in get_list(obj, "tags") if isinstance(tag, str)],
        )


class NickPayload(BaseModel):
    """Body of type ``nick``, also found in ``nicks`` of a group."""

    id: int = -1
    parent_group_id: int = -1
    name: str | None = None
    color_name: str | None = None
    prefix: str | None = None
    prefix_color_name: str | None = None
    visible: bool = False

    @classmethod
    def from_json(cls, obj: Any) -> NickPayload:
        return cls(
            id=get_int(obj, "id"),
            parent_group_id=get_int(obj, "parent_group_id"),
            name=get_str(obj, "name"),
            color_name=get_str(obj, "color_name"),
            prefix=get_str(obj, "prefix"),
            prefix_color_name=get_str(obj, "prefix_color_name"),
            visible=get_bool(obj, "visible"),
        )


class NickGroupPayload(BaseModel):
    """Body of type ``nick_group``: a group with its subgroups and nicks."""

    id: int = -1
    parent_group_id: int = -1
    name: str | None = None
    color_name: str | None = None
    visible: bool = False
    groups: list[NickGroupPayload] = Field(default_factory=list)
    nicks: list[NickPayload] = Field(default_factory=list)

    @classmethod
    def from_json(cls, obj: Any) -> NickGroupPayload:
        return cls(
            id=get_int(obj, "id"),
            parent_group_id=get_int(obj, "parent_group_id"),
            name=get_str(obj, "name"),
            color_name=get_str(obj, "color_name"),
            visible=get_bool(obj, "visible"),
            groups=[cls.from_json(group) for group in get_list(obj, "groups")],
            nicks=[NickPayload.from_json(nick) for nick in get_list(obj, "nicks")],
        )


class KeyBinding(BaseModel):
    """A key bound to a command on a conversation."""

    key: str
    command: str


class BufferPayload(BaseModel):
    """Body of type ``buffer``."""

    id: int = -1
    name: str | None = None
    short_name: str | None = None
    number: int = -1
    type: str | None = None
    title: str | None = None
    nicklist: bool = False
    nicklist_case_sensitive: bool = False
    nicklist_display_groups: bool = False
    keys: list[KeyBinding] = Field(default_factory=list)
    lines: list[LinePayload] = Field(default_factory=list)
    nicklist_root: NickGroupPayload | None = None

    @classmethod
    def from_json(cls, obj: Any) -> BufferPayload:
        keys = []
        for item in get_list(obj, "keys"):
            key = get_str(item, "key")
            command = get_str(item, "command")
            if key is not None and command is not None:
                keys.append(KeyBinding(key=key, command=command))
        nicklist_root = get_object(obj, "nicklist_root")
        return cls(
            id=get_int(obj, "id"),
            name=get_str(obj, "name"),
            short_name=get_str(obj, "short_name"),
            number=get_int(obj, "number"),
            type=get_str(obj, "type"),
            title=get_str(obj, "title"),
            nicklist=get_bool(obj, "nicklist"),
            nicklist_case_sensitive=get_bool(obj, "nicklist_case_sensitive"),
            nicklist_display_groups=get_bool(obj, "nicklist_display_groups"),
            keys=keys,
            lines=[LinePayload.from_json(line) for line in get_list(obj, "lines")],
            nicklist_root=(
                NickGroupPayload.from_json(nicklist_root) if nicklist_root is not None else None
            ),
        )


class VersionInfo(BaseModel):
    """Body of type ``version``."""

    weechat_version: str | None = None
    weechat_version_git: str | None = None
    relay_api_version: str | None = None

    @classmethod
    def from_json(cls, obj: Any) -> VersionInfo:
        return cls(
            weechat_version=get_str(obj, "weechat_version"),
            weechat_version_git=get_str(obj, "weechat_version_git"),
            relay_api_version=get_str(obj, "relay_api_version"),
        )


# ============================================================
#  Outbound requests
# ============================================================


class SyncBody(BaseModel):
    colors: str = "weechat"


class SyncRequest(BaseModel):
    """Asks the remote to send its full state and then keep us updated."""

    request: Literal["POST /api/sync"] = "POST /api/sync"
    body: SyncBody = Field(default_factory=SyncBody)


class InputBody(BaseModel):
    buffer_id: int
    command: str


class InputRequest(BaseModel):
    """Forwards text typed in a mirrored conversation to the remote."""

    request: Literal["POST /api/input"] = "POST /api/input"
    body: InputBody
