"""Shared fixtures: a remote named ``home`` collecting what it sends."""

from __future__ import annotations

import pytest

from relay_remote import RelayRemote


@pytest.fixture
def sent() -> list[str]:
    return []


@pytest.fixture
def remote(sent: list[str]) -> RelayRemote:
    return RelayRemote("home", sender=sent.append)
