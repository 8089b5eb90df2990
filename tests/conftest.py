"""Shared fixtures: an in-memory audio backend whose voices finish on demand."""

import pytest

from fakes import FakeBackend
from voice_registry import VoiceRegistry


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def registry(backend):
    return VoiceRegistry(backend)


@pytest.fixture
def scale_dir(tmp_path):
    """Directory with scale samples for degrees 1-7."""
    for degree in range(1, 8):
        (tmp_path / f"note-{degree}.mp3").write_bytes(b"ID3")
    return tmp_path
