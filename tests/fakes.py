"""In-memory stand-ins for the audio backend and the keyboard reader."""

import threading
import time

from errors import AssetUnreadable
from playback.base import AudioBackend, Voice


class FakeVoice(Voice):
    """Voice that plays nothing; finish() simulates reaching end-of-stream."""

    def __init__(self, note_key, path, on_finished):
        super().__init__(note_key, path)
        self._on_finished = on_finished
        self._lock = threading.Lock()
        self.released = False
        self.started = False
        self.release_count = 0
        self.stop_calls = 0

    @property
    def is_playing(self):
        return self.started and not self.released

    def start(self):
        self.started = True

    def _release(self):
        with self._lock:
            if self.released:
                return False
            self.released = True
            self.release_count += 1
            return True

    def stop(self):
        self.stop_calls += 1
        self._release()

    def finish(self):
        """Natural completion, as the audio side would report it."""
        if self._release():
            self._on_finished(self)


class FakeBackend(AudioBackend):
    def __init__(self, unreadable=()):
        self.unreadable = set(unreadable)
        self.opened: list[FakeVoice] = []
        self.started = False

    def start(self):
        self.started = True

    def stop(self):
        self.started = False

    def open_voice(self, note_key, path, on_finished):
        if path in self.unreadable:
            raise AssetUnreadable(path, "unsupported format")
        voice = FakeVoice(note_key, path, on_finished)
        self.opened.append(voice)
        return voice


class ScriptedReader:
    """Stands in for KeyReader, replaying a fixed list of key events.

    With idle=True an exhausted script behaves like a quiet keyboard: read()
    waits out its timeout and returns None.
    """

    def __init__(self, events, idle=False):
        self._events = list(events)
        self._idle = idle
        self.started = 0
        self.stopped = 0

    def start(self):
        self.started += 1

    def stop(self):
        self.stopped += 1

    def read(self, timeout=None):
        if not self._events:
            if self._idle:
                time.sleep(timeout or 0)
                return None
            raise AssertionError("controller read past the end of the script")
        return self._events.pop(0)
