import abc
from typing import Callable


class Voice(abc.ABC):
    """One playing instance of a note.

    A voice owns its decoded audio and its output channel. It is released
    exactly once, either by stop() or by reaching the end of the clip;
    whichever comes second is a no-op.
    """

    def __init__(self, note_key: int, path: str):
        self.note_key = note_key
        self.path = path

    @abc.abstractmethod
    def start(self):
        """Begin asynchronous playback."""
        pass

    @abc.abstractmethod
    def stop(self):
        """Halt playback and release resources. Safe to call repeatedly."""
        pass

    @property
    @abc.abstractmethod
    def is_playing(self) -> bool:
        pass

    def __repr__(self):
        return f"<{type(self).__name__} note={self.note_key} playing={self.is_playing}>"


# Called from the audio side (not the caller's thread) when a voice ends on its own.
FinishedCallback = Callable[[Voice], None]


class AudioBackend(abc.ABC):
    """Abstract base class for the audio output that voices are opened on."""

    @abc.abstractmethod
    def start(self):
        """Initialize the backend (if necessary)."""
        pass

    @abc.abstractmethod
    def stop(self):
        """Clean up the backend (if necessary)."""
        pass

    @abc.abstractmethod
    def open_voice(self, note_key: int, path: str, on_finished: FinishedCallback) -> Voice:
        """Open the file at path on a fresh output channel.

        The returned voice has not been started yet. Raises AssetUnreadable
        if the file cannot be opened or decoded. on_finished is invoked at most
        once, only on natural completion, never after stop().
        """
        pass
