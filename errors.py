class PianoError(Exception):
    """Base class for errors raised while resolving or playing notes."""


class AssetMissing(PianoError):
    """The audio file for a note does not exist."""

    def __init__(self, note_key: int, path: str):
        super().__init__(f"Sample file for note {note_key} not found: '{path}'")
        self.note_key = note_key
        self.path = path


class AssetUnreadable(PianoError):
    """The audio file exists but could not be opened or decoded."""

    def __init__(self, path: str, message: str):
        super().__init__(f"Could not open sample '{path}': {message}")
        self.path = path
        self.message = message


class InvalidInput(PianoError):
    """A keystroke or note identifier that maps to nothing."""
