import abc
import os
import sys

# Attempt to import music21
try:
    from music21 import pitch
except ImportError:
    print("Error: music21 library not found.", file=sys.stderr)
    print("Please install it using: pip install music21", file=sys.stderr)
    sys.exit(1)

from config import (
    KEYBOARD_MIN_MIDI,
    PIANO_KEY_COUNT,
    PIANO_SAMPLE_EXTENSION,
    SCALE_SAMPLE_TEMPLATE,
)
from errors import AssetMissing, InvalidInput


def sharp_name_with_octave(note_pitch: pitch.Pitch) -> str:
    """Spells a pitch with sharps ('B-4' -> 'A#4'), the naming used for sample files."""
    if '-' in note_pitch.name:
        enharmonic_pitch = note_pitch.getEnharmonic()
        if '#' in enharmonic_pitch.name or enharmonic_pitch.accidental is None:
            return enharmonic_pitch.nameWithOctave
    return note_pitch.nameWithOctave


def note_name_for_key(note_key: int) -> str:
    """Canonical name ('C3', 'C#3', ... 'B5') of a piano note-key."""
    if not 0 <= note_key < PIANO_KEY_COUNT:
        raise InvalidInput(f"Piano note-key {note_key} is outside 0-{PIANO_KEY_COUNT - 1}")
    return sharp_name_with_octave(pitch.Pitch(midi=KEYBOARD_MIN_MIDI + note_key))


def piano_file_name(note_key: int) -> str:
    return note_name_for_key(note_key) + PIANO_SAMPLE_EXTENSION


def expected_piano_files(directory: str) -> dict[str, str]:
    """Note name -> expected file path for the whole chromatic set."""
    return {
        note_name_for_key(k): os.path.join(directory, piano_file_name(k))
        for k in range(PIANO_KEY_COUNT)
    }


def find_missing_piano_assets(directory: str) -> list[str]:
    """Returns the names of the chromatic notes whose file does not exist."""
    return [name for name, path in expected_piano_files(directory).items()
            if not os.path.isfile(path)]


def report_missing_piano_assets(directory: str) -> list[str]:
    missing = find_missing_piano_assets(directory)
    if missing:
        print(f"Warning: {len(missing)} of {PIANO_KEY_COUNT} piano samples missing in '{directory}':", file=sys.stderr)
        print(f"  {', '.join(missing)}", file=sys.stderr)
        print("  Run with --prepare-assets <base sample> to generate them.", file=sys.stderr)
    else:
        print(f"All {PIANO_KEY_COUNT} piano samples found in '{directory}'.")
    return missing


class NoteAssetResolver(abc.ABC):
    """Maps a note-key to the audio file that plays it."""

    def __init__(self, directory: str):
        self.directory = directory

    @abc.abstractmethod
    def path_for(self, note_key: int) -> str:
        """Builds the expected path without touching the filesystem."""
        pass

    def resolve(self, note_key: int) -> str:
        """Returns the file path for note_key, raising AssetMissing if absent."""
        path = self.path_for(note_key)
        if not os.path.isfile(path):
            raise AssetMissing(note_key, path)
        return path


class ScaleAssetResolver(NoteAssetResolver):
    """Scale degrees 1-7; auto-play keys (-1..-7) resolve to the same files."""

    def __init__(self, directory: str, template: str = SCALE_SAMPLE_TEMPLATE):
        super().__init__(directory)
        self.template = template

    def path_for(self, note_key: int) -> str:
        degree = abs(note_key)
        if not 1 <= degree <= 7:
            raise InvalidInput(f"Scale degree {note_key} is outside 1-7")
        return os.path.join(self.directory, self.template.format(degree=degree))


class ChromaticAssetResolver(NoteAssetResolver):
    """Piano note-keys 0-35, one pre-generated file per semitone."""

    def path_for(self, note_key: int) -> str:
        return os.path.join(self.directory, piano_file_name(note_key))
