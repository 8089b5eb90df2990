import os
import sys
from typing import NamedTuple

from assets import NoteAssetResolver, note_name_for_key
from config import EXIT_KEY, PIANO_KEY_MAP, SCALE_KEYS, SUSTAIN_KEY
from errors import InvalidInput, PianoError
from voice_registry import VoiceRegistry


class KeyEvent(NamedTuple):
    kind: str # 'press' or 'release'
    key: str # character, or a special key name such as 'esc'
    ident: object = None # physical key, same for press and release


def print_keymap_reference(path: str | None):
    """Prints the keyboard reference file verbatim; a missing file is ignored."""
    if not path or not os.path.isfile(path):
        return
    try:
        with open(path, 'r', encoding='utf-8') as f:
            print(f.read())
    except (OSError, UnicodeDecodeError) as e:
        print(f"Warning: Could not read keymap reference '{path}': {e}", file=sys.stderr)


def _physical(event: KeyEvent):
    return event.ident if event.ident is not None else event.key.lower()


class ManualController:
    """Turns key events into notes on the voice registry.

    Both modes read one event at a time until the exit key, then silence every
    voice and return to the menu.
    """

    def __init__(self, registry: VoiceRegistry, reader):
        self.registry = registry
        self.reader = reader

    def _trigger(self, resolver: NoteAssetResolver, note_key: int, label: str) -> bool:
        try:
            path = resolver.resolve(note_key)
            self.registry.trigger(note_key, path)
        except PianoError as e:
            print(f"\nWarning: {e}", file=sys.stderr)
            return False
        print(f"{label} ", end='', flush=True)
        return True

    def _report_invalid(self, key: str, hint: str):
        print(f"\n{InvalidInput(f'Invalid key {key!r}')}, {hint}")

    def _run(self, handle_event) -> None:
        self.reader.start()
        try:
            while True:
                event = self.reader.read()
                if event is None:
                    continue
                if event.kind == 'press' and event.key == EXIT_KEY:
                    break
                handle_event(event)
        finally:
            self.reader.stop()
            self.registry.stop_all()

    def run_scale_mode(self, resolver: NoteAssetResolver):
        print("\nEntering scale mode. Press 1-7 to play a scale degree, Esc to return to the menu.")
        print("Several keys can sound together; each note plays independently.")

        def handle(event: KeyEvent):
            if event.kind != 'press':
                return
            degree = SCALE_KEYS.get(event.key)
            if degree is None:
                self._report_invalid(event.key, "press 1-7 or Esc to exit.")
                return
            self._trigger(resolver, degree, str(degree))

        self._run(handle)
        print("\nLeft scale mode.")

    def run_piano_mode(self, resolver: NoteAssetResolver, keymap_reference: str | None = None):
        print("\nEntering piano mode. Rows Z/A/Q play octaves 3/4/5, Shift plays the sharp.")
        print("Space toggles the sustain pedal, Esc returns to the menu.")
        print_keymap_reference(keymap_reference)
        self.registry.set_sustain(False)
        held: dict[object, int] = {} # physical key -> note-key it started

        def handle(event: KeyEvent):
            if event.kind == 'release':
                note_key = held.pop(_physical(event), None)
                if note_key is not None:
                    self.registry.release(note_key)
                return
            if event.key == SUSTAIN_KEY:
                state = self.registry.toggle_sustain()
                print(f"\nSustain: {'ON' if state else 'OFF'}")
                return
            note_key = PIANO_KEY_MAP.get(event.key)
            if note_key is None:
                self._report_invalid(event.key, "use the piano keys, Space for sustain or Esc to exit.")
                return
            if self._trigger(resolver, note_key, note_name_for_key(note_key)):
                held[_physical(event)] = note_key

        try:
            self._run(handle)
        finally:
            # The pedal belongs to piano mode; other modes always retrigger
            self.registry.set_sustain(False)
        print("\nLeft piano mode.")
