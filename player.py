import sys
import threading
from typing import Iterable

from assets import NoteAssetResolver
from config import DEFAULT_NOTE_INTERVAL_SEC
from errors import PianoError
from notation import REST
from voice_registry import VoiceRegistry


def autoplay_key(degree: int) -> int:
    """Auto-play voices use negative keys so they never contend with manual play."""
    return -abs(degree)


class AutoPlayer:
    """Plays a notation sequence on a background thread, one symbol per interval."""

    def __init__(self, registry: VoiceRegistry, resolver: NoteAssetResolver,
                 interval: float = DEFAULT_NOTE_INTERVAL_SEC):
        if interval <= 0:
            raise ValueError(f"Auto-play interval must be positive, got {interval}")
        self.registry = registry
        self.resolver = resolver
        self.interval = interval

        self.is_playing = False
        self.playback_thread: threading.Thread | None = None
        self.stop_event = threading.Event()
        self._timers: list[threading.Timer] = []
        self._timers_lock = threading.Lock()

    def _play_symbol(self, degree: int):
        """Triggers one note and bounds its length to the interval."""
        note_key = autoplay_key(degree)
        try:
            path = self.resolver.resolve(note_key)
            voice = self.registry.trigger(note_key, path)
        except PianoError as e:
            print(f"Warning: {e}. Skipping.", file=sys.stderr)
            return
        print(degree, end='', flush=True)

        timer = threading.Timer(self.interval, self.registry.stop_voice, args=[voice])
        timer.daemon = True
        with self._timers_lock:
            self._timers = [t for t in self._timers if t.is_alive()]
            self._timers.append(timer)
        timer.start()

    def _playback_loop(self, symbols: Iterable[int | None], stop_event: threading.Event):
        """The actual playback logic run in a separate thread.

        Each run watches its own stop_event, so a run that outlived stop()'s
        join can never be revived by a later play().
        """
        try:
            for symbol in symbols:
                if stop_event.is_set():
                    break
                if symbol is REST:
                    print(' ', end='', flush=True)
                else:
                    self._play_symbol(symbol)
                # Wait for the step, returning early if stop is requested
                if stop_event.wait(self.interval):
                    break
        except Exception as e:
            print(f"\nUnexpected error during auto-play: {e}", file=sys.stderr)
        finally:
            if stop_event is self.stop_event:
                self.is_playing = False
            if stop_event.is_set():
                print("\nAuto-play stopped.")
            else:
                print("\nAuto-play finished.")

    def play(self, symbols: Iterable[int | None]):
        """Starts playing symbols; returns immediately."""
        if self.is_playing:
            print("Warning: Auto-play already in progress. Stopping first.")
            self.stop()
        self.stop_event = threading.Event()
        self.playback_thread = threading.Thread(target=self._playback_loop,
                                                args=(symbols, self.stop_event), daemon=True)
        self.is_playing = True
        self.playback_thread.start()

    def wait(self, timeout: float | None = None) -> bool:
        """Blocks until playback ends. Returns True if it has ended."""
        if self.playback_thread:
            self.playback_thread.join(timeout)
            return not self.playback_thread.is_alive()
        return True

    def _cancel_timers(self):
        with self._timers_lock:
            timers, self._timers = self._timers, []
        for timer in timers:
            timer.cancel()

    def stop(self):
        """Cancels playback and silences every voice."""
        self.stop_event.set()
        if self.playback_thread and self.playback_thread.is_alive() \
                and self.playback_thread is not threading.current_thread():
            self.playback_thread.join(timeout=max(1.0, self.interval * 2))
        self._cancel_timers()
        self.registry.stop_all()
