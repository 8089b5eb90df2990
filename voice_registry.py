import queue
import sys
import threading

from playback.base import AudioBackend, Voice

_SHUTDOWN = object()


class VoiceRegistry:
    """Tracks every voice that may still be sounding.

    Each note-key owns at most one slot. Without sustain, triggering an occupied
    key stops the previous voice first, like striking a real key again. With
    sustain engaged the previous voice keeps ringing: it loses the slot but is
    still tracked until it finishes or stop_all() sweeps it.

    All mutations happen under one lock. Voices that finish on their own do not
    touch the registry directly; they post themselves to a completion queue
    which is drained by the reaper thread (or by process_pending()). A finished
    voice is forgotten by identity, so a sustained-over voice can never evict
    the newer voice that now holds its note-key.
    """

    def __init__(self, backend: AudioBackend):
        self.backend = backend
        self._lock = threading.RLock()
        self._slots: dict[int, Voice] = {}
        self._voices: set[Voice] = set()
        self._sustain = False
        self._completions: queue.Queue = queue.Queue()
        self._reaper_thread: threading.Thread | None = None

    # --- Sustain pedal ---
    @property
    def sustain(self) -> bool:
        return self._sustain

    def set_sustain(self, on: bool):
        with self._lock:
            self._sustain = bool(on)

    def toggle_sustain(self) -> bool:
        with self._lock:
            self._sustain = not self._sustain
            return self._sustain

    # --- Playback ---
    def trigger(self, note_key: int, path: str) -> Voice:
        """Starts a new voice for note_key. Raises AssetUnreadable on open failure."""
        # Decoding can be slow, so it happens before the lock is taken
        voice = self.backend.open_voice(note_key, path, self.notify_finished)
        with self._lock:
            if not self._sustain:
                old = self._slots.pop(note_key, None)
                if old is not None:
                    old.stop()
                    self._voices.discard(old)
            voice.start()
            # Completions wait on the lock, so an instantly finished voice is still forgotten
            self._slots[note_key] = voice
            self._voices.add(voice)
            return voice

    def release(self, note_key: int) -> bool:
        """Key-up: stops the note unless the sustain pedal holds it."""
        with self._lock:
            if self._sustain:
                return False
            voice = self._slots.pop(note_key, None)
            if voice is None:
                return False
            voice.stop()
            self._voices.discard(voice)
            return True

    def stop_voice(self, voice: Voice) -> bool:
        """Stops this exact voice if it is still tracked."""
        with self._lock:
            if voice not in self._voices:
                return False
            voice.stop()
            self._forget(voice)
            return True

    def stop_all(self):
        with self._lock:
            voices = list(self._voices)
            self._voices.clear()
            self._slots.clear()
            for voice in voices:
                try:
                    voice.stop()
                except Exception as e:
                    print(f"Warning: Error stopping note {voice.note_key}: {e}", file=sys.stderr)

    # --- Completion channel ---
    def notify_finished(self, voice: Voice):
        """Called from a voice's own thread when its clip has ended."""
        self._completions.put(voice)

    def _forget(self, voice: Voice):
        self._voices.discard(voice)
        if self._slots.get(voice.note_key) is voice:
            del self._slots[voice.note_key]

    def _handle_completion(self, voice: Voice):
        with self._lock:
            self._forget(voice)

    def process_pending(self) -> int:
        """Applies every queued completion now. Returns how many were handled."""
        handled = 0
        while True:
            try:
                voice = self._completions.get_nowait()
            except queue.Empty:
                return handled
            if voice is _SHUTDOWN:
                continue
            self._handle_completion(voice)
            handled += 1

    def _reap_loop(self):
        while True:
            voice = self._completions.get()
            if voice is _SHUTDOWN:
                break
            self._handle_completion(voice)

    def start(self):
        """Starts the reaper thread that applies completions as they arrive."""
        if self._reaper_thread and self._reaper_thread.is_alive():
            return
        self._reaper_thread = threading.Thread(target=self._reap_loop, daemon=True)
        self._reaper_thread.start()

    def close(self):
        """Silences everything and stops the reaper thread."""
        self.stop_all()
        if self._reaper_thread and self._reaper_thread.is_alive():
            self._completions.put(_SHUTDOWN)
            self._reaper_thread.join(timeout=1.0)
        self._reaper_thread = None

    # --- Queries ---
    def get(self, note_key: int) -> Voice | None:
        with self._lock:
            return self._slots.get(note_key)

    def live_voices(self) -> list[Voice]:
        with self._lock:
            return list(self._voices)

    def __len__(self):
        with self._lock:
            return len(self._voices)

    def __contains__(self, note_key: int):
        with self._lock:
            return note_key in self._slots
