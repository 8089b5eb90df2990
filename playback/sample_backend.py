import os
import sys
import threading

os.environ.setdefault('PYGAME_HIDE_SUPPORT_PROMPT', '1')
try:
    import pygame
except ImportError:
    print("Error: pygame library not found.", file=sys.stderr)
    print("Please install it using: pip install pygame", file=sys.stderr)
    sys.exit(1)

from config import MIXER_CHANNEL_GROWTH, MIXER_CHANNELS, VOICE_POLL_INTERVAL_SEC
from errors import AssetUnreadable
from playback.base import AudioBackend, FinishedCallback, Voice


class SampleVoice(Voice):
    """A pygame Sound bound to its own mixer Channel."""

    def __init__(self, note_key: int, path: str, sound, channel, on_finished: FinishedCallback,
                 poll_interval: float = VOICE_POLL_INTERVAL_SEC):
        super().__init__(note_key, path)
        self._sound = sound
        self._channel = channel
        self._on_finished = on_finished
        self._poll_interval = poll_interval
        self._lock = threading.Lock()
        self._released = False
        self._done = threading.Event()
        self._monitor_thread: threading.Thread | None = None

    @property
    def is_playing(self) -> bool:
        return not self._released

    def _owns_channel(self) -> bool:
        # Another voice may have been handed the channel once ours went idle
        return self._channel is not None and self._channel.get_sound() is self._sound

    def start(self):
        if self._released:
            return
        try:
            self._channel.play(self._sound)
        except pygame.error as e:
            self._release(halt=False)
            raise AssetUnreadable(self.path, str(e)) from e
        self._monitor_thread = threading.Thread(target=self._monitor, daemon=True)
        self._monitor_thread.start()

    def _monitor(self):
        """Watches the channel until the clip ends or stop() releases the voice."""
        while not self._done.wait(self._poll_interval):
            with self._lock:
                if self._released:
                    return
                finished = not (self._channel.get_busy() and self._owns_channel())
            if finished:
                break
        if self._release(halt=False):
            try:
                self._on_finished(self)
            except Exception as e:
                print(f"Error in completion handler for note {self.note_key}: {e}", file=sys.stderr)

    def _release(self, halt: bool) -> bool:
        """Frees sound and channel. Returns True only for the call that did it."""
        with self._lock:
            if self._released:
                return False
            self._released = True
            self._done.set()
            if halt and self._owns_channel():
                try:
                    self._channel.stop()
                except pygame.error as e:
                    print(f"Warning: Error stopping channel for note {self.note_key}: {e}", file=sys.stderr)
            self._sound = None
            self._channel = None
            return True

    def stop(self):
        self._release(halt=True)

    def join(self, timeout: float | None = None):
        """Waits for the monitor thread (used when shutting down)."""
        if self._monitor_thread and self._monitor_thread is not threading.current_thread():
            self._monitor_thread.join(timeout)


class SamplePlaybackBackend(AudioBackend):
    """Playback backend using pygame to play pre-recorded audio samples."""

    def __init__(self, num_channels: int = MIXER_CHANNELS):
        self.num_channels = num_channels
        self.is_initialized = False
        self._channel_lock = threading.Lock()

    def start(self):
        """Initialize pygame mixer."""
        if self.is_initialized:
            return
        print("Initializing pygame mixer...")
        try:
            pygame.mixer.init()
            pygame.mixer.set_num_channels(self.num_channels)
        except pygame.error as e:
            print(f"Error initializing pygame mixer: {e}", file=sys.stderr)
            print("Sample playback will likely fail.", file=sys.stderr)
            return
        print(f"Pygame mixer initialized with {self.num_channels} channels.")
        self.is_initialized = True

    def stop(self):
        """Stop all currently playing sounds and quit the mixer."""
        if not self.is_initialized:
            return
        print("Stopping all sample sounds...")
        try:
            pygame.mixer.stop()
            pygame.mixer.quit()
        except pygame.error as e:
            print(f"Error stopping pygame mixer: {e}", file=sys.stderr)
        self.is_initialized = False

    def _free_channel(self):
        """Finds an idle channel, growing the pool when every channel is busy."""
        with self._channel_lock:
            channel = pygame.mixer.find_channel()
            if channel is None:
                self.num_channels += MIXER_CHANNEL_GROWTH
                pygame.mixer.set_num_channels(self.num_channels)
                channel = pygame.mixer.find_channel()
            if channel is None:
                raise pygame.error("no free mixer channel")
            return channel

    def open_voice(self, note_key: int, path: str, on_finished: FinishedCallback) -> SampleVoice:
        if not self.is_initialized:
            raise AssetUnreadable(path, "audio backend not initialized")
        try:
            sound = pygame.mixer.Sound(path)
            channel = self._free_channel()
        except (pygame.error, OSError) as e:
            raise AssetUnreadable(path, str(e)) from e
        return SampleVoice(note_key, path, sound, channel, on_finished)
