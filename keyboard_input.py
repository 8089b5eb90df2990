import queue
import sys

from pynput import keyboard

from controller import KeyEvent

# pynput special keys -> names understood by the controller
SPECIAL_KEY_NAMES = {
    keyboard.Key.esc: 'esc',
    keyboard.Key.space: 'space',
}


def key_name(key) -> str | None:
    """Translates a pynput key into a character or special key name."""
    if key in SPECIAL_KEY_NAMES:
        return SPECIAL_KEY_NAMES[key]
    char = getattr(key, 'char', None)
    if char:
        return char
    return None


def physical_key(key):
    """Identity of the physical key, the same for 'z' and Shift+'z'."""
    char = getattr(key, 'char', None)
    return char.lower() if char else key


def flush_console_input():
    """Drops keystrokes the terminal buffered while the listener was active."""
    if not sys.stdin.isatty():
        return
    try:
        import termios
        termios.tcflush(sys.stdin, termios.TCIFLUSH)
    except ImportError:
        import msvcrt
        while msvcrt.kbhit():
            msvcrt.getwch()


class KeyReader:
    """Feeds key presses and releases from a pynput listener into a queue.

    Auto-repeat presses of a key that is already held are dropped, so holding
    a key plays it once.
    """

    def __init__(self):
        self.events: queue.Queue = queue.Queue()
        self.current_pressed_keys = set()
        self._listener_instance: keyboard.Listener | None = None

    def _on_press(self, key):
        """Callback for key press events."""
        ident = physical_key(key)
        if ident in self.current_pressed_keys:
            return
        self.current_pressed_keys.add(ident)
        name = key_name(key)
        if name is not None:
            self.events.put(KeyEvent('press', name, ident))

    def _on_release(self, key):
        """Callback for key release events."""
        ident = physical_key(key)
        self.current_pressed_keys.discard(ident)
        name = key_name(key)
        if name is not None:
            self.events.put(KeyEvent('release', name, ident))

    def read(self, timeout: float | None = None) -> KeyEvent | None:
        """Blocks for the next key event; returns None on timeout."""
        try:
            return self.events.get(timeout=timeout)
        except queue.Empty:
            return None

    def start(self):
        """Starts the keyboard listener in its own thread."""
        if self._listener_instance and self._listener_instance.running:
            return
        self.current_pressed_keys.clear()
        self.events = queue.Queue()
        self._listener_instance = keyboard.Listener(on_press=self._on_press, on_release=self._on_release)
        self._listener_instance.start()
        self._listener_instance.wait()

    def stop(self):
        """Stops the keyboard listener thread."""
        if self._listener_instance:
            try:
                self._listener_instance.stop()
            except Exception as e:
                print(f"Error sending stop signal to pynput listener: {e}", file=sys.stderr)
            self._listener_instance = None
        flush_console_input()
