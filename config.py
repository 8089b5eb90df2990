# --- Configuration ---
DEFAULT_SAMPLES_DIRECTORY = 'samples'
SCALE_SAMPLE_TEMPLATE = 'note-{degree}.mp3'
DEFAULT_PIANO_DIRECTORY = 'samples/piano' # Pre-generated chromatic set
PIANO_SAMPLE_EXTENSION = '.wav'
KEYMAP_REFERENCE_FILE = 'keymap.txt'

DEFAULT_NOTE_INTERVAL_SEC = 0.3 # Auto-play time per notation symbol

# --- Keyboard Range Definition ---
KEYBOARD_MIN_MIDI = 48 # C3
KEYBOARD_MAX_MIDI = 83 # B5
PIANO_KEY_COUNT = KEYBOARD_MAX_MIDI - KEYBOARD_MIN_MIDI + 1

# --- Asset preparation ---
DEFAULT_BASE_NOTE = 'C4' # Pitch of the recording the piano set is derived from

# --- Mixer ---
MIXER_CHANNELS = 32
MIXER_CHANNEL_GROWTH = 16 # Added when every channel is busy
VOICE_POLL_INTERVAL_SEC = 0.01

# --- Special keys (names produced by keyboard_input) ---
EXIT_KEY = 'esc'
SUSTAIN_KEY = 'space'

# Scale mode: digit keys play scale degrees 1-7
SCALE_KEYS = {str(degree): degree for degree in range(1, 8)}

# Piano mode: three rows of white keys, one octave per row
# (lower row = octave 3, home row = octave 4, upper row = octave 5).
# Holding Shift plays the sharp of the key, as with the accidental modifiers
# of a game keyboard. E and B have no sharp.
PIANO_WHITE_ROWS = ('zxcvbnm', 'asdfghj', 'qwertyu')
WHITE_KEY_SEMITONES = (0, 2, 4, 5, 7, 9, 11) # C D E F G A B
SHARPABLE_SEMITONES = (0, 2, 5, 7, 9) # C D F G A


def build_piano_keymap():
    """Maps 36 key characters to piano note-keys 0-35 (C3..B5)."""
    km = {}
    for octave_index, row in enumerate(PIANO_WHITE_ROWS):
        for key_char, semitone in zip(row, WHITE_KEY_SEMITONES):
            note_key = octave_index * 12 + semitone
            km[key_char] = note_key
            if semitone in SHARPABLE_SEMITONES:
                km[key_char.upper()] = note_key + 1
    return km


PIANO_KEY_MAP = build_piano_keymap()
