"""Builds the chromatic piano sample set (C3..B5) from one base recording.

Each target note is produced by resampling the base clip by the equal
temperament ratio between the two pitches, which shifts pitch and length
together. Existing files are kept unless overwrite is requested, so running
it twice does no extra work.
"""
import argparse
import os
import sys
import wave

import numpy as np

os.environ.setdefault('PYGAME_HIDE_SUPPORT_PROMPT', '1')
try:
    import pygame
except ImportError:
    print("Error: pygame library not found.", file=sys.stderr)
    print("Please install it using: pip install pygame", file=sys.stderr)
    sys.exit(1)

try:
    from music21 import pitch
except ImportError:
    print("Error: music21 library not found.", file=sys.stderr)
    print("Please install it using: pip install music21", file=sys.stderr)
    sys.exit(1)

from assets import expected_piano_files, find_missing_piano_assets
from config import DEFAULT_BASE_NOTE, DEFAULT_PIANO_DIRECTORY
from errors import AssetUnreadable, InvalidInput


def semitone_offset(base_note: str, target_note: str) -> int:
    """Signed semitone distance from base_note to target_note ('C4' -> 'D4' is 2)."""
    try:
        return pitch.Pitch(target_note).midi - pitch.Pitch(base_note).midi
    except (pitch.PitchException, ValueError) as e:
        raise InvalidInput(f"Invalid note name '{base_note}' or '{target_note}': {e}") from e


def resample(samples: np.ndarray, ratio: float) -> np.ndarray:
    """Linear-interpolation resample along axis 0; ratio > 1 raises the pitch."""
    if ratio <= 0:
        raise ValueError(f"Resample ratio must be positive, got {ratio}")
    frames = samples.shape[0]
    n_out = max(1, int(frames / ratio))
    if frames < 2:
        return np.repeat(samples[:1], n_out, axis=0)
    x = np.linspace(0, frames - 1, n_out)
    xi = np.floor(x).astype(int)
    xf = x - xi
    xi1 = np.clip(xi + 1, 0, frames - 1)
    if samples.ndim > 1:
        xf = xf[:, None]
    out = samples[xi] * (1 - xf) + samples[xi1] * xf
    return np.round(out).astype(samples.dtype)


def load_samples(path: str) -> tuple[np.ndarray, int]:
    """Decodes an audio file with pygame; returns (int16 frames, sample rate)."""
    if not pygame.mixer.get_init():
        pygame.mixer.pre_init(44100, -16, 2, 512)
        pygame.mixer.init()
    try:
        sound = pygame.mixer.Sound(path)
    except (pygame.error, OSError) as e:
        raise AssetUnreadable(path, str(e)) from e
    arr = pygame.sndarray.array(sound).astype(np.int16)
    if arr.ndim == 1:
        arr = arr[:, None]
    return arr, pygame.mixer.get_init()[0]


def write_wav(path: str, samples: np.ndarray, sample_rate: int):
    if samples.ndim == 1:
        samples = samples[:, None]
    with wave.open(path, 'wb') as wf:
        wf.setnchannels(samples.shape[1])
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(samples.astype('<i2').tobytes())


def prepare_piano_assets(base_path: str, directory: str = DEFAULT_PIANO_DIRECTORY,
                         base_note: str = DEFAULT_BASE_NOTE, overwrite: bool = False,
                         loader=load_samples) -> list[str]:
    """Writes every missing chromatic sample. Returns the note names written."""
    targets = expected_piano_files(directory)
    pending = {name: path for name, path in targets.items()
               if overwrite or not os.path.exists(path)}
    if not pending:
        print(f"All {len(targets)} piano samples already present in '{directory}'. Nothing to do.")
        return []

    print(f"Loading base sample '{base_path}' (pitch {base_note})...")
    samples, sample_rate = loader(base_path)
    os.makedirs(directory, exist_ok=True)

    written = []
    for name, path in pending.items():
        offset = semitone_offset(base_note, name)
        shifted = resample(samples, 2.0 ** (offset / 12.0))
        write_wav(path, shifted, sample_rate)
        written.append(name)
        print(f"  {name}: {offset:+d} semitones -> {os.path.basename(path)}")
    print(f"Wrote {len(written)} piano samples to '{directory}'.")
    return written


def main():
    parser = argparse.ArgumentParser(description='Generate the chromatic piano sample set from one recording.')
    parser.add_argument('base_sample', help='Audio file recorded at the base pitch.')
    parser.add_argument('-o', '--output-dir', default=DEFAULT_PIANO_DIRECTORY,
                        help=f'Directory for the generated files. Default: {DEFAULT_PIANO_DIRECTORY}')
    parser.add_argument('-n', '--base-note', default=DEFAULT_BASE_NOTE,
                        help=f'Pitch of the base sample. Default: {DEFAULT_BASE_NOTE}')
    parser.add_argument('--overwrite', action='store_true', help='Regenerate files that already exist.')
    args = parser.parse_args()

    if not os.path.isfile(args.base_sample):
        print(f"Error: Base sample not found: {args.base_sample}", file=sys.stderr)
        sys.exit(1)
    try:
        prepare_piano_assets(args.base_sample, args.output_dir, args.base_note, args.overwrite)
    except (AssetUnreadable, InvalidInput) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    missing = find_missing_piano_assets(args.output_dir)
    sys.exit(1 if missing else 0)


if __name__ == "__main__":
    main()
