import argparse
import os
import sys

from assets import ChromaticAssetResolver, ScaleAssetResolver, report_missing_piano_assets
from config import (
    DEFAULT_BASE_NOTE,
    DEFAULT_NOTE_INTERVAL_SEC,
    DEFAULT_PIANO_DIRECTORY,
    DEFAULT_SAMPLES_DIRECTORY,
    EXIT_KEY,
    KEYMAP_REFERENCE_FILE,
)
from controller import ManualController
from errors import PianoError
from notation import iter_notation, load_notation
from player import AutoPlayer
from voice_registry import VoiceRegistry

MENU_SCALE = '1'
MENU_PIANO = '2'
MENU_AUTOPLAY = '3'
MENU_EXIT = '4'


def show_main_menu():
    print("========== Main Menu ==========")
    print(f"{MENU_SCALE}. Scale mode (keys 1-7)")
    print(f"{MENU_PIANO}. Piano mode (36 keys, sustain pedal)")
    print(f"{MENU_AUTOPLAY}. Auto-play a notation file")
    print(f"{MENU_EXIT}. Exit")
    print("Choose (enter a number): ", end='', flush=True)


def run_autoplay(registry: VoiceRegistry, reader, resolver: ScaleAssetResolver, interval: float):
    """Prompts for a notation file and plays it until it ends or Esc is pressed."""
    path = input("Notation file path: ").strip().strip('"')
    text = load_notation(path)
    if text is None:
        return
    if not text:
        print("Notation file is empty. Nothing to play.")
        return

    player = AutoPlayer(registry, resolver, interval)
    print(f"Auto-playing at {interval:.2f}s per symbol. Press Esc to stop.")
    reader.start()
    try:
        player.play(iter_notation(text))
        while player.is_playing:
            event = reader.read(timeout=0.1)
            if event is not None and event.kind == 'press' and event.key == EXIT_KEY:
                break
    finally:
        player.stop()
        reader.stop()


def prepare_assets(args) -> int:
    # Imported here so the menu does not pay for numpy at startup
    from pitch_assets import prepare_piano_assets

    if not os.path.isfile(args.prepare_assets):
        print(f"Error: Base sample not found: {args.prepare_assets}", file=sys.stderr)
        return 1
    try:
        prepare_piano_assets(args.prepare_assets, args.piano_dir, args.base_note, args.overwrite)
    except PianoError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    missing = report_missing_piano_assets(args.piano_dir)
    return 1 if missing else 0


def main():
    # --- Argument Parsing ---
    parser = argparse.ArgumentParser(description='Play pre-recorded notes from the computer keyboard.')
    parser.add_argument(
        '-s', '--samples-dir',
        type=str,
        default=DEFAULT_SAMPLES_DIRECTORY,
        help=f'Directory containing the scale samples note-1 .. note-7. Default: {DEFAULT_SAMPLES_DIRECTORY}'
    )
    parser.add_argument(
        '-p', '--piano-dir',
        type=str,
        default=DEFAULT_PIANO_DIRECTORY,
        help=f'Directory containing the 36 chromatic piano samples. Default: {DEFAULT_PIANO_DIRECTORY}'
    )
    parser.add_argument(
        '-i', '--interval',
        type=float,
        default=DEFAULT_NOTE_INTERVAL_SEC,
        help=f'Seconds per notation symbol during auto-play. Default: {DEFAULT_NOTE_INTERVAL_SEC}'
    )
    parser.add_argument(
        '--prepare-assets',
        metavar='BASE_SAMPLE',
        type=str,
        default=None,
        help='Generate the piano samples from this recording, validate them and exit.'
    )
    parser.add_argument(
        '--base-note',
        type=str,
        default=DEFAULT_BASE_NOTE,
        help=f'Pitch of the recording given to --prepare-assets. Default: {DEFAULT_BASE_NOTE}'
    )
    parser.add_argument(
        '--overwrite',
        action='store_true',
        help='With --prepare-assets, regenerate files that already exist.'
    )
    args = parser.parse_args()

    if args.interval <= 0:
        parser.error('--interval must be positive')

    if args.prepare_assets:
        sys.exit(prepare_assets(args))

    # --- Initialization ---
    print("--- Keyboard Piano Initializing ---")
    print(f"Scale samples directory: {os.path.abspath(args.samples_dir)}")
    report_missing_piano_assets(args.piano_dir)

    # Imported here: pynput needs a desktop session and pygame opens the audio device
    from keyboard_input import KeyReader
    from playback.sample_backend import SamplePlaybackBackend

    backend = SamplePlaybackBackend()
    backend.start()
    registry = VoiceRegistry(backend)
    registry.start()
    reader = KeyReader()
    controller = ManualController(registry, reader)

    scale_resolver = ScaleAssetResolver(args.samples_dir)
    piano_resolver = ChromaticAssetResolver(args.piano_dir)
    keymap_reference = os.path.join(args.samples_dir, KEYMAP_REFERENCE_FILE)

    # --- Main menu loop ---
    try:
        while True:
            show_main_menu()
            choice = input().strip()
            if choice == MENU_SCALE:
                controller.run_scale_mode(scale_resolver)
            elif choice == MENU_PIANO:
                controller.run_piano_mode(piano_resolver, keymap_reference)
            elif choice == MENU_AUTOPLAY:
                run_autoplay(registry, reader, scale_resolver, args.interval)
            elif choice == MENU_EXIT:
                break
            else:
                print("Invalid choice, please try again.")
    except (KeyboardInterrupt, EOFError):
        print("\nInterrupted.")
    finally:
        print("Cleaning up...")
        registry.close()
        backend.stop()

    print("Goodbye!")


if __name__ == "__main__":
    main()
