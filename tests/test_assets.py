"""Tests for note-key -> sample file resolution and the piano asset check."""

import os

import pytest

from assets import (
    ChromaticAssetResolver,
    ScaleAssetResolver,
    find_missing_piano_assets,
    note_name_for_key,
    report_missing_piano_assets,
)
from config import PIANO_KEY_COUNT, PIANO_KEY_MAP
from errors import AssetMissing, InvalidInput


class TestNoteNames:

    @pytest.mark.parametrize("note_key,name", [
        (0, 'C3'), (1, 'C#3'), (3, 'D#3'), (10, 'A#3'),
        (12, 'C4'), (22, 'A#4'), (24, 'C5'), (35, 'B5'),
    ])
    def test_piano_keys_use_sharp_names(self, note_key, name):
        assert note_name_for_key(note_key) == name

    @pytest.mark.parametrize("note_key", [-1, 36, 100])
    def test_out_of_range_key_is_invalid(self, note_key):
        with pytest.raises(InvalidInput):
            note_name_for_key(note_key)


class TestPianoKeymap:

    def test_covers_all_36_notes_once(self):
        assert len(PIANO_KEY_MAP) == PIANO_KEY_COUNT == 36
        assert sorted(PIANO_KEY_MAP.values()) == list(range(36))

    def test_rows_are_octaves_and_shift_is_sharp(self):
        assert PIANO_KEY_MAP['z'] == 0
        assert PIANO_KEY_MAP['Z'] == 1
        assert PIANO_KEY_MAP['a'] == 12
        assert PIANO_KEY_MAP['q'] == 24
        assert PIANO_KEY_MAP['u'] == 35
        assert PIANO_KEY_MAP['H'] == 22

    def test_e_and_b_have_no_sharp(self):
        for key in ('C', 'M', 'D', 'J', 'E', 'U'):
            assert key not in PIANO_KEY_MAP


class TestScaleAssetResolver:

    def test_resolves_existing_degree(self, scale_dir):
        resolver = ScaleAssetResolver(str(scale_dir))
        assert resolver.resolve(3) == os.path.join(str(scale_dir), "note-3.mp3")

    def test_autoplay_key_shares_the_scale_file(self, scale_dir):
        resolver = ScaleAssetResolver(str(scale_dir))
        assert resolver.resolve(-5) == resolver.resolve(5)

    def test_missing_file_raises_asset_missing(self, tmp_path):
        resolver = ScaleAssetResolver(str(tmp_path))
        with pytest.raises(AssetMissing) as exc_info:
            resolver.resolve(4)
        assert exc_info.value.note_key == 4
        assert exc_info.value.path.endswith("note-4.mp3")

    def test_custom_template(self, tmp_path):
        (tmp_path / "XTLZ-2.mp3").write_bytes(b"")
        resolver = ScaleAssetResolver(str(tmp_path), template="XTLZ-{degree}.mp3")
        assert resolver.resolve(2).endswith("XTLZ-2.mp3")

    @pytest.mark.parametrize("note_key", [0, 8, -8])
    def test_degree_outside_scale_is_invalid(self, scale_dir, note_key):
        with pytest.raises(InvalidInput):
            ScaleAssetResolver(str(scale_dir)).resolve(note_key)


class TestChromaticAssets:

    def test_resolves_note_name_file(self, tmp_path):
        (tmp_path / "C#4.wav").write_bytes(b"")
        resolver = ChromaticAssetResolver(str(tmp_path))
        assert resolver.resolve(13) == os.path.join(str(tmp_path), "C#4.wav")

    def test_missing_piano_file(self, tmp_path):
        with pytest.raises(AssetMissing):
            ChromaticAssetResolver(str(tmp_path)).resolve(0)

    def test_empty_directory_reports_all_missing(self, tmp_path):
        missing = find_missing_piano_assets(str(tmp_path))
        assert len(missing) == 36
        assert missing[0] == 'C3' and missing[-1] == 'B5'

    def test_missing_list_excludes_present_files(self, tmp_path):
        for name in ('C3', 'F#4', 'B5'):
            (tmp_path / f"{name}.wav").write_bytes(b"")
        missing = find_missing_piano_assets(str(tmp_path))
        assert len(missing) == 33
        assert 'F#4' not in missing

    def test_report_warns_with_names(self, tmp_path, capsys):
        (tmp_path / "C3.wav").write_bytes(b"")
        missing = report_missing_piano_assets(str(tmp_path))
        err = capsys.readouterr().err
        assert len(missing) == 35
        assert "35 of 36" in err
        assert "C#3" in err

    def test_nonexistent_directory_reports_all_missing(self, tmp_path):
        assert len(find_missing_piano_assets(str(tmp_path / "nope"))) == 36
