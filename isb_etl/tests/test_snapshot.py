"""
Tests for snapshot paths, the filename policy and the JSON writer.
"""

import json
from datetime import date

import pytest

from isb_etl.src.snapshot import (
    CHECKPOINT_FILENAME,
    DEFAULT_FILENAME,
    FetchTask,
    snapshot_filename,
    snapshot_path,
    write_snapshot,
)


class TestSnapshotFilename:
    """Test suite for the March 31 checkpoint policy."""

    @pytest.mark.parametrize("dataset_type", [
        "RUP-PaketPenyedia-Terumumkan",
        "RUP-PaketSwakelola-Terumumkan",
    ])
    def test_checkpoint_on_march_31(self, dataset_type):
        assert snapshot_filename(date(2025, 3, 31), dataset_type) == CHECKPOINT_FILENAME

    @pytest.mark.parametrize("run_date", [
        date(2025, 3, 30),
        date(2025, 4, 1),
        date(2025, 5, 31),
        date(2024, 12, 31),
    ])
    def test_default_on_other_dates(self, run_date):
        assert snapshot_filename(run_date, "RUP-PaketPenyedia-Terumumkan") == DEFAULT_FILENAME

    @pytest.mark.parametrize("dataset_type", [
        "RUP-MasterSatker",
        "RUP-PaketAnggaranPenyedia",
        "SPSE-TenderPengumuman",
    ])
    def test_default_for_other_dataset_types(self, dataset_type):
        assert snapshot_filename(date(2025, 3, 31), dataset_type) == DEFAULT_FILENAME


class TestSnapshotPath:
    """Test suite for snapshot_path."""

    def test_partitioned_layout(self, tmp_path):
        task = FetchTask("D197", "RUP-MasterSatker", 2024)
        path = snapshot_path(tmp_path, task, date(2025, 1, 15))
        assert path == tmp_path / "D197" / "RUP-MasterSatker" / "2024" / "data.json"

    def test_checkpoint_layout(self, tmp_path):
        task = FetchTask("D197", "RUP-PaketSwakelola-Terumumkan", 2025)
        path = snapshot_path(tmp_path, task, date(2025, 3, 31))
        assert path.name == "data31.json"
        assert path.parent == tmp_path / "D197" / "RUP-PaketSwakelola-Terumumkan" / "2025"

    def test_task_identity(self):
        assert str(FetchTask("97", "SPSE-TenderSelesai", 2023)) == "97/SPSE-TenderSelesai/2023"


class TestWriteSnapshot:
    """Test suite for write_snapshot."""

    def test_creates_directories_and_writes(self, tmp_path):
        path = tmp_path / "a" / "b" / "data.json"
        records = [{"nama": "Dinas Pendidikan", "pagu": 1500000}]

        assert write_snapshot(path, records) == path

        with open(path, 'r', encoding='utf-8') as f:
            assert json.load(f) == records

    def test_two_space_indent_and_utf8(self, tmp_path):
        path = tmp_path / "data.json"
        write_snapshot(path, [{"lokasi": "Kabupaten Āceh"}])

        text = path.read_text(encoding='utf-8')
        assert text == '[\n  {\n    "lokasi": "Kabupaten Āceh"\n  }\n]'

    def test_overwrites_existing_file(self, tmp_path):
        path = tmp_path / "data.json"
        write_snapshot(path, [{"a": 1}, {"a": 2}, {"a": 3}])
        write_snapshot(path, [{"b": 9}])

        with open(path, 'r', encoding='utf-8') as f:
            assert json.load(f) == [{"b": 9}]

    def test_failed_write_keeps_previous_snapshot(self, tmp_path):
        path = tmp_path / "data.json"
        write_snapshot(path, [{"a": 1}])

        with pytest.raises(TypeError):
            write_snapshot(path, [{"a": 2}, {"b": object()}])

        with open(path, 'r', encoding='utf-8') as f:
            assert json.load(f) == [{"a": 1}]
        assert [p.name for p in tmp_path.iterdir()] == ["data.json"]

    def test_leaves_no_temporary_files(self, tmp_path):
        write_snapshot(tmp_path / "data.json", [{"a": 1}])

        assert [p.name for p in tmp_path.iterdir()] == ["data.json"]
