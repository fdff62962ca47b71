from __future__ import annotations

import json
import os
import subprocess
import sys
import threading
from pathlib import Path

import pytest

from contentflow_io.dataset import ConvertedDataset, dataset_path
from contentflow_persist import ContentStore, EntryStatus, UnknownModuleError
from contentflow_persist.utils.locks import lock_path_for
from helpers import corrupt_sheet_xml, touch, ts, write_workbook


def _active_names(directory: Path) -> list[str]:
    return sorted(p.name for p in directory.iterdir() if "_active" in p.name)


class _RecordingConverter:
    def __init__(self) -> None:
        self.calls: list[tuple[Path, str]] = []

    def __call__(self, workbook_path: Path, module: str, json_root: Path) -> ConvertedDataset:
        self.calls.append((workbook_path, module))
        return ConvertedDataset(module=module, output_path=dataset_path(json_root, module), rows=0)


def test_ensure_directories_is_idempotent(data_root: Path) -> None:
    store = ContentStore(data_root, modules=("tech", "jobs"))

    store.ensure_directories()
    store.ensure_directories()

    for module in ("tech", "jobs"):
        assert (data_root / "uploads" / module).is_dir()
        assert (data_root / "json" / module).is_dir()
    assert (data_root / "tmp").is_dir()


def test_check_file_limit_counts_up_to_eight(content_store: ContentStore) -> None:
    module_dir = content_store.module_dir("tech")
    for idx in range(8):
        assert content_store.check_file_limit("tech") is True
        touch(module_dir / f"170000000000{idx}_file{idx}.txt")

    assert content_store.check_file_limit("tech") is False


def test_check_file_limit_without_directory(data_root: Path) -> None:
    store = ContentStore(data_root)

    assert store.check_file_limit("banner") is True
    assert store.list("banner") == []


def test_unknown_module_is_rejected(content_store: ContentStore) -> None:
    with pytest.raises(UnknownModuleError):
        content_store.list("sports")
    with pytest.raises(UnknownModuleError):
        content_store.activate("uploads/sports/1_a.xlsx", "sports")


def test_list_returns_newest_first(content_store: ContentStore) -> None:
    module_dir = content_store.module_dir("news")
    touch(module_dir / "1700000000001_first.md", mtime=ts(2025, 1, 1))
    touch(module_dir / "1700000000003_third_active.xlsx", mtime=ts(2025, 3, 1))
    touch(module_dir / "1700000000002_second.txt", mtime=ts(2025, 2, 1))

    entries = content_store.list("news")

    assert [entry.name for entry in entries] == ["third.xlsx", "second.txt", "first.md"]
    newest = entries[0]
    assert newest.id == "1700000000003_third_active.xlsx"
    assert newest.path == "uploads/news/1700000000003_third_active.xlsx"
    assert newest.status is EntryStatus.USED
    assert newest.module == "news"
    assert newest.upload_time.endswith("Z")
    assert entries[1].to_dict()["status"] == "unused"
    assert set(newest.to_dict()) == {"id", "name", "path", "uploadTime", "status", "module"}


def test_activate_moves_marker_to_target(content_store: ContentStore) -> None:
    module_dir = content_store.module_dir("banner")
    touch(module_dir / "1700000000001_old_active.png")
    touch(module_dir / "1700000000002_new.png")

    result = content_store.activate("uploads/banner/1700000000002_new.png", "banner")

    assert result.success is True
    assert result.converted is False
    assert result.to_dict() == {"success": True}
    assert result.active_path == "uploads/banner/1700000000002_new_active.png"
    assert _active_names(module_dir) == ["1700000000002_new_active.png"]
    assert (module_dir / "1700000000001_old.png").exists()


def test_activate_clears_every_claimant(content_store: ContentStore) -> None:
    module_dir = content_store.module_dir("jobs")
    touch(module_dir / "1700000000001_a_active.txt")
    touch(module_dir / "1700000000002_b_active.txt")
    touch(module_dir / "1700000000003_c.txt")

    assert content_store.activate("uploads/jobs/1700000000003_c.txt", "jobs").success

    assert _active_names(module_dir) == ["1700000000003_c_active.txt"]


def test_reactivating_active_spreadsheet_converts_again(data_root: Path) -> None:
    converter = _RecordingConverter()
    store = ContentStore(data_root, converter=converter)
    store.ensure_directories()
    module_dir = store.module_dir("tech")
    touch(module_dir / "1700000000001_report_active.xlsx")

    result = store.activate("uploads/tech/1700000000001_report_active.xlsx", "tech")

    assert result.success is True
    assert result.converted is True
    assert _active_names(module_dir) == ["1700000000001_report_active.xlsx"]
    assert converter.calls == [(module_dir / "1700000000001_report_active.xlsx", "tech")]


def test_spreadsheet_extension_check_is_case_insensitive(data_root: Path) -> None:
    converter = _RecordingConverter()
    store = ContentStore(data_root, converter=converter)
    touch(store.module_dir("tech") / "1700000000001_legacy.XLS")

    assert store.activate("uploads/tech/1700000000001_legacy.XLS", "tech").success

    assert len(converter.calls) == 1


def test_activate_missing_or_outside_paths(content_store: ContentStore, tmp_path: Path) -> None:
    touch(tmp_path / "outside.xlsx")

    assert content_store.activate("uploads/tech/missing.xlsx", "tech").success is False
    assert content_store.activate("../outside.xlsx", "tech").success is False
    assert content_store.activate("uploads/tech", "tech").success is False


def test_activate_spreadsheet_then_plain_file(content_store: ContentStore, tmp_path: Path) -> None:
    module_dir = content_store.module_dir("tech")
    write_workbook(module_dir / "1700000000001_report.xlsx", ["a", "b"], [[1, 2], [3, None]])
    touch(module_dir / "1700000000002_notes.txt")

    first = content_store.activate("uploads/tech/1700000000001_report.xlsx", "tech")

    output = content_store.dataset_path("tech")
    assert first.success is True and first.converted is True
    assert output == content_store.root / "json" / "tech" / "tech.json"
    assert json.loads(output.read_text(encoding="utf-8")) == [{"a": 1, "b": 2}, {"a": 3, "b": ""}]
    snapshot = output.read_bytes()

    second = content_store.activate("uploads/tech/1700000000002_notes.txt", "tech")

    assert second.success is True
    assert _active_names(module_dir) == ["1700000000002_notes_active.txt"]
    assert (module_dir / "1700000000001_report.xlsx").exists()
    assert output.read_bytes() == snapshot


def test_failed_conversion_keeps_rename(content_store: ContentStore) -> None:
    module_dir = content_store.module_dir("news")
    (module_dir / "1700000000001_broken.xlsx").write_text("not a workbook", encoding="utf-8")

    result = content_store.activate("uploads/news/1700000000001_broken.xlsx", "news")

    assert result.success is False
    assert result.error
    assert _active_names(module_dir) == ["1700000000001_broken_active.xlsx"]
    assert not content_store.dataset_path("news").exists()


def test_activate_reports_lock_held_elsewhere(content_store: ContentStore) -> None:
    module_dir = content_store.module_dir("tech")
    touch(module_dir / "1700000000001_a.txt")
    lock = lock_path_for(content_store.root, "tech")
    lock.parent.mkdir(parents=True, exist_ok=True)
    lock.write_text(str(os.getpid()), encoding="ascii")

    result = content_store.activate("uploads/tech/1700000000001_a.txt", "tech")

    assert result.success is False
    assert _active_names(module_dir) == []
    health = content_store.healthcheck()
    assert str(lock) in health.locked_paths


def test_lock_file_released_after_activation(content_store: ContentStore) -> None:
    touch(content_store.module_dir("tech") / "1700000000001_a.txt")

    content_store.activate("uploads/tech/1700000000001_a.txt", "tech")

    assert not lock_path_for(content_store.root, "tech").exists()


def test_delete(content_store: ContentStore, tmp_path: Path) -> None:
    target = touch(content_store.module_dir("jobs") / "1700000000001_cv.pdf")
    outside = touch(tmp_path / "keep.txt")

    assert content_store.delete("uploads/jobs/1700000000001_cv.pdf") is True
    assert not target.exists()
    assert content_store.delete("uploads/jobs/1700000000001_cv.pdf") is False
    assert content_store.delete("../keep.txt") is False
    assert outside.exists()


def test_active_entry_and_healthcheck(content_store: ContentStore) -> None:
    module_dir = content_store.module_dir("banner")
    touch(module_dir / "1700000000001_a_active.png")

    active = content_store.active_entry("banner")
    assert active is not None and active.name == "a.png"
    assert content_store.active_entry("tech") is None
    assert content_store.healthcheck().is_healthy()

    touch(module_dir / "1700000000002_b_active.png")

    health = content_store.healthcheck()
    assert not health.is_healthy()
    assert any("banner" in issue for issue in health.issues)


def test_activate_rejects_file_from_another_module(data_root: Path) -> None:
    converter = _RecordingConverter()
    store = ContentStore(data_root, converter=converter)
    store.ensure_directories()
    tech_dir = store.module_dir("tech")
    news_dir = store.module_dir("news")
    touch(tech_dir / "1700000000002_t_active.txt")
    write_workbook(news_dir / "1700000000001_n.xlsx", ["a"], [["from-news"]])

    result = store.activate("uploads/news/1700000000001_n.xlsx", "tech")

    assert result.success is False
    assert result.error == "not found"
    assert _active_names(tech_dir) == ["1700000000002_t_active.txt"]
    assert _active_names(news_dir) == []
    assert converter.calls == []


def test_activate_rejects_paths_outside_upload_directories(content_store: ContentStore) -> None:
    output = content_store.dataset_path("tech")
    touch(output, payload=b"[]")
    nested = touch(content_store.module_dir("tech") / "nested" / "1700000000001_a.txt")
    note = touch(content_store.root / "markdown" / "1700000000001_note.md")

    assert content_store.activate("json/tech/tech.json", "tech").success is False
    assert content_store.activate("uploads/tech/nested/1700000000001_a.txt", "tech").success is False
    assert content_store.activate("markdown/1700000000001_note.md", "tech").success is False

    assert output.exists() and nested.exists() and note.exists()


def test_malformed_workbook_activation_reports_failure(content_store: ContentStore) -> None:
    module_dir = content_store.module_dir("news")
    corrupt_sheet_xml(write_workbook(module_dir / "1700000000001_bad.xlsx", ["a"], [[1]]))

    result = content_store.activate("uploads/news/1700000000001_bad.xlsx", "news")

    assert result.success is False
    assert result.error
    assert _active_names(module_dir) == ["1700000000001_bad_active.xlsx"]
    assert not content_store.dataset_path("news").exists()


def test_concurrent_activations_leave_one_active_file(content_store: ContentStore) -> None:
    module_dir = content_store.module_dir("jobs")
    count = 8
    for idx in range(count):
        touch(module_dir / f"170000000000{idx}_file{idx}.txt")
    barrier = threading.Barrier(count)
    results: list[bool] = []
    errors: list[BaseException] = []

    def worker(idx: int) -> None:
        barrier.wait()
        try:
            results.append(content_store.activate(f"uploads/jobs/170000000000{idx}_file{idx}.txt", "jobs").success)
        except BaseException as exc:  # pragma: no cover - surfaced by the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(idx,)) for idx in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert errors == []
    assert results == [True] * count
    assert len(_active_names(module_dir)) == 1
    assert len(list(module_dir.iterdir())) == count
    assert not lock_path_for(content_store.root, "jobs").exists()
    assert content_store.healthcheck().is_healthy()


def test_stale_lock_from_exited_process_is_reclaimed(content_store: ContentStore) -> None:
    module_dir = content_store.module_dir("tech")
    touch(module_dir / "1700000000001_a.txt")
    finished = subprocess.run([sys.executable, "-c", "import os; print(os.getpid())"], capture_output=True, text=True, check=True)
    lock = lock_path_for(content_store.root, "tech")
    lock.parent.mkdir(parents=True, exist_ok=True)
    lock.write_text(finished.stdout.strip(), encoding="ascii")

    result = content_store.activate("uploads/tech/1700000000001_a.txt", "tech")

    assert result.success is True
    assert _active_names(module_dir) == ["1700000000001_a_active.txt"]
    assert not lock.exists()


def test_unreadable_lock_file_is_treated_as_held(content_store: ContentStore) -> None:
    touch(content_store.module_dir("tech") / "1700000000001_a.txt")
    lock = lock_path_for(content_store.root, "tech")
    lock.parent.mkdir(parents=True, exist_ok=True)
    lock.write_text("", encoding="ascii")

    assert content_store.activate("uploads/tech/1700000000001_a.txt", "tech").success is False
    assert lock.exists()
