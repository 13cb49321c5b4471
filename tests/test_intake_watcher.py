import os
import time
from pathlib import Path

import pytest

import intake_watcher as iw
from classification_tracker import load_log


def test_list_pending_notes_filters_and_sorts(tmp_path: Path):
    a = tmp_path / "a.txt"
    b = tmp_path / "b.md"
    a.write_text("x")
    b.write_text("x")

    # Unsupported + hidden
    (tmp_path / "c.png").write_bytes(b"x")
    (tmp_path / ".hidden.txt").write_text("x")

    # Directories should be ignored
    (tmp_path / "_processed").mkdir()
    (tmp_path / "_failed").mkdir()

    now = time.time()
    os.utime(a, (now - 100, now - 100))
    os.utime(b, (now - 50, now - 50))

    assert [p.name for p in iw.list_pending_notes(tmp_path)] == ["a.txt", "b.md"]


def test_canonical_text_for_tagged_note():
    pipeline = iw.Pipeline()
    assert pipeline.canonical_text("#todo#\n- milk\n[x] eggs") == "#todo#\n[ ] milk\n[x] eggs"


def test_default_type_applies_to_untagged_notes():
    assert iw.Pipeline(default_type="shopping").canonical_text("- milk") == "#shopping#\n[ ] milk"
    assert iw.Pipeline().canonical_text("just thinking\n  aloud") == "just thinking\n  aloud"


def test_pipeline_logs_classifications(tmp_path: Path):
    log_path = tmp_path / "classifications.json"
    iw.Pipeline(log_path=log_path).canonical_text("#idea#\nfold-flat rack", filename="n1.txt")

    events = load_log(log_path)["events"]
    assert len(events) == 1
    assert events[0]["note_type"] == "idea"
    assert events[0]["method"] == "explicit"
    assert events[0]["filename"] == "n1.txt"


def test_handler_moves_formatted_note_to_processed(tmp_path: Path):
    messages = []
    handler = iw.FolderHandler(iw.Pipeline(status_cb=messages.append), tmp_path, messages.append)
    src = tmp_path / "groceries.txt"
    src.write_text("#grocery#\n• milk\n", "utf-8")

    handler.handle(src)

    assert not src.exists()
    assert (tmp_path / "_processed" / "groceries.txt").read_text("utf-8") == "#shopping#\n[ ] milk\n"
    assert messages == ["Formatting: groceries.txt", "Done: groceries.txt"]


def test_handler_moves_unreadable_note_to_failed(tmp_path: Path):
    messages = []
    handler = iw.FolderHandler(iw.Pipeline(), tmp_path, messages.append)
    src = tmp_path / "broken.txt"
    src.write_bytes(b"\xff\xfe\xfa")

    handler.handle(src)

    assert not src.exists()
    assert (tmp_path / "_failed" / "broken.txt").exists()
    assert any(m.startswith("Error:") for m in messages)


def test_config_roundtrip(tmp_path: Path, monkeypatch):
    monkeypatch.setenv(iw.CONFIG_ENV, str(tmp_path / "config.json"))
    assert iw.load_config() == {}

    iw.save_config({"WATCH_FOLDER": str(tmp_path / "inbox"), "DEFAULT_NOTE_TYPE": "idea"})
    assert iw.load_config()["DEFAULT_NOTE_TYPE"] == "idea"


def test_main_requires_a_watch_folder(tmp_path: Path, monkeypatch):
    monkeypatch.setenv(iw.CONFIG_ENV, str(tmp_path / "config.json"))
    with pytest.raises(SystemExit):
        iw.main()
