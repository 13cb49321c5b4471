import json
import logging
import os
import time
from pathlib import Path
from typing import Callable, List, Optional

from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler

from app_contract import APP_NAME, APP_VERSION
from classification_tracker import append_event, classification_event, classify_content
from note_format import load_note, save_note
from note_models import Note, NoteType

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / "Library" / "Application Support" / APP_NAME
CONFIG_ENV = "NOTE_FORMATS_CONFIG"

SUPPORTED_EXTS = {".txt", ".md"}


def config_path() -> Path:
    override = os.environ.get(CONFIG_ENV)
    if override:
        return Path(override).expanduser()
    return CONFIG_DIR / "config.json"


def load_config() -> dict:
    path = config_path()
    if not path.exists():
        return {}
    return json.loads(path.read_text("utf-8"))


def save_config(cfg: dict) -> None:
    path = config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(cfg, ensure_ascii=False, indent=2), "utf-8")


def list_pending_notes(watch: Path) -> List[Path]:
    """Supported note files waiting in the folder, oldest first."""
    pending = [
        p for p in watch.iterdir()
        if p.is_file() and not p.name.startswith(".") and p.suffix.lower() in SUPPORTED_EXTS
    ]
    return sorted(pending, key=lambda p: p.stat().st_mtime)


class Pipeline:
    """Transcribed text in, canonical note text out."""

    def __init__(self, default_type: str = NoteType.GENERAL.value, log_path: Optional[Path] = None,
                 status_cb: Callable[[str], None] = lambda msg: None):
        self.default_type = NoteType.parse(default_type)
        self.log_path = log_path
        self.status_cb = status_cb

    def canonical_text(self, content: str, filename: str = "") -> str:
        note = Note(content=content, note_type=self.default_type.value)
        note.classification = classify_content(None, content, fallback=self.default_type)
        loaded = load_note(note)
        save_note(note, loaded.note_type, loaded.state)

        if self.log_path is not None:
            append_event(self.log_path, classification_event(note.classification, filename=filename))
        return note.content

    def process(self, path: Path, out_dir: Path) -> Path:
        self.status_cb(f"Formatting: {path.name}")
        text = self.canonical_text(path.read_text("utf-8"), filename=path.name)
        target = out_dir / path.name
        target.write_text(text + "\n", "utf-8")
        path.unlink()
        self.status_cb(f"Done: {path.name}")
        return target


class FolderHandler(FileSystemEventHandler):
    def __init__(self, pipeline: Pipeline, watch: Path, status_cb):
        self.pipeline = pipeline
        self.watch = watch
        self.status_cb = status_cb
        self.proc = watch / "_processed"
        self.fail = watch / "_failed"
        self.proc.mkdir(exist_ok=True)
        self.fail.mkdir(exist_ok=True)

    def on_created(self, event):
        if event.is_directory:
            return
        path = Path(event.src_path)

        if path.name.startswith("."):
            return
        if path.suffix.lower() not in SUPPORTED_EXTS:
            return

        # wait for file to finish writing
        last = -1
        for _ in range(60):
            try:
                sz = path.stat().st_size
            except FileNotFoundError:
                return
            if sz > 0 and sz == last:
                break
            last = sz
            time.sleep(0.25)

        self.handle(path)

    def handle(self, path: Path) -> None:
        try:
            self.pipeline.process(path, self.proc)
        except (OSError, ValueError) as e:
            logger.exception("could not format %s", path.name)
            self.status_cb(f"Error: {e}")
            try:
                path.replace(self.fail / path.name)
            except OSError:
                logger.exception("could not move %s to %s", path.name, self.fail)


def run(cfg: dict, status_cb: Optional[Callable[[str], None]] = None) -> None:
    status_cb = status_cb or (lambda msg: logger.info(msg))
    watch = Path(cfg["WATCH_FOLDER"]).expanduser()
    watch.mkdir(parents=True, exist_ok=True)
    log_path = cfg.get("CLASSIFICATION_LOG")

    pipeline = Pipeline(
        default_type=cfg.get("DEFAULT_NOTE_TYPE", NoteType.GENERAL.value),
        log_path=Path(log_path).expanduser() if log_path else None,
        status_cb=status_cb,
    )
    handler = FolderHandler(pipeline, watch, status_cb)

    # Files dropped while we were not running.
    for path in list_pending_notes(watch):
        handler.handle(path)

    observer = Observer()
    observer.schedule(handler, str(watch), recursive=False)
    observer.start()
    status_cb(f"Watching: {watch}")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        status_cb("Stopped.")
    finally:
        observer.stop()
        observer.join(timeout=5)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    cfg = load_config()
    if not cfg.get("WATCH_FOLDER"):
        raise SystemExit(f"{APP_NAME} {APP_VERSION}: set WATCH_FOLDER in {config_path()}")
    run(cfg)


if __name__ == "__main__":
    main()
