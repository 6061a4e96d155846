import logging
from pathlib import Path
from typing import List, Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .compiler import SpellsCompiler
from .config import BuildConfig
from .errors import CompileError

logger = logging.getLogger(__name__)


def build_all(config: BuildConfig, compiler: Optional[SpellsCompiler] = None) -> List[Path]:
    """
    Compiles every src -> dst pair of the config. A source that fails to compile
    is reported and skipped; the others are still written.
    """
    compiler = compiler or SpellsCompiler(config.options)
    written: List[Path] = []
    for src, dst in config.write_pairs.items():
        try:
            html = compiler.compile_file(src)
        except CompileError as e:
            logger.error("%s: %s", src, e.diagnostic())
            continue
        dst.parent.mkdir(parents=True, exist_ok=True)
        with open(dst, "w+") as f:
            f.write(html)
        logger.info("Built %s -> %s", src, dst)
        written.append(dst)
    return written


class ChangeHandler(FileSystemEventHandler):
    def __init__(self, config: BuildConfig, compiler: Optional[SpellsCompiler] = None):
        self.config = config
        self.files_to_watch = {x.resolve() for x in config.files_to_watch}
        self.compiler = compiler or SpellsCompiler(config.options)
        logger.info("Handler initialized. Monitoring for changes...")

    def on_modified(self, event):
        if event.is_directory:
            return

        # Resolve path and check if it's one we care about
        src_path_abs = Path(event.src_path).resolve()
        if src_path_abs in self.files_to_watch:
            logger.info("Detected modification in: %s", src_path_abs)
            build_all(self.config, self.compiler)


def run_watcher(config: BuildConfig):
    """Sets up and runs the watchdog observer until interrupted."""
    dirs_to_watch = {p.resolve().parent for p in config.files_to_watch}
    if not dirs_to_watch:
        logger.error("No valid directories provided to watch.")
        return

    event_handler = ChangeHandler(config)
    observer = Observer()

    scheduled_count = 0
    for dir_path in dirs_to_watch:
        if not dir_path.is_dir():
            logger.warning("Directory '%s' does not exist. Cannot watch.", dir_path)
            continue

        # Only events directly within the directory, not subdirectories
        observer.schedule(event_handler, str(dir_path), recursive=False)
        scheduled_count += 1
        logger.info("Scheduled watcher for directory: %s", dir_path)

    if scheduled_count == 0:
        logger.error("No watchers were successfully scheduled. Exiting.")
        return

    observer.start()
    logger.info(
        "Watching for file changes in %d director%s. Press Ctrl+C to stop.",
        scheduled_count,
        "y" if scheduled_count == 1 else "ies",
    )

    try:
        while observer.is_alive():
            observer.join(timeout=1)  # Wait for observer thread, check status periodically
    except KeyboardInterrupt:
        logger.info("Stopping watcher (Ctrl+C pressed)...")
    finally:
        if observer.is_alive():
            observer.stop()
        observer.join()
        logger.info("Watcher stopped completely.")
