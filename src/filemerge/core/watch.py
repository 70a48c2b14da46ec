"""Watch mode: re-apply when a template, fragment or override changes.

Filesystem events arrive on the watchdog observer thread. Relevant events
(re)start a debounce timer; when it fires, one ``apply()`` runs. A change
seen while a run is in progress queues exactly one follow-up run, so runs
never overlap and bursts of edits collapse into at most two passes.
"""
from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .config.cache import get_cached_config
from .config.domains import LayoutConfig, WatchConfig
from .discovery.overrides import override_target_name
from .engine import ApplyReport, SourceResolutionEngine
from .exceptions import FileMergeError
from .utils.globs import matches_any

logger = logging.getLogger(__name__)

ReportCallback = Callable[[ApplyReport], None]
ErrorCallback = Callable[[Exception], None]


def is_relevant_path(rel_path: str, layout: LayoutConfig) -> bool:
    """True if a change at ``rel_path`` can change the generated output."""
    if not rel_path or rel_path.startswith(".."):
        return False
    if matches_any(rel_path, layout.ignore_globs):
        return False
    parts = rel_path.split("/")
    name = parts[-1]

    templates_dir = layout.templates_dir.strip("/") + "/"
    if rel_path.startswith(templates_dir):
        return name.startswith(layout.template_prefix)
    # Entries directly under modules/ are the activation links.
    if len(parts) == 2 and parts[0] == layout.modules_dir.strip("/"):
        return True
    if matches_any(rel_path, layout.fragment_globs):
        return not matches_any(rel_path, layout.fragment_ignore_globs)
    if override_target_name(name) is not None:
        return not matches_any(rel_path, layout.override_ignore_globs)
    return False


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, watcher: "ConfigWatcher") -> None:
        super().__init__()
        self.watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type in ("opened", "closed", "closed_no_write"):
            return
        paths = [event.src_path, getattr(event, "dest_path", "")]
        for path in paths:
            if path and self.watcher.is_relevant(os.fsdecode(path)):
                logger.debug("Change detected (%s): %s", event.event_type, path)
                self.watcher.schedule()
                return


class ConfigWatcher:
    def __init__(
        self,
        project_root: Path,
        *,
        config: Optional[Dict[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
        debounce_seconds: Optional[float] = None,
        on_report: Optional[ReportCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        engine_factory: Optional[Callable[[], SourceResolutionEngine]] = None,
    ) -> None:
        self.project_root = Path(project_root).resolve()
        if config is None:
            config = get_cached_config(repo_root=self.project_root, validate=True)
        self.config = config
        self.layout = LayoutConfig(self.project_root, config=config)
        self.debounce_seconds = (
            WatchConfig(self.project_root, config=config).debounce_seconds
            if debounce_seconds is None
            else debounce_seconds
        )
        self.environ = environ
        self.on_report = on_report
        self.on_error = on_error
        self._engine_factory = engine_factory or self._default_engine

        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._running = False
        self._pending = False
        self._observer: Optional[Any] = None
        self.runs = 0

    def _default_engine(self) -> SourceResolutionEngine:
        return SourceResolutionEngine(self.project_root, config=self.config, environ=self.environ)

    def is_relevant(self, path: str) -> bool:
        rel = os.path.relpath(os.path.abspath(path), self.project_root)
        return is_relevant_path(Path(rel).as_posix(), self.layout)

    def schedule(self) -> None:
        """Request a run after the debounce delay, restarting any pending delay."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_seconds, self.trigger)
            self._timer.daemon = True
            self._timer.start()

    def trigger(self) -> None:
        """Run now, or queue one follow-up run if a run is in progress."""
        with self._lock:
            self._timer = None
            if self._running:
                self._pending = True
                return
            self._running = True

        try:
            while True:
                self.run_once()
                with self._lock:
                    if not self._pending:
                        return
                    self._pending = False
        finally:
            with self._lock:
                self._running = False
                self._pending = False

    def run_once(self) -> Optional[ApplyReport]:
        try:
            report = self._engine_factory().apply()
        except (OSError, FileMergeError) as exc:
            logger.error("Regeneration failed: %s", exc)
            if self.on_error:
                self.on_error(exc)
            return None
        finally:
            self.runs += 1
        if self.on_report:
            self.on_report(report)
        return report

    def start(self) -> None:
        observer = Observer()
        observer.schedule(_ChangeHandler(self), str(self.project_root), recursive=True)
        observer.start()
        self._observer = observer
        logger.info("Watching %s (debounce %.2fs)", self.project_root, self.debounce_seconds)

    def stop(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None


__all__ = ["ConfigWatcher", "is_relevant_path"]
