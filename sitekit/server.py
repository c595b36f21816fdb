"""Development server for sitekit.

Serves the built site on the configured port and rebuilds when sources
change. There is no live reload; refresh the browser after a rebuild.

Key classes:
- DevServer: Builds, serves and watches a project.
- _SiteHandler: HTTP handler serving ``index.html`` for directories and 404s.
- _ChangeHandler: File system event handler that triggers rebuilds.
"""

from __future__ import annotations

import functools
import os
import shutil
import threading
import time
import webbrowser
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .build import BuildError, build_site
from .config import CONFIG_FILENAME, ConfigError, load_config
from .utils import is_within


class _SiteHandler(SimpleHTTPRequestHandler):
    """Serves the output directory without directory listings."""

    def end_headers(self):
        self.send_header("Cache-Control", "no-cache, no-store, must-revalidate")
        super().end_headers()

    def list_directory(self, path):  # pragma: no cover - exercised via send_head
        self.send_error(404, "File not found")
        return None

    def log_message(self, format, *args):  # pragma: no cover - quiet console
        pass


class DevServer:
    """Development server with rebuild on change.

    Attributes:
        project_root: Root directory of the project.
        config: Site configuration.
        output_dir: Directory being served.
        http_port: Port for the HTTP server.
    """

    def __init__(self, project_root: Path, http_port: int | None = None):
        """Initialize the development server.

        Args:
            project_root: Root directory of the project.
            http_port: Optional override for the configured port.
        """
        self.project_root = project_root
        self.config = load_config(project_root)
        self.output_dir = self.config.output_path
        self._staging_dir = self.output_dir.with_name(self.output_dir.name + ".staging")
        self.http_port = int(http_port or self.config.bundler.port)
        self._observer: Observer | None = None
        self._rebuilding = False
        self._last_rebuild_at = 0.0
        self._debounce_seconds = 0.05

    def start(self) -> None:  # pragma: no cover - integration path
        self.build()
        threading.Thread(target=self._start_http, daemon=True).start()
        if self.config.bundler.open:
            webbrowser.open(f"http://localhost:{self.http_port}/")
        self._start_watcher()
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            self.stop()

    def stop(self) -> None:
        if self._observer:
            self._observer.stop()
            self._observer.join()

    def build(self) -> None:
        """Build into a staging directory, then swap it into place."""
        staging = self._prepare_staging_dir()
        if self.output_dir.exists() and not self.config.bundler.empty_out_dir:
            shutil.copytree(self.output_dir, staging, dirs_exist_ok=True)
        self.config = load_config(self.project_root)
        build_site(
            self.project_root,
            config=self.config,
            output_dir_override=staging,
            dev=True,
        )
        self._activate_staging(staging)

    def _start_http(self) -> None:  # pragma: no cover - integration path
        handler = functools.partial(_SiteHandler, directory=str(self.output_dir))
        httpd = ThreadingHTTPServer(("", self.http_port), handler)
        print(f"Serving {self.output_dir} at http://localhost:{self.http_port}")
        httpd.serve_forever()

    def _start_watcher(self) -> None:  # pragma: no cover - integration path
        handler = _ChangeHandler(self)
        observer = Observer()
        observer.schedule(handler, str(self.config.input_path), recursive=True)
        observer.schedule(handler, str(self.project_root), recursive=False)
        observer.start()
        self._observer = observer

    def rebuild(self) -> None:
        now = time.time()
        if self._rebuilding or (now - self._last_rebuild_at) < self._debounce_seconds:
            return
        self._rebuilding = True
        try:
            print("Change detected; rebuilding...")
            self.build()
        except (BuildError, ConfigError) as exc:
            print(f"Build failed: {exc}")
        finally:
            self._rebuilding = False
            self._last_rebuild_at = time.time()

    def should_rebuild(self, path: Path) -> bool:
        """Return True for changes to sources or the config file."""
        for ignored in (self.output_dir, self._staging_dir):
            if is_within(path, ignored):
                return False
        if "node_modules" in path.parts:
            return False
        if path.parent == self.project_root:
            return path.name == CONFIG_FILENAME
        return True

    def _prepare_staging_dir(self) -> Path:
        staging = self._staging_dir
        if staging.exists():
            shutil.rmtree(staging)
        staging.mkdir(parents=True, exist_ok=True)
        return staging

    def _activate_staging(self, staging: Path) -> None:
        if self.output_dir.exists():
            shutil.rmtree(self.output_dir)
        os.replace(staging, self.output_dir)


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, server: DevServer):
        super().__init__()
        self.server = server

    def on_any_event(self, event):
        if event.is_directory:
            return
        if self.server.should_rebuild(Path(event.src_path)):
            self.server.rebuild()
