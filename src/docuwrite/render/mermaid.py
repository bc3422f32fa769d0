from __future__ import annotations

import json
import shutil
import subprocess
import tempfile
import threading
from pathlib import Path
from typing import Protocol

from docuwrite.errors import RenderError


DEFAULT_PUPPETEER_ARGS = ("--no-sandbox", "--disable-setuid-sandbox")


class Rasterizer(Protocol):
    def render(self, payload: str, destination: Path) -> Path:
        ...


def write_diagram_source(payload: str, destination: Path) -> Path:
    """Write the diagram code next to its image as ``<stem>.mmd``."""
    mmd_path = destination.with_suffix(".mmd")
    mmd_path.parent.mkdir(parents=True, exist_ok=True)
    mmd_path.write_text(payload, encoding="utf-8")
    return mmd_path


class MermaidCliRasterizer:
    """
    Rasterize Mermaid code to PNG through the ``mmdc`` command-line tool.

    The executable lookup and the scratch directory holding the puppeteer
    configuration are created on the first ``render`` call and released by
    ``close``. Safe to share between worker threads.
    """

    def __init__(
        self,
        *,
        executable: str = "mmdc",
        timeout: float = 60.0,
        scale: int = 2,
        background: str = "white",
        puppeteer_args: tuple[str, ...] = DEFAULT_PUPPETEER_ARGS,
    ) -> None:
        self.executable = executable
        self.timeout = timeout
        self.scale = scale
        self.background = background
        self.puppeteer_args = puppeteer_args
        self._lock = threading.Lock()
        self._workdir: tempfile.TemporaryDirectory[str] | None = None
        self._resolved: str | None = None
        self._config_path: Path | None = None

    @property
    def started(self) -> bool:
        return self._workdir is not None

    def _ensure_started(self) -> tuple[str, Path]:
        with self._lock:
            if self._resolved is None:
                resolved = shutil.which(self.executable)
                if resolved is None:
                    raise RenderError(f"Mermaid CLI not found on PATH: {self.executable}")
                self._resolved = resolved
            if self._workdir is None:
                self._workdir = tempfile.TemporaryDirectory(prefix="docuwrite_mmdc_")
                config_path = Path(self._workdir.name) / "puppeteer-config.json"
                config_path.write_text(json.dumps({"args": list(self.puppeteer_args)}), encoding="utf-8")
                self._config_path = config_path
            assert self._config_path is not None
            return self._resolved, self._config_path

    def build_command(self, source: Path, destination: Path, config_path: Path, executable: str) -> list[str]:
        return [
            executable,
            "-i",
            str(source),
            "-o",
            str(destination),
            "-s",
            str(self.scale),
            "-b",
            self.background,
            "-p",
            str(config_path),
        ]

    def render(self, payload: str, destination: Path) -> Path:
        executable, config_path = self._ensure_started()
        try:
            source = write_diagram_source(payload, destination)
        except OSError as exc:
            raise RenderError(f"could not write diagram source for {destination.name}: {exc}") from exc
        command = self.build_command(source, destination, config_path, executable)
        try:
            result = subprocess.run(
                command,
                text=True,
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise RenderError(f"mmdc timed out after {self.timeout}s for {destination.name}") from exc
        except OSError as exc:
            raise RenderError(f"mmdc could not be started: {exc}") from exc

        if result.returncode != 0:
            detail = (result.stderr or result.stdout or "").strip()
            raise RenderError(f"mmdc exited with code {result.returncode}: {detail}")
        if not destination.exists():
            raise RenderError(f"mmdc reported success but produced no image: {destination}")
        return destination

    def close(self) -> None:
        with self._lock:
            if self._workdir is not None:
                self._workdir.cleanup()
                self._workdir = None
                self._config_path = None

    def __enter__(self) -> MermaidCliRasterizer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["MermaidCliRasterizer", "Rasterizer", "write_diagram_source"]
