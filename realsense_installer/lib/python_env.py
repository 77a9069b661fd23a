from __future__ import annotations

import logging
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path

from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)


def detect_python() -> str:
    """Interpreter the SDK bindings are built for (python3 on PATH)."""

    return shutil.which("python3") or sys.executable


@dataclass(frozen=True)
class PipPythonEnv:
    python: str
    dry_run: bool = False

    def pip_install(self, package_dir: str) -> None:
        run_cmd([self.python, "-m", "pip", "install", "."], cwd=package_dir, dry_run=self.dry_run)

    def write_script(self, path: str, source: str) -> None:
        p = Path(path)
        if self.dry_run:
            logger.info("Would write %s", str(p))
            return
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(source, encoding="utf-8")

    def run_script(self, path: str) -> CmdResult:
        return run_cmd([self.python, path], check=False, dry_run=self.dry_run)
