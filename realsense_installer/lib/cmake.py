from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CMakeBuild:
    """Out-of-tree cmake + make build."""

    dry_run: bool = False

    def configure(self, source_dir: str, build_dir: str, definitions: Sequence[str]) -> None:
        b = Path(build_dir)
        if not self.dry_run:
            b.mkdir(parents=True, exist_ok=True)
        run_cmd(["cmake", str(Path(source_dir).resolve()), *definitions], cwd=str(b), dry_run=self.dry_run)

    def compile(self, build_dir: str, jobs: int) -> None:
        run_cmd(["make", f"-j{int(jobs)}"], cwd=build_dir, dry_run=self.dry_run)

    def install(self, build_dir: str) -> None:
        run_cmd(["make", "install"], cwd=build_dir, dry_run=self.dry_run)
