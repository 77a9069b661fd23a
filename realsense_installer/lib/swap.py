from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

from .command import run_cmd

logger = logging.getLogger(__name__)


def active_swaps(proc_swaps: str = "/proc/swaps") -> List[str]:
    """Return the filenames listed in /proc/swaps (best-effort)."""

    try:
        lines = Path(proc_swaps).read_text(encoding="utf-8", errors="ignore").splitlines()
    except OSError:
        return []
    # First line is the column header.
    return [ln.split()[0] for ln in lines[1:] if ln.strip()]


@dataclass(frozen=True)
class SwapFileManager:
    """Allocate, format and (de)activate a swap file."""

    proc_swaps: str = "/proc/swaps"
    dry_run: bool = False

    def create(self, path: str, size_bytes: int) -> None:
        run_cmd(["fallocate", "-l", str(int(size_bytes)), path], dry_run=self.dry_run)
        run_cmd(["chmod", "600", path], dry_run=self.dry_run)
        run_cmd(["mkswap", path], dry_run=self.dry_run)

    def enable(self, path: str) -> None:
        run_cmd(["swapon", path], dry_run=self.dry_run)

    def is_active(self, path: str) -> bool:
        return path in active_swaps(self.proc_swaps)

    def disable(self, path: str) -> None:
        if not self.dry_run and not self.is_active(path):
            logger.info("Swap %s not active; skipping swapoff", path)
            return
        run_cmd(["swapoff", path], dry_run=self.dry_run)

    def remove(self, path: str) -> None:
        p = Path(path)
        if self.dry_run:
            logger.info("Would remove %s", str(p))
            return
        p.unlink(missing_ok=True)
