from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from .command import run_cmd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GitSourceControl:
    dry_run: bool = False

    def is_checkout(self, path: str) -> bool:
        """True if path is the top of a usable git work tree."""
        p = Path(path)
        if not (p / ".git").exists():
            return False
        r = run_cmd(["git", "-C", str(p), "rev-parse", "--verify", "HEAD"], check=False)
        return r.returncode == 0

    def is_dirty(self, path: str) -> bool:
        if self.dry_run:
            return False
        r = run_cmd(["git", "-C", path, "status", "--porcelain"], check=False)
        return r.returncode == 0 and bool(r.stdout.strip())

    def clone(self, url: str, path: str) -> None:
        if not self.dry_run:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        run_cmd(["git", "clone", url, path], dry_run=self.dry_run)

    def pull(self, path: str) -> None:
        # --ff-only: never create merge commits or clobber local history.
        run_cmd(["git", "-C", path, "pull", "--ff-only"], dry_run=self.dry_run)

    def remove(self, path: str) -> None:
        if self.dry_run:
            logger.info("Would remove tree %s", path)
            return
        shutil.rmtree(path)
