from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from .command import run_cmd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UdevRuleManager:
    dry_run: bool = False

    def install_rule(self, src: str, dest_dir: str) -> str:
        s = Path(src)
        d = Path(dest_dir) / s.name
        if self.dry_run:
            logger.info("Would copy %s -> %s", str(s), str(d))
            return str(d)

        if not s.exists():
            raise FileNotFoundError(src)

        d.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(s, d)
        logger.info("Installed udev rule %s", str(d))
        return str(d)

    def reload(self) -> None:
        run_cmd(["udevadm", "control", "--reload-rules"], dry_run=self.dry_run)

    def trigger(self) -> None:
        run_cmd(["udevadm", "trigger"], dry_run=self.dry_run)
