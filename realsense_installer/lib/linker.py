from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .command import run_cmd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LdSoConfig:
    """Dynamic linker search path (/etc/ld.so.conf.d fragments + ldconfig)."""

    dry_run: bool = False

    def register(self, conf_path: str, lib_dir: str) -> None:
        p = Path(conf_path)
        if self.dry_run:
            logger.info("Would write %s (%s)", str(p), lib_dir)
            return
        # The fragment belongs to us: rewrite rather than append.
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(lib_dir + "\n", encoding="utf-8")

    def refresh(self) -> None:
        run_cmd(["ldconfig"], dry_run=self.dry_run)
