from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)

# Keep apt from prompting on config file conflicts during upgrade.
_APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


@dataclass(frozen=True)
class AptPackageManager:
    """Host package manager (apt-get)."""

    dry_run: bool = False

    def update(self) -> None:
        run_cmd(["apt-get", "update"], env=_APT_ENV, dry_run=self.dry_run)

    def upgrade(self) -> None:
        run_cmd(["apt-get", "upgrade", "-y"], env=_APT_ENV, dry_run=self.dry_run)

    def install(self, packages: Sequence[str]) -> None:
        if not packages:
            return
        run_cmd(["apt-get", "install", "-y", *packages], env=_APT_ENV, dry_run=self.dry_run)
