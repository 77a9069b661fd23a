from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import CommandError, NetworkError
from ..pipeline import InstallCtx
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class UpdatePackagesStep:
    step_id = "20_update_packages"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        pm = ctx.services.packages

        try:
            pm.update()
            if cfg.upgrade_packages:
                pm.upgrade()
            pm.install(list(cfg.packages))
        except CommandError as e:
            raise NetworkError(f"Package update/install failed: {e}", returncode=e.returncode) from e

        record_decision(state, "packages", list(cfg.packages))
        logger.info("Installed %d dependency packages (upgrade=%s)", len(cfg.packages), cfg.upgrade_packages)
        return state
