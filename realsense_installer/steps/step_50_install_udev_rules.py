from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import BuildError, CommandError
from ..pipeline import InstallCtx
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class InstallUdevRulesStep:
    step_id = "50_install_udev_rules"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        rules = ctx.services.device_rules
        src = str(cfg.udev_rules_source)

        try:
            installed = rules.install_rule(src, cfg.udev_rules_dir)
        except FileNotFoundError as e:
            raise BuildError(f"udev rules file missing from checkout: {src}") from e

        try:
            rules.reload()
            rules.trigger()
        except CommandError as e:
            raise BuildError(f"udev reload failed: {e}", returncode=e.returncode) from e

        record_decision(state, "udev_rule", installed)
        return state
