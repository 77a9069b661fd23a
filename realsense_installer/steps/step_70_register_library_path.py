from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import BuildError, CommandError
from ..pipeline import InstallCtx
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class RegisterLibraryPathStep:
    step_id = "70_register_library_path"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        linker = ctx.services.linker

        try:
            linker.register(cfg.ld_conf_path, cfg.library_dir)
            linker.refresh()
        except (CommandError, OSError) as e:
            rc = e.returncode if isinstance(e, CommandError) else None
            raise BuildError(f"Library path registration failed: {e}", returncode=rc) from e

        record_decision(state, "library_path", {"conf": cfg.ld_conf_path, "dir": cfg.library_dir})
        logger.info("Registered %s in %s", cfg.library_dir, cfg.ld_conf_path)
        return state
