from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import BuildError, CommandError
from ..pipeline import InstallCtx
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class BuildSDKStep:
    """Configure, compile and install the SDK (this may take a while)."""

    step_id = "60_build_sdk"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        build = ctx.services.build
        source_dir = str(cfg.repo_path)
        build_dir = str(cfg.build_path)
        definitions = cfg.build.cmake_definitions(ctx.services.python.python)

        phase = "configure"
        try:
            build.configure(source_dir, build_dir, definitions)
            phase = "compile"
            logger.info("Building with %d parallel jobs (this will take some time)", cfg.build_jobs)
            build.compile(build_dir, cfg.build_jobs)
            phase = "install"
            build.install(build_dir)
        except CommandError as e:
            raise BuildError(f"SDK {phase} failed: {e}", returncode=e.returncode) from e

        record_decision(
            state,
            "build",
            {"build_dir": build_dir, "jobs": cfg.build_jobs, "definitions": definitions},
        )
        return state
