from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import BuildError, CommandError
from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)


class InstallPythonBindingStep:
    step_id = "80_install_python_binding"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        wrapper = ctx.cfg.python_wrapper_path
        if not ctx.dry_run and not wrapper.is_dir():
            raise BuildError(f"Python wrapper build output missing: {wrapper}")

        try:
            ctx.services.python.pip_install(str(wrapper))
        except CommandError as e:
            raise BuildError(f"Python binding install failed: {e}", returncode=e.returncode) from e
        return state
