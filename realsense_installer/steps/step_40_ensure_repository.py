from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import CommandError, NetworkError
from ..pipeline import InstallCtx
from ..state_store import record_decision, record_warning

logger = logging.getLogger(__name__)


class EnsureRepositoryStep:
    """Clone the SDK source, or fast-forward an existing checkout."""

    step_id = "40_ensure_repository"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        vcs = ctx.services.vcs
        path = str(cfg.repo_path)

        try:
            if cfg.repo_path.exists() and vcs.is_checkout(path):
                logger.info("Existing checkout found at %s, updating", path)
                if vcs.is_dirty(path):
                    logger.warning("Checkout %s has local modifications; they will be kept", path)
                    record_warning(state, {"repository": "local_modifications", "path": path})
                vcs.pull(path)
                action = "pulled"
            elif cfg.repo_path.exists():
                if not cfg.repair_broken_checkout:
                    raise NetworkError(
                        f"{path} exists but is not a valid checkout; remove it or enable repair_broken_checkout"
                    )
                logger.warning("%s is not a valid checkout (partial clone?); re-cloning", path)
                vcs.remove(path)
                vcs.clone(cfg.repo_url, path)
                action = "recloned"
            else:
                logger.info("Cloning fresh copy of %s into %s", cfg.repo_url, path)
                vcs.clone(cfg.repo_url, path)
                action = "cloned"
        except (CommandError, OSError) as e:
            rc = e.returncode if isinstance(e, CommandError) else None
            raise NetworkError(f"Repository update failed: {e}", returncode=rc) from e

        record_decision(state, "repository", {"path": path, "url": cfg.repo_url, "action": action})
        return state
