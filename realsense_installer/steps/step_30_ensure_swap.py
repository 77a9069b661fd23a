from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..errors import CommandError, ResourceError
from ..lib.fstab import swap_entry
from ..pipeline import InstallCtx
from ..state_store import record_decision

logger = logging.getLogger(__name__)


def _gib(n: int) -> str:
    return f"{n / 1024**3:.1f}GiB"


class EnsureSwapStep:
    """Create the swap file, or resize it if undersized; leave it alone otherwise."""

    step_id = "30_ensure_swap"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        swap = ctx.services.swap
        path = cfg.swap_path
        target = cfg.swap_min_bytes
        p = Path(path)

        try:
            if not p.exists():
                logger.info("Creating %s swap file at %s", _gib(target), path)
                swap.create(path, target)
                swap.enable(path)
                action = "created"
            else:
                size = p.stat().st_size
                if size >= target:
                    logger.info("Swap file %s is adequate (%s)", path, _gib(size))
                    self._ensure_fstab(ctx, path)
                    record_decision(state, "swap", {"path": path, "action": "adequate", "size_bytes": size})
                    return state

                logger.info("Swap file %s is too small (%s), resizing to %s", path, _gib(size), _gib(target))
                swap.disable(path)
                swap.remove(path)
                swap.create(path, target)
                swap.enable(path)
                action = "resized"
            self._ensure_fstab(ctx, path)
        except (CommandError, OSError) as e:
            rc = e.returncode if isinstance(e, CommandError) else None
            raise ResourceError(f"Swap setup failed for {path}: {e}", returncode=rc) from e

        record_decision(state, "swap", {"path": path, "action": action, "size_bytes": target})
        return state

    def _ensure_fstab(self, ctx: InstallCtx, path: str) -> None:
        mounts = ctx.services.mounts
        if mounts.has_entry(path, "swap"):
            return
        mounts.add_entry(swap_entry(path))
