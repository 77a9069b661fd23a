from __future__ import annotations

import logging
from typing import Any, Dict

from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)

TROUBLESHOOTING = (
    "Try running 'realsense-viewer' to test your camera",
    "If wait_for_frames() raises \"Frame didn't arrive within 5000\", increase the timeout: "
    "frames = pipeline.wait_for_frames(timeout_ms=15000)",
    "If 'import pyrealsense2 as rs' lacks attributes, use: import pyrealsense2.pyrealsense2 as rs",
)


class FinalizeStep:
    step_id = "90_finalize"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        exe = state.get("execution") or {}
        logger.info("Finalize summary: %s", exe.get("decisions") or {})
        if exe.get("warnings"):
            logger.info("Warnings: %s", exe["warnings"])

        logger.info("Installation complete!")
        for hint in TROUBLESHOOTING:
            logger.info("%s", hint)
        return state
