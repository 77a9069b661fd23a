from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.hwdetect import detect_hardware
from ..pipeline import InstallCtx
from ..state_store import record_warning

logger = logging.getLogger(__name__)


class DetectHardwareStep:
    step_id = "10_detect_hardware"

    def __init__(self, *, root: str = "/") -> None:
        self.root = root

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        hw = detect_hardware(root=self.root)
        state["hardware"] = hw

        # Informational only: the build works elsewhere, it is just untested.
        if not hw.get("is_raspberry_pi"):
            logger.warning("Board model %r is not a Raspberry Pi; continuing", hw.get("model"))
            record_warning(state, {"hardware": "not_raspberry_pi", "model": hw.get("model")})
        if hw.get("arch") != "arm64":
            logger.warning("Architecture %s is not arm64; continuing", hw.get("arch"))
            record_warning(state, {"hardware": "unexpected_arch", "arch": hw.get("arch")})
        if not hw.get("cameras"):
            logger.info("No RealSense camera attached (not required for install)")
        return state
