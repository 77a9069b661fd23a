from __future__ import annotations

import logging
import platform
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

_INTEL_USB_VENDOR = "8086"

# USB product ids of common RealSense depth cameras.
_REALSENSE_PRODUCTS = {
    "0ad3": "D415",
    "0b07": "D435",
    "0b3a": "D435i",
    "0b5c": "D455",
    "0b64": "L515",
}


def normalize_arch(machine: str) -> str:
    m = machine.lower()
    return {
        "x86_64": "amd64",
        "amd64": "amd64",
        "aarch64": "arm64",
        "arm64": "arm64",
        "armv7l": "armhf",
        "armv6l": "armhf",
    }.get(m, m)


def _read_text(path: Path) -> Optional[str]:
    try:
        # device-tree strings are NUL terminated
        txt = path.read_text(encoding="utf-8", errors="ignore").strip().strip("\x00")
        return txt or None
    except OSError:
        return None


def _ram_mb(root: Path) -> Optional[int]:
    txt = _read_text(root / "proc/meminfo")
    if not txt:
        return None
    for line in txt.splitlines():
        if line.startswith("MemTotal:"):
            try:
                return int(line.split()[1]) // 1024
            except (IndexError, ValueError):
                return None
    return None


def _detect_realsense(root: Path) -> List[Dict[str, str]]:
    """List attached RealSense cameras from USB sysfs (best-effort)."""

    devices: List[Dict[str, str]] = []
    usb = root / "sys/bus/usb/devices"
    if not usb.exists():
        return devices
    for dev in sorted(usb.iterdir()):
        vendor = _read_text(dev / "idVendor")
        product = _read_text(dev / "idProduct")
        if vendor == _INTEL_USB_VENDOR and product in _REALSENSE_PRODUCTS:
            devices.append({"usb_path": dev.name, "product_id": product, "model": _REALSENSE_PRODUCTS[product]})
    return devices


def detect_hardware(*, root: str = "/", machine: Optional[str] = None) -> Dict[str, Any]:
    r = Path(root)
    arch = normalize_arch(machine or platform.machine())
    model = _read_text(r / "sys/firmware/devicetree/base/model") or _read_text(r / "proc/device-tree/model")

    hw: Dict[str, Any] = {
        "arch": arch,
        "model": model,
        "ram_mb": _ram_mb(r),
        "is_raspberry_pi": bool(model and "raspberry pi" in model.lower()),
        "cameras": _detect_realsense(r),
    }

    logger.info(
        "Hardware: arch=%s model=%s ram_mb=%s cameras=%d",
        hw["arch"],
        hw["model"],
        hw["ram_mb"],
        len(hw["cameras"]),
    )
    return hw
