from __future__ import annotations

import os

from ..errors import PrivilegeError


def is_elevated() -> bool:
    return os.geteuid() == 0


def require_privilege() -> None:
    """Raise PrivilegeError unless running as root."""

    if not is_elevated():
        raise PrivilegeError("Please run as root (sudo)")
