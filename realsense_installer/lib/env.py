from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Paths:
    state_default: str = "/var/lib/realsense-installer/state.json"
    log_default: str = "/var/log/realsense-installer.log"
    swapfile: str = "/swapfile"
    fstab: str = "/etc/fstab"
    udev_rules_dir: str = "/etc/udev/rules.d"
    ld_conf: str = "/etc/ld.so.conf.d/realsense.conf"
    install_lib_dir: str = "/usr/local/lib"
    smoke_test_script: str = "/tmp/test_rs.py"


PATHS = Paths()
