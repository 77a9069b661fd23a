"""Narrow interfaces to the host system.

Steps only touch global system state (apt, swap, fstab, git, udev, cmake,
the dynamic linker, pip) through these services, so tests can swap in fakes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from .config import InstallerConfig
from .lib.cmake import CMakeBuild
from .lib.command import CmdResult
from .lib.fstab import FstabEntry, FstabMountTable
from .lib.git import GitSourceControl
from .lib.linker import LdSoConfig
from .lib.pkg import AptPackageManager
from .lib.python_env import PipPythonEnv, detect_python
from .lib.swap import SwapFileManager
from .lib.udev import UdevRuleManager


class PackageManager(Protocol):
    def update(self) -> None: ...

    def upgrade(self) -> None: ...

    def install(self, packages: Sequence[str]) -> None: ...


class SwapManager(Protocol):
    def create(self, path: str, size_bytes: int) -> None: ...

    def enable(self, path: str) -> None: ...

    def disable(self, path: str) -> None: ...

    def remove(self, path: str) -> None: ...


class MountTable(Protocol):
    def has_entry(self, spec: str, fstype: str) -> bool: ...

    def add_entry(self, entry: FstabEntry) -> None: ...


class SourceControl(Protocol):
    def is_checkout(self, path: str) -> bool: ...

    def is_dirty(self, path: str) -> bool: ...

    def clone(self, url: str, path: str) -> None: ...

    def pull(self, path: str) -> None: ...

    def remove(self, path: str) -> None: ...


class DeviceRuleManager(Protocol):
    def install_rule(self, src: str, dest_dir: str) -> str: ...

    def reload(self) -> None: ...

    def trigger(self) -> None: ...


class BuildSystem(Protocol):
    def configure(self, source_dir: str, build_dir: str, definitions: Sequence[str]) -> None: ...

    def compile(self, build_dir: str, jobs: int) -> None: ...

    def install(self, build_dir: str) -> None: ...


class LinkerConfig(Protocol):
    def register(self, conf_path: str, lib_dir: str) -> None: ...

    def refresh(self) -> None: ...


class PythonEnv(Protocol):
    python: str

    def pip_install(self, package_dir: str) -> None: ...

    def write_script(self, path: str, source: str) -> None: ...

    def run_script(self, path: str) -> CmdResult: ...


@dataclass(frozen=True)
class Services:
    packages: PackageManager
    swap: SwapManager
    mounts: MountTable
    vcs: SourceControl
    device_rules: DeviceRuleManager
    build: BuildSystem
    linker: LinkerConfig
    python: PythonEnv


def default_services(cfg: InstallerConfig, *, dry_run: bool = False) -> Services:
    python = cfg.build.python_executable or detect_python()
    return Services(
        packages=AptPackageManager(dry_run=dry_run),
        swap=SwapFileManager(proc_swaps=cfg.proc_swaps, dry_run=dry_run),
        mounts=FstabMountTable(path=cfg.fstab_path, dry_run=dry_run),
        vcs=GitSourceControl(dry_run=dry_run),
        device_rules=UdevRuleManager(dry_run=dry_run),
        build=CMakeBuild(dry_run=dry_run),
        linker=LdSoConfig(dry_run=dry_run),
        python=PipPythonEnv(python=python, dry_run=dry_run),
    )
