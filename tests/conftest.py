"""Shared pytest fixtures and in-memory fakes for the host services."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

from realsense_installer.config import InstallerConfig
from realsense_installer.errors import CommandError
from realsense_installer.lib.command import CmdResult
from realsense_installer.lib.fstab import FstabEntry
from realsense_installer.logging_utils import reset_logging
from realsense_installer.pipeline import InstallCtx
from realsense_installer.services import Services
from realsense_installer.state_store import ensure_defaults

RULES_NAME = "99-realsense-libusb.rules"


class FakePackages:
    def __init__(self, fail_on: Optional[str] = None, returncode: int = 100) -> None:
        self.calls: List[tuple] = []
        self.fail_on = fail_on
        self.returncode = returncode

    def _call(self, name: str, *args: object) -> None:
        self.calls.append((name, *args))
        if self.fail_on == name:
            raise CommandError(["apt-get", name], self.returncode, "E: Could not resolve host")

    def update(self) -> None:
        self._call("update")

    def upgrade(self) -> None:
        self._call("upgrade")

    def install(self, packages: Sequence[str]) -> None:
        self._call("install", tuple(packages))


class FakeSwap:
    def __init__(self, fail_create: bool = False) -> None:
        self.calls: List[tuple] = []
        self.active: set[str] = set()
        self.fail_create = fail_create

    def create(self, path: str, size_bytes: int) -> None:
        self.calls.append(("create", path, size_bytes))
        if self.fail_create:
            raise CommandError(["fallocate", "-l", str(size_bytes), path], 1, "fallocate: No space left on device")
        with open(path, "wb") as fh:
            fh.truncate(size_bytes)

    def enable(self, path: str) -> None:
        self.calls.append(("enable", path))
        self.active.add(path)

    def disable(self, path: str) -> None:
        self.calls.append(("disable", path))
        self.active.discard(path)

    def remove(self, path: str) -> None:
        self.calls.append(("remove", path))
        Path(path).unlink()


class FakeMounts:
    def __init__(self) -> None:
        self.entries: List[FstabEntry] = []

    def has_entry(self, spec: str, fstype: str) -> bool:
        return any(e.spec == spec and e.fstype == fstype for e in self.entries)

    def add_entry(self, entry: FstabEntry) -> None:
        self.entries.append(entry)


class FakeVcs:
    def __init__(self, dirty: bool = False, fail_on: Optional[str] = None) -> None:
        self.calls: List[tuple] = []
        self.dirty = dirty
        self.fail_on = fail_on

    def is_checkout(self, path: str) -> bool:
        return (Path(path) / ".git").is_dir()

    def is_dirty(self, path: str) -> bool:
        return self.dirty

    def clone(self, url: str, path: str) -> None:
        self.calls.append(("clone", url, path))
        if self.fail_on == "clone":
            raise CommandError(["git", "clone", url, path], 128, "fatal: unable to access")
        p = Path(path)
        (p / ".git").mkdir(parents=True)
        (p / "config").mkdir()
        (p / "config" / RULES_NAME).write_text('SUBSYSTEMS=="usb", ATTRS{idVendor}=="8086"\n', encoding="utf-8")

    def pull(self, path: str) -> None:
        self.calls.append(("pull", path))
        if self.fail_on == "pull":
            raise CommandError(["git", "-C", path, "pull", "--ff-only"], 1, "fatal: Not possible to fast-forward")

    def remove(self, path: str) -> None:
        self.calls.append(("remove", path))
        shutil.rmtree(path)


class FakeDeviceRules:
    def __init__(self) -> None:
        self.calls: List[tuple] = []

    def install_rule(self, src: str, dest_dir: str) -> str:
        s = Path(src)
        if not s.exists():
            raise FileNotFoundError(src)
        d = Path(dest_dir) / s.name
        d.parent.mkdir(parents=True, exist_ok=True)
        d.write_bytes(s.read_bytes())
        self.calls.append(("install_rule", src, dest_dir))
        return str(d)

    def reload(self) -> None:
        self.calls.append(("reload",))

    def trigger(self) -> None:
        self.calls.append(("trigger",))


class FakeBuild:
    def __init__(self, wrapper_subdir: str = "wrappers/python", fail_on: Optional[str] = None) -> None:
        self.calls: List[tuple] = []
        self.wrapper_subdir = wrapper_subdir
        self.fail_on = fail_on

    def _maybe_fail(self, phase: str, rc: int = 2) -> None:
        if self.fail_on == phase:
            raise CommandError(["make" if phase != "configure" else "cmake"], rc, f"{phase} error")

    def configure(self, source_dir: str, build_dir: str, definitions: Sequence[str]) -> None:
        self.calls.append(("configure", source_dir, build_dir, list(definitions)))
        self._maybe_fail("configure")
        Path(build_dir).mkdir(parents=True, exist_ok=True)

    def compile(self, build_dir: str, jobs: int) -> None:
        self.calls.append(("compile", build_dir, jobs))
        self._maybe_fail("compile")

    def install(self, build_dir: str) -> None:
        self.calls.append(("install", build_dir))
        self._maybe_fail("install")
        (Path(build_dir) / self.wrapper_subdir).mkdir(parents=True, exist_ok=True)


class FakeLinker:
    def __init__(self) -> None:
        self.refreshed = 0

    def register(self, conf_path: str, lib_dir: str) -> None:
        p = Path(conf_path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(lib_dir + "\n", encoding="utf-8")

    def refresh(self) -> None:
        self.refreshed += 1


class FakePython:
    def __init__(
        self,
        stdout: str = "RealSense SDK installed successfully!\n",
        returncode: int = 0,
        stderr: str = "",
    ) -> None:
        self.python = "/usr/bin/python3"
        self.stdout = stdout
        self.returncode = returncode
        self.stderr = stderr
        self.installed: List[str] = []
        self.scripts: Dict[str, str] = {}

    def pip_install(self, package_dir: str) -> None:
        self.installed.append(package_dir)

    def write_script(self, path: str, source: str) -> None:
        Path(path).write_text(source, encoding="utf-8")
        self.scripts[path] = source

    def run_script(self, path: str) -> CmdResult:
        return CmdResult(argv=[self.python, path], returncode=self.returncode, stdout=self.stdout, stderr=self.stderr)


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    reset_logging()


@pytest.fixture
def cfg(tmp_path: Path) -> InstallerConfig:
    """Installer config with every system path redirected into tmp_path."""
    return InstallerConfig(
        swap_path=str(tmp_path / "swapfile"),
        swap_min_bytes=64 * 1024,
        fstab_path=str(tmp_path / "fstab"),
        repo_dir=str(tmp_path / "librealsense"),
        udev_rules_dir=str(tmp_path / "rules.d"),
        ld_conf_path=str(tmp_path / "ld.so.conf.d" / "realsense.conf"),
        smoke_test_path=str(tmp_path / "test_rs.py"),
    )


@pytest.fixture
def services() -> Services:
    return Services(
        packages=FakePackages(),
        swap=FakeSwap(),
        mounts=FakeMounts(),
        vcs=FakeVcs(),
        device_rules=FakeDeviceRules(),
        build=FakeBuild(),
        linker=FakeLinker(),
        python=FakePython(),
    )


@pytest.fixture
def ctx(cfg: InstallerConfig, services: Services) -> InstallCtx:
    return InstallCtx(cfg=cfg, services=services)


@pytest.fixture
def state() -> dict:
    return ensure_defaults({})


@pytest.fixture
def config_file(tmp_path: Path, cfg: InstallerConfig) -> Path:
    """The cfg fixture serialized as a YAML overrides file."""
    p = tmp_path / "installer.yaml"
    lines = [
        f"swap_path: {cfg.swap_path}",
        f"swap_min_bytes: {cfg.swap_min_bytes}",
        f"fstab_path: {cfg.fstab_path}",
        f"repo_dir: {cfg.repo_dir}",
        f"udev_rules_dir: {cfg.udev_rules_dir}",
        f"ld_conf_path: {cfg.ld_conf_path}",
        f"smoke_test_path: {cfg.smoke_test_path}",
    ]
    p.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return p
