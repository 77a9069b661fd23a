from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .lib.env import PATHS

DEFAULT_REPO_URL = "https://github.com/IntelRealSense/librealsense.git"

DEFAULT_PACKAGES: Tuple[str, ...] = (
    # build toolchain + USB backend
    "git",
    "cmake",
    "libssl-dev",
    "libusb-1.0-0-dev",
    "pkg-config",
    "libgtk-3-dev",
    # viewer / examples
    "libglfw3-dev",
    "libgl1-mesa-dev",
    "libglu1-mesa-dev",
    # python bindings
    "python3-dev",
    "python3-pip",
)

SWAP_MIN_BYTES = 2 * 1024**3

_SIZE_RE = re.compile(r"^\s*(\d+)\s*([KMGT]?)(i?B)?\s*$", re.IGNORECASE)
_SIZE_UNITS = {"": 1, "K": 1024, "M": 1024**2, "G": 1024**3, "T": 1024**4}


def parse_size(value: Union[int, str]) -> int:
    """Parse a byte count: 2147483648, "2G", "512M", "2GiB"."""

    if isinstance(value, bool):
        raise ValueError(f"Invalid size: {value!r}")
    if isinstance(value, int):
        if value <= 0:
            raise ValueError(f"Size must be positive, got {value}")
        return value
    m = _SIZE_RE.match(str(value))
    if not m:
        raise ValueError(f"Invalid size: {value!r}")
    size = int(m.group(1)) * _SIZE_UNITS[m.group(2).upper()]
    if size <= 0:
        raise ValueError(f"Size must be positive, got {value!r}")
    return size


def _flag(v: bool) -> str:
    return "true" if v else "false"


@dataclass(frozen=True)
class BuildFlags:
    build_examples: bool = True
    build_type: str = "Release"
    force_rsusb_backend: bool = True
    build_with_cuda: bool = False
    build_python_bindings: bool = True
    # None: auto-detect python3 on PATH
    python_executable: Optional[str] = None
    extra_definitions: Dict[str, str] = field(default_factory=dict)

    def cmake_definitions(self, python_executable: str) -> List[str]:
        defs = [
            f"-DBUILD_EXAMPLES={_flag(self.build_examples)}",
            f"-DCMAKE_BUILD_TYPE={self.build_type}",
            f"-DFORCE_RSUSB_BACKEND={_flag(self.force_rsusb_backend)}",
            f"-DBUILD_WITH_CUDA={_flag(self.build_with_cuda)}",
            f"-DBUILD_PYTHON_BINDINGS={_flag(self.build_python_bindings)}",
            f"-DPYTHON_EXECUTABLE={python_executable}",
        ]
        for k, v in self.extra_definitions.items():
            defs.append(f"-D{k}={_flag(v) if isinstance(v, bool) else v}")
        return defs


@dataclass(frozen=True)
class InstallerConfig:
    packages: Tuple[str, ...] = DEFAULT_PACKAGES
    upgrade_packages: bool = True

    swap_path: str = PATHS.swapfile
    swap_min_bytes: int = SWAP_MIN_BYTES
    fstab_path: str = PATHS.fstab
    proc_swaps: str = "/proc/swaps"

    repo_url: str = DEFAULT_REPO_URL
    repo_dir: str = "~/librealsense"
    repair_broken_checkout: bool = True

    udev_rules_file: str = "config/99-realsense-libusb.rules"
    udev_rules_dir: str = PATHS.udev_rules_dir

    build_subdir: str = "build"
    build: BuildFlags = field(default_factory=BuildFlags)
    # Two jobs keeps peak memory within a Pi's RAM + swap.
    build_jobs: int = 2

    library_dir: str = PATHS.install_lib_dir
    ld_conf_path: str = PATHS.ld_conf

    python_wrapper_subdir: str = "wrappers/python"
    smoke_test_path: str = PATHS.smoke_test_script
    binding_module: str = "pyrealsense2"

    @property
    def repo_path(self) -> Path:
        return Path(self.repo_dir).expanduser()

    @property
    def build_path(self) -> Path:
        return self.repo_path / self.build_subdir

    @property
    def udev_rules_source(self) -> Path:
        return self.repo_path / self.udev_rules_file

    @property
    def python_wrapper_path(self) -> Path:
        return self.build_path / self.python_wrapper_subdir


def _field_names(cls: type) -> set[str]:
    return {f.name for f in dataclasses.fields(cls)}


def config_from_mapping(raw: Dict[str, Any]) -> InstallerConfig:
    """Build an InstallerConfig from a (YAML-derived) mapping of overrides."""

    if not isinstance(raw, dict):
        raise ValueError("installer config must contain a mapping/object")

    unknown = set(raw) - _field_names(InstallerConfig)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    kwargs: Dict[str, Any] = dict(raw)

    build_raw = kwargs.pop("build", None) or {}
    if not isinstance(build_raw, dict):
        raise ValueError("config.build must be a mapping")
    unknown = set(build_raw) - _field_names(BuildFlags)
    if unknown:
        raise ValueError(f"Unknown build keys: {', '.join(sorted(unknown))}")
    extra = build_raw.get("extra_definitions") or {}
    if not isinstance(extra, dict):
        raise ValueError("config.build.extra_definitions must be a mapping")
    kwargs["build"] = BuildFlags(**{**build_raw, "extra_definitions": dict(extra)})

    if "packages" in kwargs:
        pkgs = kwargs["packages"] or []
        if not isinstance(pkgs, list):
            raise ValueError("config.packages must be a list")
        kwargs["packages"] = tuple(str(p).strip() for p in pkgs if str(p).strip())

    if "swap_min_bytes" in kwargs:
        kwargs["swap_min_bytes"] = parse_size(kwargs["swap_min_bytes"])

    if "build_jobs" in kwargs:
        jobs = kwargs["build_jobs"]
        if isinstance(jobs, bool) or not isinstance(jobs, int) or jobs < 1:
            raise ValueError(f"config.build_jobs must be an integer >= 1, got {jobs!r}")

    return InstallerConfig(**kwargs)


def load_config(path: Optional[str]) -> InstallerConfig:
    if path is None:
        return InstallerConfig()

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("installer config must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise RuntimeError("PyYAML is required to read the installer config") from e

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    return config_from_mapping(raw)
