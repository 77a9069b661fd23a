from .step_10_detect_hardware import DetectHardwareStep
from .step_20_update_packages import UpdatePackagesStep
from .step_30_ensure_swap import EnsureSwapStep
from .step_40_ensure_repository import EnsureRepositoryStep
from .step_50_install_udev_rules import InstallUdevRulesStep
from .step_60_build_sdk import BuildSDKStep
from .step_70_register_library_path import RegisterLibraryPathStep
from .step_80_install_python_binding import InstallPythonBindingStep
from .step_85_smoke_test import SmokeTestStep
from .step_90_finalize import FinalizeStep

__all__ = [
    "DetectHardwareStep",
    "UpdatePackagesStep",
    "EnsureSwapStep",
    "EnsureRepositoryStep",
    "InstallUdevRulesStep",
    "BuildSDKStep",
    "RegisterLibraryPathStep",
    "InstallPythonBindingStep",
    "SmokeTestStep",
    "FinalizeStep",
]
