from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from .config import load_config
from .errors import PrivilegeError, UsageError
from .lib.env import PATHS
from .lib.privilege import require_privilege
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import InstallCtx, PipelineResult, Step, check_step_range, run_pipeline
from .services import Services, default_services
from .state_store import ensure_defaults, load_state, record_error, reset_run, save_state_or_fallback
from .steps import (
    BuildSDKStep,
    DetectHardwareStep,
    EnsureRepositoryStep,
    EnsureSwapStep,
    FinalizeStep,
    InstallPythonBindingStep,
    InstallUdevRulesStep,
    RegisterLibraryPathStep,
    SmokeTestStep,
    UpdatePackagesStep,
)

logger = logging.getLogger(__name__)


DEFAULT_STATE_PATH = PATHS.state_default


def build_steps() -> List[Step]:
    return [
        DetectHardwareStep(),
        UpdatePackagesStep(),
        EnsureSwapStep(),
        EnsureRepositoryStep(),
        InstallUdevRulesStep(),
        BuildSDKStep(),
        RegisterLibraryPathStep(),
        InstallPythonBindingStep(),
        SmokeTestStep(),
        FinalizeStep(),
    ]


def run(
    *,
    config_path: Optional[str] = None,
    state_path: str = DEFAULT_STATE_PATH,
    log_path: str = DEFAULT_LOG_PATH,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    resume: bool = False,
    force: bool = False,
    dry_run: bool = False,
    services: Optional[Services] = None,
    steps: Optional[List[Step]] = None,
) -> PipelineResult:
    """Run the installer pipeline, persisting state for inspection/resume.

    The privilege check happens before anything touches the filesystem
    (log file, state file, config).
    """

    if not dry_run:
        require_privilege()

    actual_log_path = configure_logging(log_path=log_path)
    logger.info("Intel RealSense installation%s", " (dry run)" if dry_run else "")

    try:
        cfg = load_config(config_path)
        state = ensure_defaults(load_state(state_path))
        if steps is None:
            steps = build_steps()
        check_step_range(steps, start_at, stop_after)
    except (FileNotFoundError, ValueError) as e:
        raise UsageError(str(e)) from e

    if not resume:
        reset_run(state)
    paths = state.setdefault("execution", {}).setdefault("paths", {})
    paths["log_path_requested"] = log_path
    paths["log_path_actual"] = actual_log_path

    ctx = InstallCtx(
        cfg=cfg,
        services=services or default_services(cfg, dry_run=dry_run),
        dry_run=dry_run,
    )

    try:
        result = run_pipeline(
            ctx=ctx,
            state=state,
            steps=steps,
            start_at=start_at,
            stop_after=stop_after,
            resume=resume,
            force=force,
        )
        state = result.state
        summary = state.setdefault("execution", {}).setdefault("summary", {})
        summary["ran_steps"] = result.ran_steps
        summary["skipped_steps"] = result.skipped_steps
        summary["exit_code"] = result.exit_code
        if result.failed:
            logger.error("Installation aborted at %s (exit %d)", result.failed.step_id, result.exit_code)
        return result
    except Exception as e:
        logger.exception("Installer failed")
        record_error(state, (state.get("execution") or {}).get("current_step"), e)
        raise
    finally:
        save_state_or_fallback(state_path, state)


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="realsense-installer",
        description="Build and install the Intel RealSense SDK (run with sudo).",
    )
    p.add_argument("--config", default=None, help="YAML file overriding installer defaults")
    p.add_argument("--state", default=DEFAULT_STATE_PATH, help="Path to installer state (json|yaml)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to installer log")
    p.add_argument("--start-at", default=None, help="Start at step_id (e.g. 60_build_sdk)")
    p.add_argument("--stop-after", default=None, help="Stop after step_id")
    p.add_argument("--resume", action="store_true", help="Skip steps completed by a previous run")
    p.add_argument("--force", action="store_true", help="With --resume, re-run completed steps anyway")
    p.add_argument("--dry-run", action="store_true", help="Log commands without executing them")
    p.add_argument("--list-steps", action="store_true", help="Print step ids and exit")

    args = p.parse_args(argv)

    if args.list_steps:
        for step in build_steps():
            print(step.step_id)
        return 0

    try:
        result = run(
            config_path=args.config,
            state_path=args.state,
            log_path=args.log,
            start_at=args.start_at,
            stop_after=args.stop_after,
            resume=bool(args.resume),
            force=bool(args.force),
            dry_run=bool(args.dry_run),
        )
    except PrivilegeError as e:
        logger.error("%s", e)
        return e.exit_code
    except UsageError as e:
        p.error(str(e))
    return result.exit_code
