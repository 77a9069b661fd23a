from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .config import InstallerConfig
from .errors import InstallerError
from .services import Services
from .state_store import is_step_completed, mark_step_completed, record_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallCtx:
    cfg: InstallerConfig
    services: Services
    dry_run: bool = False


class Step(Protocol):
    """A single ordered step."""

    step_id: str

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class StepResult:
    step_id: str
    ok: bool
    error: Optional[str] = None
    exit_code: int = 0


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    results: List[StepResult] = field(default_factory=list)
    ran_steps: List[str] = field(default_factory=list)
    skipped_steps: List[str] = field(default_factory=list)

    @property
    def failed(self) -> Optional[StepResult]:
        for r in self.results:
            if not r.ok:
                return r
        return None

    @property
    def ok(self) -> bool:
        return self.failed is None

    @property
    def exit_code(self) -> int:
        f = self.failed
        return f.exit_code if f else 0


def check_step_range(steps: Sequence[Step], start_at: Optional[str], stop_after: Optional[str]) -> None:
    """Raise ValueError unless start_at..stop_after names a non-empty run of known steps."""

    known = [s.step_id for s in steps]
    for opt in (start_at, stop_after):
        if opt is not None and opt not in known:
            raise ValueError(f"Unknown step_id {opt!r}; expected one of: {', '.join(known)}")
    if start_at is not None and stop_after is not None and known.index(stop_after) < known.index(start_at):
        raise ValueError(f"stop_after {stop_after!r} comes before start_at {start_at!r}")


def run_pipeline(
    *,
    ctx: InstallCtx,
    state: Dict[str, Any],
    steps: Sequence[Step],
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    resume: bool = False,
    force: bool = False,
) -> PipelineResult:
    """Run steps in order; halt on the first failing step (no rollback)."""

    check_step_range(steps, start_at, stop_after)

    results: List[StepResult] = []
    ran: List[str] = []
    skipped: List[str] = []

    started = start_at is None

    for step in steps:
        if not started:
            if step.step_id == start_at:
                started = True
            else:
                continue

        state.setdefault("execution", {})["current_step"] = step.step_id

        if resume and (not force) and is_step_completed(state, step.step_id):
            logger.info("Skipping step %s (already completed)", step.step_id)
            skipped.append(step.step_id)
        else:
            logger.info("Running step %s", step.step_id)
            try:
                state = step.run(ctx, state)
            except InstallerError as e:
                logger.error("Step %s failed: %s", step.step_id, e)
                record_error(state, step.step_id, e)
                results.append(StepResult(step_id=step.step_id, ok=False, error=str(e), exit_code=e.exit_code))
                ran.append(step.step_id)
                break
            mark_step_completed(state, step.step_id)
            results.append(StepResult(step_id=step.step_id, ok=True))
            ran.append(step.step_id)

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            break

    state.setdefault("execution", {})["current_step"] = None
    return PipelineResult(state=state, results=results, ran_steps=ran, skipped_steps=skipped)
