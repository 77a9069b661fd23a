from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

FALLBACK_STATE_STEM = "realsense-installer-state"


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


def _yaml():
    try:
        import yaml  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError(
            "YAML state requested but PyYAML is not available. "
            "Use JSON state or install PyYAML."
        ) from e
    return yaml


def load_state(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}

    if _detect_format(p) in {"yaml", "yml"}:
        data = _yaml().safe_load(p.read_text(encoding="utf-8")) or {}
    else:
        data = json.loads(p.read_text(encoding="utf-8"))

    if not isinstance(data, dict):
        raise ValueError(f"State file must be an object/dict, got {type(data)}")

    return data


def save_state(path: str, state: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if _detect_format(p) in {"yaml", "yml"}:
        p.write_text(_yaml().safe_dump(state, sort_keys=False) + "\n", encoding="utf-8")
    else:
        p.write_text(json.dumps(state, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def save_state_or_fallback(path: str, state: Dict[str, Any]) -> str:
    """Save state, falling back to the working directory if path is not writable.

    Returns the path actually written.
    """

    try:
        save_state(path, state)
        return path
    except OSError as e:
        fallback = str(Path.cwd() / (FALLBACK_STATE_STEM + (Path(path).suffix or ".json")))
        logger.warning("Cannot write state to %s (%s); saving to %s instead", path, e, fallback)
        save_state(fallback, state)
        return fallback


def ensure_defaults(state: Dict[str, Any]) -> Dict[str, Any]:
    """Fill required keys with defaults (without overriding recorded values)."""

    state.setdefault("version", 1)
    state.setdefault("hardware", {})
    state.setdefault("execution", {})

    exe = state["execution"]
    exe.setdefault("current_step", None)
    exe.setdefault("completed_steps", [])
    exe.setdefault("decisions", {})
    exe.setdefault("warnings", [])
    exe.setdefault("errors", [])

    return state


def reset_run(state: Dict[str, Any]) -> Dict[str, Any]:
    """Forget per-run progress so every step runs again."""

    exe = state.setdefault("execution", {})
    exe["completed_steps"] = []
    exe["warnings"] = []
    exe["errors"] = []
    return state


def mark_step_completed(state: Dict[str, Any], step_id: str) -> None:
    exe = state.setdefault("execution", {})
    completed = exe.setdefault("completed_steps", [])
    if step_id not in completed:
        completed.append(step_id)


def is_step_completed(state: Dict[str, Any], step_id: str) -> bool:
    exe = state.get("execution") or {}
    completed = exe.get("completed_steps") or []
    return step_id in completed


def record_decision(state: Dict[str, Any], key: str, value: Any) -> None:
    state.setdefault("execution", {}).setdefault("decisions", {})[key] = value


def record_warning(state: Dict[str, Any], warning: Dict[str, Any]) -> None:
    state.setdefault("execution", {}).setdefault("warnings", []).append(warning)


def record_error(state: Dict[str, Any], step_id: str, error: BaseException) -> None:
    entry: Dict[str, Any] = {"step": step_id, "error": str(error), "type": type(error).__name__}
    rc = getattr(error, "returncode", None)
    if rc is not None:
        entry["returncode"] = rc
    state.setdefault("execution", {}).setdefault("errors", []).append(entry)
