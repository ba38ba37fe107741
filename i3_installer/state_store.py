from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml

logger = logging.getLogger(__name__)

STATE_VERSION = 1
YAML_SUFFIXES = {".yaml", ".yml"}


def _is_yaml(path: Path) -> bool:
    # Anything that is not .yaml/.yml is stored as JSON.
    return path.suffix.lower() in YAML_SUFFIXES


def load_state(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}

    data: Any
    if _is_yaml(p):
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    else:
        data = json.loads(p.read_text(encoding="utf-8"))

    if not isinstance(data, dict):
        raise ValueError(f"State file must be an object/dict, got {type(data)}")

    return data


def save_state(path: str, state: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if _is_yaml(p):
        p.write_text(yaml.safe_dump(state, sort_keys=False), encoding="utf-8")
    else:
        p.write_text(json.dumps(state, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    logger.debug("State saved to %s", str(p))


def ensure_defaults(state: Dict[str, Any]) -> Dict[str, Any]:
    """Fill required keys with defaults (without overriding existing values)."""

    state.setdefault("version", STATE_VERSION)
    state.setdefault("options", {})
    state.setdefault("preferences", {})
    state.setdefault("hardware", {})
    state.setdefault("execution", {})

    exe = state["execution"]
    exe.setdefault("current_step", None)
    exe.setdefault("completed_steps", [])
    exe.setdefault("results", {})
    exe.setdefault("errors", [])

    return state


def _completed(state: Dict[str, Any]) -> List[str]:
    return state.setdefault("execution", {}).setdefault("completed_steps", [])


def mark_step_completed(state: Dict[str, Any], step_id: str) -> None:
    """Append step_id to execution.completed_steps, keeping run order."""

    done = _completed(state)
    if step_id not in done:
        done.append(step_id)


def is_step_completed(state: Dict[str, Any], step_id: str) -> bool:
    return step_id in (state.get("execution") or {}).get("completed_steps") or ()


def record_step_result(state: Dict[str, Any], step_id: str, result: Dict[str, Any]) -> None:
    state.setdefault("execution", {}).setdefault("results", {})[step_id] = result
