from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


class StepStatus(str, enum.Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FATAL = "fatal"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class GroupOutcome:
    """What happened to one package group.

    already_installed and to_install partition the requested list.
    """

    label: str
    total: int
    already_installed: Tuple[str, ...] = ()
    to_install: Tuple[str, ...] = ()
    confirmed: int = 0
    returncode: int = 0
    duration_s: float = 0.0
    ok: bool = True
    reason: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "total": self.total,
            "already_installed": list(self.already_installed),
            "to_install": list(self.to_install),
            "confirmed": self.confirmed,
            "returncode": self.returncode,
            "duration_s": round(self.duration_s, 3),
            "ok": self.ok,
            "reason": self.reason,
        }


@dataclass
class StepResult:
    status: StepStatus
    message: str = ""
    outcomes: List[GroupOutcome] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def skipped(cls, message: str) -> "StepResult":
        return cls(status=StepStatus.SKIPPED, message=message)

    @classmethod
    def fatal(cls, message: str) -> "StepResult":
        return cls(status=StepStatus.FATAL, message=message)

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def finish(self, message: str) -> "StepResult":
        """Settle SUCCESS vs PARTIAL from the collected warnings."""
        if self.status == StepStatus.SUCCESS and self.warnings:
            self.status = StepStatus.PARTIAL
        self.message = message
        return self

    def as_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "message": self.message,
            "outcomes": [o.as_dict() for o in self.outcomes],
            "warnings": list(self.warnings),
        }
