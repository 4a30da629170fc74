"""Outcome of a single scenario run"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional


class Outcome(Enum):
    PASSED = "passed"
    FAILED = "failed"
    ERRORED = "errored"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ResultStatus:
    outcome: Outcome
    message: Optional[str] = None
    elapsed_seconds: Optional[float] = None
    steps_passed: Optional[int] = None
    steps_total: Optional[int] = None
    scenarios_passed: Optional[int] = None
    scenarios_total: Optional[int] = None

    @classmethod
    def errored(cls, message: str, **kwargs) -> 'ResultStatus':
        return cls(Outcome.ERRORED, message=message, **kwargs)

    @classmethod
    def skipped(cls, message: Optional[str] = None) -> 'ResultStatus':
        return cls(Outcome.SKIPPED, message=message)

    @property
    def is_problem(self) -> bool:
        return self.outcome in (Outcome.FAILED, Outcome.ERRORED)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['outcome'] = self.outcome.value
        return data
