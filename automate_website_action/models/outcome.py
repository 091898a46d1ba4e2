"""Aggregate outcome of a polling run."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal, TypeAlias

from automate_website_action.models.job import Job

Outcome: TypeAlias = Literal["success", "success_with_problems", "failure"]


@dataclass(frozen=True, kw_only=True)
class ExecutionReport:
    """Outcome of a run together with the jobs it was derived from."""

    outcome: Outcome
    jobs: Sequence[Job] = ()
    timed_out: bool = False
