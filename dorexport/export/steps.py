from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from dorexport.core.logger import setup_logger

logger = setup_logger("dorexport.export.orchestrator")


@dataclass(frozen=True)
class PlanStep:
    name: str
    details: Dict[str, Any]


def record_step(steps: List[PlanStep], name: str, **details: Any) -> None:
    steps.append(PlanStep(name=name, details=details))
    logger.debug("Step %s: %s", name, details)


def log_plan_steps(identifier: str, steps: List[PlanStep]) -> None:
    if not steps:
        return
    summary = " -> ".join(step.name for step in steps)
    logger.info("Export steps for %s: %s", identifier, summary)
