"""
Best-effort side effects

A best-effort step runs an awaitable, captures its outcome in a StepResult
and logs failures. Errors never propagate to the caller of the enclosing
operation; callers inspect the result to decide whether dependent steps run.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class StepResult:
    """Outcome of a best-effort step"""

    name: str
    ok: bool
    value: Any = None
    error: Optional[str] = None
    skipped: bool = False

    @classmethod
    def skip(cls, name: str, reason: str) -> "StepResult":
        return cls(name=name, ok=False, error=reason, skipped=True)


class BestEffortStep:
    """Wraps one side effect whose failure must not fail the request"""

    def __init__(self, name: str, log: Optional[logging.Logger] = None):
        self.name = name
        self.log = log or logger

    async def run(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> StepResult:
        try:
            value = await func(*args, **kwargs)
        except Exception as e:
            self.log.error(f"❌ {self.name} failed: {e}")
            self.log.debug("Best-effort step traceback:", exc_info=True)
            return StepResult(name=self.name, ok=False, error=str(e) or type(e).__name__)

        self.log.info(f"✅ {self.name} completed")
        return StepResult(name=self.name, ok=True, value=value)
