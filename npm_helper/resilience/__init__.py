"""
Resilience package - request pacing and deadlines.

- PacedGate: FIFO admission gate enforcing a minimum spacing between
  registry requests
- DeadlineWrapper: races an awaitable against a wall-clock budget
"""

from npm_helper.resilience.deadline import DeadlineWrapper
from npm_helper.resilience.pacing import PacedGate

__all__ = [
    "DeadlineWrapper",
    "PacedGate",
]
