"""
Errors surfaced by the ranking engine.
"""
from typing import Sequence


class RecommendationsUnavailableError(RuntimeError):
    """Raised when every upstream fetch of an invocation failed."""

    def __init__(self, causes: Sequence[BaseException]):
        self.causes = list(causes)
        first = self.causes[0] if self.causes else None
        super().__init__(
            f"Recommendations unavailable: all {len(self.causes)} sources failed"
            + (f" (first error: {first})" if first is not None else "")
        )
