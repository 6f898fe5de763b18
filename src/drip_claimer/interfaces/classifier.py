"""OutcomeClassifier protocol - maps a submission result to an outcome."""

from __future__ import annotations

from typing import Any, Protocol

from drip_claimer.models.records import SubmissionOutcome


class OutcomeClassifier(Protocol):
    def classify(self, result: dict[str, Any] | BaseException) -> SubmissionOutcome:
        """Classify a success body or a raised error."""
        ...
