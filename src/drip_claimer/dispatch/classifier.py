"""Outcome classifier - turns drip responses into success/duplicate/failure."""

from __future__ import annotations

from typing import Any

from drip_claimer.errors import SubmissionFailure
from drip_claimer.models.records import SubmissionOutcome

DUPLICATE_MARKER = "already"
TX_FIELD = "nftTransaction"


class SubstringClassifier:
    """Classifies by searching the error text for a marker substring.

    The service reports re-submitted permits with wording like
    "already minted"; anything carrying the marker (case-insensitive) is a
    duplicate rather than a failure.
    """

    def __init__(self, marker: str = DUPLICATE_MARKER, tx_field: str = TX_FIELD) -> None:
        self._marker = marker.lower()
        self._tx_field = tx_field

    def classify(self, result: dict[str, Any] | BaseException) -> SubmissionOutcome:
        if not isinstance(result, BaseException):
            tx_ref = result.get(self._tx_field) if isinstance(result, dict) else None
            return SubmissionOutcome.success(str(tx_ref) if tx_ref is not None else None)

        if isinstance(result, SubmissionFailure):
            text = result.serialized()
        else:
            text = str(result) or type(result).__name__

        if self._marker in text.lower():
            return SubmissionOutcome.duplicate()
        return SubmissionOutcome.failed(text)


_DEFAULT = SubstringClassifier()


def classify(result: dict[str, Any] | BaseException) -> SubmissionOutcome:
    """Classify with the default substring rule."""
    return _DEFAULT.classify(result)

