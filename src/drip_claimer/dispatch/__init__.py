"""Permit submission: bounded-concurrency dispatch and outcome classification."""

from drip_claimer.dispatch.classifier import SubstringClassifier, classify
from drip_claimer.dispatch.dispatcher import SubmissionTask, dispatch

__all__ = ["SubstringClassifier", "classify", "SubmissionTask", "dispatch"]
