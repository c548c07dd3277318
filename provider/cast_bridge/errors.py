"""Exceptions raised by the Cast Bridge."""

from __future__ import annotations


class CastBridgeError(Exception):
    """Base class for Cast Bridge errors."""


class ReceiverError(CastBridgeError):
    """A receiver channel call failed (timeout, malformed response, reset)."""


class InvalidRequestError(ReceiverError):
    """The receiver rejected a request that is invalid in its current state."""


class ProgressReportError(CastBridgeError):
    """The progress-tracking service did not accept a report."""
