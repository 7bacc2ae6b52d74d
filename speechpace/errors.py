"""SPEECHPACE error types.

Every failure aborts the current pipeline run; none of them is retried.
"""

from __future__ import annotations


class SpeechPaceError(Exception):
    """Base class for all pipeline failures."""


class InvalidInputCount(SpeechPaceError):
    """Merge requested with fewer than two inputs."""

    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"At least two files are required to merge (got {count}).")


class NoSpeechDetected(SpeechPaceError):
    """Segmentation found nothing above the silence threshold."""

    def __init__(self) -> None:
        super().__init__(
            "Could not detect any speech. "
            "Try lowering the silence threshold."
        )


class EmptyResynthesis(SpeechPaceError):
    """Resynthesis would produce a zero-length buffer."""


class IncompatibleBuffers(SpeechPaceError):
    """A merge input does not match the first input."""

    property_name = "property"
    unit = ""

    def __init__(self, expected: int, actual: int, index: int) -> None:
        self.expected = expected
        self.actual = actual
        self.index = index
        super().__init__(
            f"Mismatched {self.property_name}: input {index + 1} has "
            f"{actual}{self.unit}, expected {expected}{self.unit}."
        )


class SampleRateMismatch(IncompatibleBuffers):
    property_name = "sample rates"
    unit = " Hz"


class ChannelCountMismatch(IncompatibleBuffers):
    property_name = "channel counts"
    unit = " channel(s)"


class DecodeFailure(SpeechPaceError):
    """The decoder could not turn a source into samples."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to decode {source}: {reason}")


class EncoderUnavailable(SpeechPaceError):
    """No block encoder could be constructed."""

    def __init__(self, capability: str, hint: str = "") -> None:
        self.capability = capability
        msg = f"Encoder capability '{capability}' is not available."
        if hint:
            msg = f"{msg} {hint}"
        super().__init__(msg)


class Cancelled(SpeechPaceError):
    """The caller cancelled the run at a suspension point."""
