"""Exception types raised by silencecut.

Every error derives from SilenceCutError and from the closest builtin, so
callers can catch either the package base class or e.g. IndexError.
"""


class SilenceCutError(Exception):
    """Base class for all silencecut errors."""


class EmptyInputError(SilenceCutError, ValueError):
    """No samples to analyze."""


class SampleRateTooLowError(SilenceCutError, ValueError):
    """Sample rate too low to fill a single 10 ms analysis window."""


class DecodeError(SilenceCutError, RuntimeError):
    """Audio could not be extracted or read from a media file."""


class ProbeError(SilenceCutError, RuntimeError):
    """Media duration could not be determined."""


class IndexOutOfBoundsError(SilenceCutError, IndexError):
    """Segment index does not refer to an existing clip."""


class NoNextSegmentError(SilenceCutError, IndexError):
    """Operation needs a clip after the given index and there is none."""


class BoundaryOutOfRangeError(SilenceCutError, ValueError):
    """New boundary would collapse or leave the two adjacent clips."""


class BucketTooSmallError(SilenceCutError, ValueError):
    """Waveform bucket holds zero samples at this sample rate."""


class NoTimelineLoadedError(SilenceCutError, RuntimeError):
    """Session command issued before any video was processed."""


class ExportError(SilenceCutError, RuntimeError):
    """Rendering the edited video failed."""


class SegmentNotFoundError(SilenceCutError, LookupError):
    """No clip covers the requested time."""
