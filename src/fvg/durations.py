"""Clip duration quantization for the text-to-video service."""

SUPPORTED_DURATIONS: tuple[int, ...] = (4, 6, 8)


def quantize(seconds: float) -> int:
    """Map a requested clip length onto a supported duration.

    Returns the smallest supported duration that is at least ``seconds``,
    clamping to the longest one when the request exceeds it.
    """
    for duration in SUPPORTED_DURATIONS:
        if seconds <= duration:
            return duration
    return SUPPORTED_DURATIONS[-1]


def describe_supported_durations() -> str:
    """Return a human-readable list such as ``"4s, 6s, 8s"``."""
    return ", ".join(f"{d}s" for d in SUPPORTED_DURATIONS)
