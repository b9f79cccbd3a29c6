from __future__ import annotations


class HudSignalError(Exception):
    pass


class OutOfBounds(HudSignalError, ValueError):
    """ROI lies partially or fully outside the frame."""


class SizeMismatch(HudSignalError, ValueError):
    """Pairwise pixel operation on buffers of different shape."""


class TemplateTooLarge(HudSignalError, ValueError):
    """Sliding-window template does not fit inside the target."""


class DecodeFailed(HudSignalError, RuntimeError):
    """The external frame decoder failed."""


class CalibrationError(HudSignalError, RuntimeError):
    pass


class RunCancelled(HudSignalError, RuntimeError):
    pass
