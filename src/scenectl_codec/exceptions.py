#!/usr/bin/env python3
"""SceneCtl - exceptions within the codec layer (profiles, mode strings, etc.)."""

from __future__ import annotations


class _SceneCtlBaseException(Exception):
    """Base class for all scenectl_codec exceptions."""

    pass


class SceneCtlException(_SceneCtlBaseException):
    """Base class for all scenectl_codec exceptions."""

    HINT: None | str = None

    def __init__(self, *args: object):
        super().__init__(*args)
        self.message: str | None = args[0] if args else None  # type: ignore[assignment]

    def __str__(self) -> str:
        if self.message and self.HINT:
            return f"{self.message} (hint: {self.HINT})"
        if self.message:
            return self.message
        if self.HINT:
            return f"Hint: {self.HINT}"
        return ""


class CodecError(SceneCtlException):
    """A failure in the lower layer (profile, mode string, capability string)."""


########################################################################################
# Errors when decoding/encoding mode strings


class MalformedModeString(CodecError):
    """The mode string cannot be parsed (it will be replaced by the default mode)."""


class UnresolvedAssociationDevice(CodecError):
    """The mode string refers to a device that no longer exists."""


class InvalidNumericInput(CodecError):
    """A level or dimming duration is not an integer within its range."""

    def __init__(self, *args: object, field: str | None = None):
        super().__init__(*args)
        self.field = field


########################################################################################
# Errors in the static configuration (profiles, screens)


class ScreenAddressInvalid(CodecError):
    """The screen address is corrupt or not valid for the profile."""


class ProfileInvalid(CodecError):
    """The controller profile table is not internally consistent."""

    HINT = "check the profile against SCH_PROFILE"
