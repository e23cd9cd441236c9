#!/usr/bin/env python3
"""SceneCtl - exceptions above the codec layer."""

from __future__ import annotations

from scenectl_codec.exceptions import (
    CodecError as CodecError,
    InvalidNumericInput as InvalidNumericInput,
    MalformedModeString as MalformedModeString,
    ProfileInvalid as ProfileInvalid,
    SceneCtlException as SceneCtlException,
    ScreenAddressInvalid as ScreenAddressInvalid,
    UnresolvedAssociationDevice as UnresolvedAssociationDevice,
)


class ConfigurationError(SceneCtlException):
    """A failure in the upper layer (association lists, screens, scenes)."""


########################################################################################
# Errors when editing the direct associations of a button


class DestructiveTransition(ConfigurationError):
    """The edit would discard configured associations (it needs confirmation)."""


class TransitionDeclined(DestructiveTransition):
    """The user declined a destructive transition (nothing was changed)."""


class AssociationLimitReached(ConfigurationError):
    """The button already has as many associations as the controller allows."""

    HINT = "remove an association first"


########################################################################################
# Errors when configuring screens


class InvalidTimeout(ConfigurationError):
    """The screen timeout is not a number of seconds within range."""
