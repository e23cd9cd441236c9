#!/usr/bin/env python3
"""SceneCtl - a scene-controller configuration engine.

Screen addresses, and the formula that maps a button to its scene number.
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from . import exceptions as exc
from .const import (
    BUTTON_GROUP_BASE,
    BUTTON_GROUP_STEP,
    SCREEN_ID_REGEX,
    STATE_BUTTON_OFFSET,
    ScreenType,
)

if TYPE_CHECKING:
    from .profiles import ControllerProfile


class ScreenAddress:
    """The screen Address class, e.g. 'C3' is custom screen 3."""

    __slots__ = ("type", "number")

    def __init__(self, screen_type: ScreenType | str, number: int) -> None:
        """Create an address from a screen type and a (1-based) screen number."""

        try:
            self.type = ScreenType(screen_type)
        except ValueError:
            raise exc.ScreenAddressInvalid(
                f"Invalid screen type: {screen_type!r}"
            ) from None

        if not isinstance(number, int) or number < 1:
            raise exc.ScreenAddressInvalid(f"Invalid screen number: {number!r}")
        self.number = number

    def __repr__(self) -> str:
        return f"ScreenAddress({self})"

    def __str__(self) -> str:
        return f"{self.type}{self.number}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ScreenAddress):
            return NotImplemented
        return (self.type, self.number) == (other.type, other.number)

    def __hash__(self) -> int:
        return hash((self.type, self.number))

    @staticmethod
    def is_valid_id(value: object) -> bool:
        """Return True if the value is a well-formed screen id (e.g. 'P41')."""
        return (
            isinstance(value, str)
            and bool(SCREEN_ID_REGEX.ANY.match(value))
            and value[0] in ScreenType._value2member_map_
        )

    @classmethod
    def from_str(cls, screen_id: str) -> ScreenAddress:
        """Parse (say) 'P41' into an address."""

        if not cls.is_valid_id(screen_id):
            raise exc.ScreenAddressInvalid(f"Invalid screen id: {screen_id!r}")
        return cls(screen_id[0], int(screen_id[1:]))

    def is_valid(self, profile: ControllerProfile, firmware: int | None = None) -> bool:
        """Return True if the profile has this screen, and the firmware supports it."""

        if not 1 <= self.number <= profile.screen_count(self.type):
            return False
        if firmware is None:
            firmware = profile.default_lcd_version
        return profile.screen_is_compatible(self.type, self.number, firmware)

    @property
    def has_custom_labels(self) -> bool:
        """Return True if the labels of this screen are set by the user.

        Temperature pages 1-3 are built in, later pages are custom.
        """
        return self.type == ScreenType.CUSTOM or (
            self.type == ScreenType.TEMPERATURE and self.number > 3
        )


@lru_cache(maxsize=256)
def id_to_screen(screen_id: str) -> ScreenAddress:
    """Factory method to cache & return a ScreenAddress from a screen id."""
    return ScreenAddress.from_str(screen_id)


def other_screen(profile: ControllerProfile, screen: ScreenAddress | str) -> str:
    """Return a sensible screen to switch (or time out) to from this one."""
    return "C2" if str(screen) == profile.default_screen else profile.default_screen


def button_group(profile: ControllerProfile, button: int) -> int:
    """Return the group of a button (non-zero only beyond the profile's count)."""
    return (button - 1) // profile.button_count


def scene_number(
    profile: ControllerProfile,
    screen: ScreenAddress | str,
    button: int,
    state: int = 1,
) -> int:
    """Return the scene number of a (screen, button, state) of a controller.

    This is the (only) correlation between a scene trigger's argument and the
    physical button, so it must remain exactly:
      base(type) + (num - 1) * count + (button - 1) % count
                 + (group ? 200 + group * 100 : 0) + (state - 1) * 1000
    """

    if isinstance(screen, str):
        screen = id_to_screen(screen)

    if button < 1:
        raise ValueError(f"Invalid button: {button} (must be 1 or more)")
    if state < 1:
        raise ValueError(f"Invalid state: {state} (must be 1 or more)")

    try:
        base = profile.scene_bases[screen.type]
    except KeyError:
        raise ValueError(
            f"Invalid screen: {screen} (profile {profile.id} has no scene base for it)"
        ) from None

    group = button_group(profile, button)

    return (
        base
        + (screen.number - 1) * profile.button_count
        + (button - 1) % profile.button_count
        + (BUTTON_GROUP_BASE + group * BUTTON_GROUP_STEP if group else 0)
        + (state - 1) * STATE_BUTTON_OFFSET
    )
