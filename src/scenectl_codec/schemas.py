#!/usr/bin/env python3
"""SceneCtl - a scene-controller configuration engine.

Schema processor for the codec (lower) layer.
"""

from __future__ import annotations

import logging
from typing import Any, Final

import voluptuous as vol

from . import exceptions as exc
from .const import (
    MAX_DIMMING_DURATION,
    MAX_LEVEL,
    MAX_TIMEOUT_SECS,
    MIN_TIMEOUT_SECS,
    SCREEN_ID_REGEX,
    InteractionKind,
    Language,
    ScreenType,
)

_LOGGER = logging.getLogger(__name__)


#
# 1/3: Screen ids & user input
SCH_SCREEN_ID = vol.All(str, vol.Match(SCREEN_ID_REGEX.ANY))

_SCH_DIGITS = vol.All(str, vol.Match(r"^\s*[0-9]+\s*$"))

SCH_LEVEL = vol.All(
    vol.Any(int, _SCH_DIGITS), vol.Coerce(int), vol.Range(min=0, max=MAX_LEVEL)
)
SCH_DURATION = vol.All(
    vol.Any(int, _SCH_DIGITS),
    vol.Coerce(int),
    vol.Range(min=0, max=MAX_DIMMING_DURATION),
)
SCH_TIMEOUT_SECONDS = vol.All(
    vol.Coerce(int), vol.Range(min=MIN_TIMEOUT_SECS, max=MAX_TIMEOUT_SECS)
)

SZ_LEVEL: Final = "level"
SZ_DIMMING_DURATION: Final = "dimming_duration"

_NUMERIC_INPUT = {
    SZ_LEVEL: (SCH_LEVEL, f"Level must be a number between 0 and {MAX_LEVEL}"),
    SZ_DIMMING_DURATION: (
        SCH_DURATION,
        f"Dimming duration must be a number between 0 and {MAX_DIMMING_DURATION}",
    ),
}


def parse_numeric_input(field: str, value: int | str | None) -> int | None:
    """Return the validated value of a level/dimming duration field.

    An empty field (None, or a blank string) is the absence of a value. Anything
    else must be an integer within the field's range: it is never coerced.
    """

    if value is None or (isinstance(value, str) and not value.strip()):
        return None

    schema, message = _NUMERIC_INPUT[field]
    try:
        return schema(value)  # type: ignore[no-any-return]
    except vol.Invalid as err:
        raise exc.InvalidNumericInput(message, field=field) from err


#
# 2/3: Profile rules (firmware-dependent screen & language support)
SZ_EXCLUDE: Final = "exclude"
SZ_LANGUAGES: Final = "languages"
SZ_MAX_FIRMWARE: Final = "max_firmware"
SZ_PAGES: Final = "pages"
SZ_SCREEN_TYPES: Final = "screen_types"

_SCH_PAGE = vol.All(int, vol.Range(min=1))
SCH_PAGE_RANGE = vol.ExactSequence([_SCH_PAGE, vol.Any(None, _SCH_PAGE)])

SCH_SCREEN_RULE = vol.Schema(
    {
        vol.Optional(SZ_MAX_FIRMWARE, default=None): vol.Any(None, int),
        vol.Optional(SZ_PAGES, default=[[1, None]]): [SCH_PAGE_RANGE],
        vol.Optional(SZ_EXCLUDE, default=[]): [_SCH_PAGE],
    },
    extra=vol.PREVENT_EXTRA,
)

SCH_LANGUAGE_RULE = vol.Schema(
    {
        vol.Required(SZ_SCREEN_TYPES): [vol.Coerce(ScreenType)],
        vol.Optional(SZ_MAX_FIRMWARE, default=None): vol.Any(None, int),
        vol.Optional(SZ_PAGES, default=[[1, None]]): [SCH_PAGE_RANGE],
        vol.Required(SZ_LANGUAGES): vol.All(
            [vol.Coerce(Language)], vol.Length(min=1)
        ),
    },
    extra=vol.PREVENT_EXTRA,
)


#
# 3/3: Controller profiles
SZ_BUTTON_COUNT: Final = "button_count"
SZ_COUNT: Final = "count"
SZ_CUSTOM_MODES: Final = "custom_modes"
SZ_DEFAULT_LCD_VERSION: Final = "default_lcd_version"
SZ_DEFAULT_MODE_CODE: Final = "default_mode_code"
SZ_DEFAULT_SCREEN: Final = "default_screen"
SZ_HAS_COOPER_CONFIGURATION: Final = "has_cooper_configuration"
SZ_HAS_OFF_SCENES: Final = "has_off_scenes"
SZ_HAS_PRESET_LANGUAGES: Final = "has_preset_languages"
SZ_HAS_SCREEN: Final = "has_screen"
SZ_HAS_THERMOSTAT_CONTROL: Final = "has_thermostat_control"
SZ_ID: Final = "id"
SZ_LANGUAGE_RULES: Final = "language_rules"
SZ_MAX_DIRECT_ASSOCIATIONS: Final = "max_direct_associations"
SZ_MAX_SCROLL_LINES: Final = "max_scroll_lines"
SZ_NAME: Final = "name"
SZ_NUM_TEMPERATURE_SCREENS: Final = "num_temperature_screens"
SZ_PREFIX: Final = "prefix"
SZ_PRESET_SCREENS: Final = "preset_screens"
SZ_SCENE_BASES: Final = "scene_bases"
SZ_SCREEN_RULES: Final = "screen_rules"

SCH_SCREEN_TYPE = vol.Schema(
    {
        vol.Required(SZ_PREFIX): vol.Coerce(ScreenType),
        vol.Required(SZ_NAME): str,
        vol.Required(SZ_COUNT): vol.All(int, vol.Range(min=1)),
    },
    extra=vol.PREVENT_EXTRA,
)

SCH_PROFILE = vol.Schema(
    {
        vol.Required(SZ_ID): vol.All(str, vol.Upper),
        vol.Required(SZ_NAME): str,
        vol.Required(SZ_BUTTON_COUNT): vol.All(int, vol.Range(min=1)),
        vol.Required(SZ_MAX_SCROLL_LINES): vol.All(int, vol.Range(min=1)),
        vol.Required(SZ_MAX_DIRECT_ASSOCIATIONS): vol.All(int, vol.Range(min=0)),
        vol.Optional(SZ_HAS_OFF_SCENES, default=False): bool,
        vol.Optional(SZ_HAS_COOPER_CONFIGURATION, default=False): bool,
        vol.Optional(SZ_HAS_SCREEN, default=True): bool,
        vol.Optional(SZ_HAS_PRESET_LANGUAGES, default=False): bool,
        vol.Optional(SZ_HAS_THERMOSTAT_CONTROL, default=False): bool,
        vol.Optional(SZ_DEFAULT_LCD_VERSION, default=1): vol.All(
            int, vol.Range(min=0)
        ),
        vol.Required(SZ_DEFAULT_SCREEN): SCH_SCREEN_ID,
        vol.Optional(SZ_DEFAULT_MODE_CODE, default=InteractionKind.MOMENTARY): vol.All(
            str, vol.Length(min=1)
        ),
        vol.Optional(SZ_NUM_TEMPERATURE_SCREENS, default=0): vol.All(
            int, vol.Range(min=0)
        ),
        vol.Required(SZ_SCREEN_TYPES): vol.All([SCH_SCREEN_TYPE], vol.Length(min=1)),
        vol.Required(SZ_CUSTOM_MODES): vol.All(
            [vol.All(vol.Coerce(str), vol.Coerce(InteractionKind))],  # YAML: 3 not "3"
            vol.Length(min=1),
        ),
        vol.Required(SZ_SCENE_BASES): {
            vol.Coerce(ScreenType): vol.All(int, vol.Range(min=0))
        },
        vol.Optional(SZ_SCREEN_RULES, default={}): {
            vol.Coerce(ScreenType): [SCH_SCREEN_RULE]
        },
        vol.Optional(SZ_LANGUAGE_RULES, default=[]): [SCH_LANGUAGE_RULE],
        vol.Optional(SZ_PRESET_SCREENS, default={}): {
            _SCH_PAGE: vol.All([str], vol.Length(min=1))
        },
    },
    extra=vol.PREVENT_EXTRA,
)


def validate_profile(config: dict[str, Any]) -> dict[str, Any]:
    """Return a validated profile table, raising ProfileInvalid if it is not."""

    try:
        return SCH_PROFILE(config)  # type: ignore[no-any-return]
    except vol.Invalid as err:
        raise exc.ProfileInvalid(
            f"Invalid profile: {config.get(SZ_ID, '<no id>')}: {err}"
        ) from err
