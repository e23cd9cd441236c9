#!/usr/bin/env python3
"""SceneCtl - a scene-controller configuration engine.

Schema processor for upper layer.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Final, TypedDict

import voluptuous as vol
import yaml

from scenectl_codec.const import ZWAVE_ROOT_DEVICE_ID
from scenectl_codec.profiles import PROFILES, ControllerProfile
from scenectl_codec.schemas import (  # noqa: F401
    SCH_DURATION,
    SCH_LEVEL,
    SCH_PROFILE,
    SCH_SCREEN_ID,
    SCH_TIMEOUT_SECONDS,
)

from . import exceptions as exc

_LOGGER = logging.getLogger(__name__)


class EditLogConfigT(TypedDict):
    file_name: str
    rotate_backups: int
    rotate_bytes: int | None


SZ_EDIT_LOG: Final = "edit_log"
SZ_FILE_NAME: Final = "file_name"
SZ_LCD_VERSION: Final = "lcd_version"
SZ_PROFILE: Final = "profile"
SZ_PROFILES: Final = "profiles"
SZ_ROTATE_BACKUPS: Final = "rotate_backups"
SZ_ROTATE_BYTES: Final = "rotate_bytes"
SZ_ZWAVE_ROOT_ID: Final = "zwave_root_id"


#
# 1/3: The edit log
def sch_edit_log_dict_factory(
    default_backups: int = 0,
) -> dict[vol.Optional, vol.Any]:
    """Return an edit log dict with a configurable default rotation policy."""

    SCH_EDIT_LOG_CONFIG = vol.Schema(
        {
            vol.Optional(SZ_ROTATE_BACKUPS, default=default_backups): vol.Any(
                None, int
            ),
            vol.Optional(SZ_ROTATE_BYTES, default=None): vol.Any(None, int),
        },
        extra=vol.PREVENT_EXTRA,
    )

    SCH_EDIT_LOG_NAME = str

    def NormaliseEditLog(rotate_backups: int = 0) -> Callable[..., Any]:
        def normalise_edit_log(node_value: str | EditLogConfigT) -> EditLogConfigT:
            if isinstance(node_value, str):
                return {
                    SZ_FILE_NAME: node_value,  # type: ignore[misc]
                    SZ_ROTATE_BACKUPS: rotate_backups,
                    SZ_ROTATE_BYTES: None,
                }
            return node_value

        return normalise_edit_log

    return {  # SCH_EDIT_LOG_DICT
        vol.Optional(SZ_EDIT_LOG, default=None): vol.Any(
            None,
            vol.All(
                SCH_EDIT_LOG_NAME,
                NormaliseEditLog(rotate_backups=default_backups),
            ),
            SCH_EDIT_LOG_CONFIG.extend({vol.Required(SZ_FILE_NAME): SCH_EDIT_LOG_NAME}),
        )
    }


#
# 2/3: Profiles
def _profile_by_id(value: str) -> ControllerProfile:
    try:
        return PROFILES[value.upper()]
    except KeyError:
        raise vol.Invalid(
            f"unknown profile: {value} (known: {', '.join(PROFILES)})"
        ) from None


def _profile_from_dict(value: dict[str, Any]) -> ControllerProfile:
    try:
        return ControllerProfile.from_dict(value)
    except exc.ProfileInvalid as err:
        raise vol.Invalid(str(err)) from err


SCH_PROFILE_REF = vol.Any(
    ControllerProfile,
    vol.All(str, _profile_by_id),
    vol.All(dict, _profile_from_dict),
    msg="expected the id of a built-in profile, or a profile table",
)


#
# 3/3: The controller configuration
SCH_CONFIG = vol.Schema(
    {
        vol.Required(SZ_PROFILE): SCH_PROFILE_REF,
        vol.Optional(SZ_ZWAVE_ROOT_ID, default=ZWAVE_ROOT_DEVICE_ID): vol.All(
            int, vol.Range(min=1)
        ),
        vol.Optional(SZ_LCD_VERSION, default=None): vol.Any(
            None, vol.All(int, vol.Range(min=0))
        ),
    },
    extra=vol.PREVENT_EXTRA,
).extend(sch_edit_log_dict_factory(default_backups=0))


def load_config(config: dict[str, Any]) -> dict[str, Any]:
    """Return a validated controller configuration (will raise ConfigurationError)."""

    try:
        return SCH_CONFIG(config)  # type: ignore[no-any-return]
    except vol.Invalid as err:
        raise exc.ConfigurationError(f"Invalid configuration: {err}") from err


def load_profiles(yaml_text: str) -> dict[str, ControllerProfile]:
    """Return the profiles of a YAML document (will raise ProfileInvalid).

    The document is either a list of profile tables, or has them under 'profiles'.
    """

    try:
        data = yaml.safe_load(yaml_text)
    except yaml.YAMLError as err:
        raise exc.ProfileInvalid(f"Invalid YAML: {err}") from err

    if isinstance(data, dict) and SZ_PROFILES in data:
        data = data[SZ_PROFILES]
    if data is None:
        return {}
    if not isinstance(data, list):
        raise exc.ProfileInvalid(
            f"Expected a list of profiles, not: {type(data).__name__}"
        )

    result = {}
    for table in data:
        if not isinstance(table, dict):
            raise exc.ProfileInvalid(f"Expected a profile table, not: {table!r}")
        profile = ControllerProfile.from_dict(table)
        if profile.id in result:
            raise exc.ProfileInvalid(f"Duplicate profile: {profile.id}")
        result[profile.id] = profile
    return result
