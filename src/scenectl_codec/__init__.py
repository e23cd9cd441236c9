#!/usr/bin/env python3
"""SceneCtl - a scene-controller configuration engine.

The codec layer: profiles, screen & scene addressing, mode strings and device
capabilities. Nothing here does any I/O.
"""

from __future__ import annotations

from .address import ScreenAddress, id_to_screen, other_screen, scene_number
from .capabilities import (
    CapabilityRecord,
    CapabilitySource,
    classify,
    is_zwave_device,
    parse_capabilities,
)
from .const import (
    SID_SCENE_CONTROLLER,
    SID_ZWAVE_DEVICE,
    Align,
    Font,
    InteractionKind,
    Language,
    ScreenType,
)
from .logger import EDIT_LOGGER, set_edit_logging
from .mode import Association, ModeDescriptor, decode, encode, normalise
from .profiles import (
    COOPER_RFWC5,
    EVOLVE_LCD1,
    NEXIA_ONE_TOUCH,
    PROFILES,
    ControllerProfile,
    get_profile,
)
from .schemas import parse_numeric_input
from .version import VERSION

__all__ = [
    "VERSION",
    #
    "SID_SCENE_CONTROLLER",
    "SID_ZWAVE_DEVICE",
    #
    "Align",
    "Font",
    "InteractionKind",
    "Language",
    "ScreenType",
    #
    "COOPER_RFWC5",
    "EVOLVE_LCD1",
    "NEXIA_ONE_TOUCH",
    "PROFILES",
    "ControllerProfile",
    "get_profile",
    #
    "ScreenAddress",
    "id_to_screen",
    "other_screen",
    "scene_number",
    #
    "Association",
    "ModeDescriptor",
    "decode",
    "encode",
    "normalise",
    "parse_numeric_input",
    #
    "CapabilityRecord",
    "CapabilitySource",
    "classify",
    "is_zwave_device",
    "parse_capabilities",
    #
    "EDIT_LOGGER",
    "set_edit_logging",
]
