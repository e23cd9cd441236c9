#!/usr/bin/env python3
"""SceneCtl - a scene-controller configuration engine."""

from __future__ import annotations

import re
from enum import EnumCheck, IntEnum, StrEnum, verify
from types import MappingProxyType, SimpleNamespace
from typing import Final

__dev_mode__ = False  # NOTE: this is const.py
DEV_MODE = __dev_mode__

# the service ids of the host's device state
SID_SCENE_CONTROLLER: Final = "urn:gengen_mcv-org:serviceId:SceneController1"
SID_ZWAVE_DEVICE: Final = "urn:micasaverde-com:serviceId:ZWaveDevice1"

ZWAVE_ROOT_DEVICE_ID: Final[int] = 1  # the host's Z-Wave network device
ZWAVE_MAX_PARENT_DEPTH: Final[int] = 2

# sentinels & ranges of the mode string's association fields
NO_VALUE: Final[int] = 255
MAX_LEVEL: Final[int] = 99
MAX_DIMMING_DURATION: Final[int] = 254
DEFAULT_LEVEL: Final[int] = 99  # when the level checkbox is ticked
DEFAULT_DIMMING_DURATION: Final[int] = 0  # when the duration checkbox is ticked

STATE_BUTTON_OFFSET: Final[int] = 1000  # per N-state virtual button
BUTTON_GROUP_BASE: Final[int] = 200
BUTTON_GROUP_STEP: Final[int] = 100

MIN_TIMEOUT_SECS: Final[int] = 5
MAX_TIMEOUT_SECS: Final[int] = 3600
DEFAULT_TIMEOUT_SECS: Final[int] = 30

# device state variables
SZ_ALIGN: Final = "Align"
SZ_CAPABILITIES: Final = "Capabilities"
SZ_CURRENT_SCREEN: Final = "CurrentScreen"
SZ_FONT: Final = "Font"
SZ_LABEL: Final = "Label"
SZ_MODE: Final = "Mode"
SZ_NUM_LINES: Final = "NumLines"
SZ_PEER_ID: Final = "PeerID"
SZ_PRESET_LANGUAGE: Final = "PresetLanguage"
SZ_TEMPERATURE_DEVICE: Final = "TemperatureDevice"
SZ_TIMEOUT_ENABLE: Final = "TimeoutEnable"
SZ_TIMEOUT_SCREEN: Final = "TimeoutScreen"
SZ_TIMEOUT_SECONDS: Final = "TimeoutSeconds"
SZ_VERSION_INFO: Final = "VersionInfo"

# remote actions
SZ_SET_NUM_LINES: Final = "SetNumLines"
SZ_SET_PRESET_LANGUAGE: Final = "SetPresetLanguage"
SZ_SET_SCREEN: Final = "SetScreen"
SZ_SET_SCREEN_TIMEOUT: Final = "SetScreenTimeout"
SZ_UPDATE_CUSTOM_LABEL: Final = "UpdateCustomLabel"
SZ_UPDATE_TEMPERATURE_DEVICE: Final = "UpdateTemperatureDevice"


SCREEN_ID_REGEX = SimpleNamespace(
    ANY=re.compile(r"^[A-Z][0-9]+$"),
    SWITCH=re.compile(r"^([A-Z][0-9]+)(:+)"),  # :+ as older writers doubled the colon
)


@verify(EnumCheck.UNIQUE)
class ScreenType(StrEnum):
    CUSTOM = "C"
    TEMPERATURE = "T"
    WELCOME = "W"
    PRESET = "P"


@verify(EnumCheck.UNIQUE)
class InteractionKind(StrEnum):
    MOMENTARY = "M"
    MOMENTARY_DIRECT = "D"
    TOGGLE = "T"
    TWO_STATE = "2"
    THREE_STATE = "3"
    FOUR_STATE = "4"
    FIVE_STATE = "5"
    SIX_STATE = "6"
    SEVEN_STATE = "7"
    EIGHT_STATE = "8"
    NINE_STATE = "9"
    THERMOSTAT_MODE = "P"
    ENERGY_MODE = "E"
    TOGGLE_DIRECT = "S"  # obsolete, still accepted when read
    EXCLUSIVE = "X"
    SWITCH_SCREEN = "N"
    TEMPERATURE = "H"
    WELCOME = "W"

    @property
    def num_states(self) -> int:
        """Return the number of (virtual) states the button cycles through."""
        return int(self.value) if self.value.isdigit() else 1

    @property
    def display_name(self) -> str:
        return INTERACTION_KIND_NAMES[self]


INTERACTION_KIND_NAMES: Final = MappingProxyType(
    {
        InteractionKind.MOMENTARY: "Momentary",
        InteractionKind.MOMENTARY_DIRECT: "Momentary direct",
        InteractionKind.TOGGLE: "Toggle",
        InteractionKind.TWO_STATE: "Two-state",
        InteractionKind.THREE_STATE: "Three-state",
        InteractionKind.FOUR_STATE: "Four-state",
        InteractionKind.FIVE_STATE: "Five-state",
        InteractionKind.SIX_STATE: "Six-state",
        InteractionKind.SEVEN_STATE: "Seven-state",
        InteractionKind.EIGHT_STATE: "Eight-state",
        InteractionKind.NINE_STATE: "Nine-state",
        InteractionKind.THERMOSTAT_MODE: "Mode",
        InteractionKind.ENERGY_MODE: "Energy Mode",
        InteractionKind.TOGGLE_DIRECT: "Toggle Direct",
        InteractionKind.EXCLUSIVE: "Exclusive",
        InteractionKind.SWITCH_SCREEN: "Switch Screen",
        InteractionKind.TEMPERATURE: "Temperature",
        InteractionKind.WELCOME: "Welcome",
    }
)


@verify(EnumCheck.UNIQUE)
class SceneMarker(StrEnum):
    SCENE = "S"
    COOPER = "C"  # read as SCENE, never written


class Font(StrEnum):
    NORMAL = "Normal"
    COMPRESSED = "Compressed"
    INVERTED = "Inverted"


class Align(StrEnum):
    LEFT = "Left"
    CENTER = "Center"
    RIGHT = "Right"


DEFAULT_FONT: Final = Font.NORMAL
DEFAULT_ALIGN: Final = Align.CENTER


@verify(EnumCheck.UNIQUE)
class CommandClass(IntEnum):
    SWITCH_BINARY = 37
    SWITCH_MULTILEVEL = 38
    SCENE_ACTIVATION = 43
    SCENE_ACTUATOR_CONF = 44


@verify(EnumCheck.UNIQUE)
class Language(IntEnum):
    ENGLISH = 1
    SPANISH = 2
    CHINESE = 3
    GERMAN = 4
    FRENCH = 5
    ITALIAN = 6
    PUNJABI = 7


LANGUAGE_NAMES: Final = MappingProxyType(
    {
        Language.ENGLISH: "English",
        Language.SPANISH: "Spanish",
        Language.CHINESE: "Chinese",
        Language.GERMAN: "German",
        Language.FRENCH: "French",
        Language.ITALIAN: "Italian",
        Language.PUNJABI: "Punjabi",
    }
)

# the number of preset screens translated into each language
LANGUAGE_MAX_PRESET_SCREENS: Final = MappingProxyType(
    {
        Language.ENGLISH: 26,
        Language.SPANISH: 8,
        Language.CHINESE: 10,
        Language.GERMAN: 8,
        Language.FRENCH: 8,
        Language.ITALIAN: 8,
        Language.PUNJABI: 8,
    }
)

# the fixed labels of the built-in temperature screens (pages 8, 16 & 40)
TEMPERATURE_SCREENS: Final[tuple[tuple[str, ...], ...]] = (
    ("All On", "▲", "72°", "▼", "All Off"),
    ("Lights", "▲", "72°", "▼", "Privacy"),
    ("All On/Off", "▲", "72°", "▼", "Reading"),
)
THERMOSTAT_MODE_LABEL: Final = "Heat/Cool/Auto/Off"
ENERGY_MODE_LABEL: Final = "Normal/Energy Saving"


def state_button(button: int, state: int) -> int:
    """Return the (virtual) button number of an N-state button's state."""
    return button + (state - 1) * STATE_BUTTON_OFFSET


def button_var(name: str, screen: str, button: int) -> str:
    """Return the name of a per-button state variable, e.g. 'Mode_C1_3'."""
    return f"{name}_{screen}_{button}"


def screen_var(name: str, screen: str) -> str:
    """Return the name of a per-screen state variable, e.g. 'NumLines_C1'."""
    return f"{name}_{screen}"
