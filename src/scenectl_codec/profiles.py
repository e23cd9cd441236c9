#!/usr/bin/env python3
"""SceneCtl - a scene-controller configuration engine.

Controller profiles: the static descriptors of each family of scene controller.

Profiles are declared as plain tables (as would be loaded from a YAML file), are
validated by SCH_PROFILE once, when loaded, and are immutable thereafter.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Final

from .const import InteractionKind, Language, ScreenType
from .schemas import (
    SZ_BUTTON_COUNT,
    SZ_COUNT,
    SZ_CUSTOM_MODES,
    SZ_DEFAULT_LCD_VERSION,
    SZ_DEFAULT_MODE_CODE,
    SZ_DEFAULT_SCREEN,
    SZ_EXCLUDE,
    SZ_HAS_COOPER_CONFIGURATION,
    SZ_HAS_OFF_SCENES,
    SZ_HAS_PRESET_LANGUAGES,
    SZ_HAS_SCREEN,
    SZ_HAS_THERMOSTAT_CONTROL,
    SZ_ID,
    SZ_LANGUAGE_RULES,
    SZ_LANGUAGES,
    SZ_MAX_DIRECT_ASSOCIATIONS,
    SZ_MAX_FIRMWARE,
    SZ_MAX_SCROLL_LINES,
    SZ_NAME,
    SZ_NUM_TEMPERATURE_SCREENS,
    SZ_PAGES,
    SZ_PREFIX,
    SZ_PRESET_SCREENS,
    SZ_SCENE_BASES,
    SZ_SCREEN_RULES,
    SZ_SCREEN_TYPES,
    validate_profile,
)

_LOGGER = logging.getLogger(__name__)


PageRangeT = tuple[int, int | None]  # inclusive, None is unbounded


def _in_pages(number: int, pages: tuple[PageRangeT, ...]) -> bool:
    return any(lo <= number and (hi is None or number <= hi) for lo, hi in pages)


@dataclass(frozen=True)
class ScreenRule:
    """The pages of a screen type available up to (and incl.) a firmware version."""

    max_firmware: int | None = None  # None: all later versions
    pages: tuple[PageRangeT, ...] = ((1, None),)
    exclude: frozenset[int] = frozenset()

    def applies_to(self, firmware: int) -> bool:
        return self.max_firmware is None or firmware <= self.max_firmware

    def allows(self, number: int) -> bool:
        return number not in self.exclude and _in_pages(number, self.pages)


@dataclass(frozen=True)
class LanguageRule:
    """The languages available for some screens, up to a firmware version."""

    screen_types: frozenset[ScreenType]
    languages: tuple[Language, ...]
    max_firmware: int | None = None
    pages: tuple[PageRangeT, ...] = ((1, None),)

    def matches(self, screen_type: ScreenType, number: int, firmware: int) -> bool:
        return (
            screen_type in self.screen_types
            and (self.max_firmware is None or firmware <= self.max_firmware)
            and _in_pages(number, self.pages)
        )


@dataclass(frozen=True)
class ScreenTypeInfo:
    prefix: ScreenType
    name: str
    count: int


@dataclass(frozen=True, eq=False)  # profiles compare by identity
class ControllerProfile:
    """The (immutable) descriptor of a family of scene controllers."""

    id: str
    name: str
    button_count: int
    max_scroll_lines: int
    max_direct_associations: int
    default_screen: str
    default_mode_code: str
    screen_types: tuple[ScreenTypeInfo, ...]
    custom_modes: tuple[InteractionKind, ...]
    scene_bases: Mapping[ScreenType, int]
    has_off_scenes: bool = False
    has_cooper_configuration: bool = False
    has_screen: bool = True
    has_preset_languages: bool = False
    has_thermostat_control: bool = False
    default_lcd_version: int = 1
    num_temperature_screens: int = 0
    screen_rules: Mapping[ScreenType, tuple[ScreenRule, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    language_rules: tuple[LanguageRule, ...] = ()
    preset_screens: Mapping[int, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __repr__(self) -> str:
        return f"ControllerProfile(id={self.id})"

    def __str__(self) -> str:
        return self.name

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> ControllerProfile:
        """Create a profile from a profile table (will raise ProfileInvalid)."""

        cfg = validate_profile(config)

        def pages(ranges: list[list[int | None]]) -> tuple[PageRangeT, ...]:
            return tuple((lo, hi) for lo, hi in ranges)  # type: ignore[misc]

        return cls(
            id=cfg[SZ_ID],
            name=cfg[SZ_NAME],
            button_count=cfg[SZ_BUTTON_COUNT],
            max_scroll_lines=max(cfg[SZ_MAX_SCROLL_LINES], cfg[SZ_BUTTON_COUNT]),
            max_direct_associations=cfg[SZ_MAX_DIRECT_ASSOCIATIONS],
            default_screen=cfg[SZ_DEFAULT_SCREEN],
            default_mode_code=cfg[SZ_DEFAULT_MODE_CODE],
            screen_types=tuple(
                ScreenTypeInfo(s[SZ_PREFIX], s[SZ_NAME], s[SZ_COUNT])
                for s in cfg[SZ_SCREEN_TYPES]
            ),
            custom_modes=tuple(cfg[SZ_CUSTOM_MODES]),
            scene_bases=MappingProxyType(dict(cfg[SZ_SCENE_BASES])),
            has_off_scenes=cfg[SZ_HAS_OFF_SCENES],
            has_cooper_configuration=cfg[SZ_HAS_COOPER_CONFIGURATION],
            has_screen=cfg[SZ_HAS_SCREEN],
            has_preset_languages=cfg[SZ_HAS_PRESET_LANGUAGES],
            has_thermostat_control=cfg[SZ_HAS_THERMOSTAT_CONTROL],
            default_lcd_version=cfg[SZ_DEFAULT_LCD_VERSION],
            num_temperature_screens=cfg[SZ_NUM_TEMPERATURE_SCREENS],
            screen_rules=MappingProxyType(
                {
                    k: tuple(
                        ScreenRule(
                            max_firmware=r[SZ_MAX_FIRMWARE],
                            pages=pages(r[SZ_PAGES]),
                            exclude=frozenset(r[SZ_EXCLUDE]),
                        )
                        for r in v
                    )
                    for k, v in cfg[SZ_SCREEN_RULES].items()
                }
            ),
            language_rules=tuple(
                LanguageRule(
                    screen_types=frozenset(r[SZ_SCREEN_TYPES]),
                    languages=tuple(r[SZ_LANGUAGES]),
                    max_firmware=r[SZ_MAX_FIRMWARE],
                    pages=pages(r[SZ_PAGES]),
                )
                for r in cfg[SZ_LANGUAGE_RULES]
            ),
            preset_screens=MappingProxyType(
                {k: tuple(v) for k, v in cfg[SZ_PRESET_SCREENS].items()}
            ),
        )

    def screen_count(self, screen_type: ScreenType) -> int:
        """Return the number of screens of a type (0 if not supported)."""
        for info in self.screen_types:
            if info.prefix == screen_type:
                return info.count
        return 0

    def screen_is_compatible(
        self, screen_type: ScreenType | str, number: int, firmware: int
    ) -> bool:
        """Return True if the screen/firmware combination is supported (in English).

        A screen type without rules is incompatible, one with an empty rule list is
        always compatible, otherwise the first rule applying to the firmware decides.
        """

        try:
            rules = self.screen_rules[ScreenType(screen_type)]
        except (KeyError, ValueError):
            return False

        if screen_type == ScreenType.PRESET and number not in self.preset_screens:
            return False

        if not rules:
            return True

        for rule in rules:
            if rule.applies_to(firmware):
                return rule.allows(number)
        return False

    def languages_supported(
        self, screen_type: ScreenType | str, number: int, firmware: int
    ) -> tuple[Language, ...]:
        """Return the languages available for a screen/firmware combination."""

        for rule in self.language_rules:
            if rule.matches(ScreenType(screen_type), number, firmware):
                return rule.languages
        return (Language.ENGLISH,)

    def preset_labels(self, number: int) -> tuple[str, ...]:
        return self.preset_screens.get(number, ())

    def available_screens(self, firmware: int | None = None) -> list[tuple[str, str]]:
        """Return the (id, name) of every screen the firmware supports, in order."""

        if firmware is None:
            firmware = self.default_lcd_version

        return [
            (f"{info.prefix}{num}", f"{info.name} {num}")
            for info in self.screen_types
            for num in range(1, info.count + 1)
            if self.screen_is_compatible(info.prefix, num, firmware)
        ]


#
# The built-in profiles...

_EVOLVE_LCD1: Final[dict[str, Any]] = {
    SZ_ID: "EVOLVELCD1",
    SZ_NAME: "Evolve LCD1",
    SZ_BUTTON_COUNT: 5,
    SZ_MAX_SCROLL_LINES: 10,
    SZ_MAX_DIRECT_ASSOCIATIONS: 29,  # 30, but 1 is reserved for the hub
    SZ_HAS_OFF_SCENES: True,
    SZ_HAS_SCREEN: True,
    SZ_HAS_PRESET_LANGUAGES: True,
    SZ_HAS_THERMOSTAT_CONTROL: True,
    SZ_DEFAULT_LCD_VERSION: 39,
    SZ_DEFAULT_SCREEN: "C1",
    SZ_DEFAULT_MODE_CODE: "M",
    SZ_NUM_TEMPERATURE_SCREENS: 3,  # preset pages 8, 16 & 40
    SZ_SCREEN_TYPES: [
        {SZ_PREFIX: "C", SZ_NAME: "Custom", SZ_COUNT: 9},
        {SZ_PREFIX: "T", SZ_NAME: "Temperature", SZ_COUNT: 9},
        {SZ_PREFIX: "P", SZ_NAME: "Preset", SZ_COUNT: 41},
    ],
    SZ_CUSTOM_MODES: ["M", "T", "3", "4", "5", "6", "7", "8", "9", "X", "N", "P", "E"],
    SZ_SCENE_BASES: {
        "C": 1,  # 6 custom screens of 5 buttons
        "T": 31,  # 2 + 4 temperature screens
        "W": 61,  # 1 welcome screen
        "P": 66,
    },
    SZ_SCREEN_RULES: {
        "C": [],
        "T": [
            {SZ_MAX_FIRMWARE: 54, SZ_EXCLUDE: [3]},  # no temperature page 40
            {SZ_EXCLUDE: [2]},  # v55 has no temperature page 16
        ],
        "P": [
            {SZ_MAX_FIRMWARE: 37, SZ_PAGES: [[1, 18]]},
            {SZ_MAX_FIRMWARE: 39, SZ_PAGES: [[1, 26]]},
            {
                SZ_PAGES: [
                    [1, 1], [8, 8], [10, 10], [13, 13], [17, 17], [19, 26], [31, None]
                ],  # fmt: skip
            },
        ],
    },
    SZ_LANGUAGE_RULES: [
        {SZ_SCREEN_TYPES: ["T"], SZ_PAGES: [[4, None]], SZ_LANGUAGES: [1]},  # custom
        {
            SZ_SCREEN_TYPES: ["P", "T"],
            SZ_MAX_FIRMWARE: 37,
            SZ_LANGUAGES: [1, 2, 3, 4, 5, 6, 7],
        },
        {SZ_SCREEN_TYPES: ["P", "T"], SZ_MAX_FIRMWARE: 39, SZ_LANGUAGES: [1]},
        {SZ_SCREEN_TYPES: ["P"], SZ_PAGES: [[37, 40]], SZ_LANGUAGES: [1, 3]},
        {SZ_SCREEN_TYPES: ["T"], SZ_PAGES: [[3, 3]], SZ_LANGUAGES: [1, 3]},
    ],
    SZ_PRESET_SCREENS: {
        1: ["All On", "Low", "All Off", "Privacy Please", "Service Room"],
        2: ["All On", "Medium", "Low", "Night Light", "All Off"],
        4: ["All On", "Medium", "Low", "Mood", "All Off"],
        5: ["All On", "Medium", "Low", "Mood", "All Off"],
        7: ["All On", "Medium", "Low", "Night Light", "All Off"],
        10: ["Drapery Open", "Drapery Closed", "Stop", "Sheers Open", "Sheers Closed"],
        11: ["Vanity", "Shower", "Night Light", "All On", "All Off"],
        12: ["Entry", "Sconce", "Bed Left", "Bed Right", "Good Night"],
        13: ["Vanity", "Shower", "Night Light", "All On", "All Off"],
        14: ["Entry", "Kitchen", "LivingRoom", "BedRoom", "MasterOff"],
        15: ["Welcome", "Overhead", "Bedroom", "Privacy", "All Off"],
        18: ["Morning", "Day", "Evening", "Night", "Sleep"],
        19: ["All On", "Living Room", "Bed Room", "Bath Room", "All Off"],
        20: ["All On", "Living Room", "Bed Room", "Low", "All Off"],
        21: ["All On", "Mood", "All Off", "Privacy Please", "Service Room"],
        22: ["On/Off", "Mood", "Drapery", "Reading", "Night Light"],
        23: ["LR On/Off", "LR Mood", "BR On/Off", "BR Mood", "Drapery"],
        24: ["BO On/Off", "BR Mood", "LR On/Off", "LR Mood", "Drapery"],
        25: ["All On", "All Off", "Entry", "Low", "Mood"],
        26: ["All On", "TurnDown", "All Off", "Service Please", "Privacy Please"],
        31: ["All On", "Entry", "Bedside", "Low", "All Off"],
        32: ["Lighting", "Drapery", "Climate", "Privacy Please", "Service Room"],
        33: ["Lighting", "Climate", "Shades", "Service Room", "Privacy Please"],
        34: ["Lighting", "Climate", "Drapery", "Master On", "Master Off"],
        35: ["Lighting", "Climate", "Drapery", "Bath On", "Bath Off"],
        36: ["Lighting", "Climate", "Shading", "Master On", "Master Off"],
        37: ["All On", "All Off", "Privacy Please", "Service Room", "Language"],
        38: ["All On", "Vanity", "Toilet", "Shower", "All Off"],
        39: ["Sheers Open", "Sheers Closed", "Stop", "Shade Open", "Shade Closed"],
        41: ["Lighting", "Climate", "", "All On", "All Off"],
    },
}

_COOPER_RFWC5: Final[dict[str, Any]] = {
    SZ_ID: "COOPERRFWC5",
    SZ_NAME: "Cooper RFWC5",
    SZ_BUTTON_COUNT: 5,
    SZ_MAX_SCROLL_LINES: 5,
    SZ_MAX_DIRECT_ASSOCIATIONS: 4,  # 5, but 1 is reserved for the hub
    SZ_HAS_COOPER_CONFIGURATION: True,
    SZ_HAS_SCREEN: False,
    SZ_DEFAULT_LCD_VERSION: 1,
    SZ_DEFAULT_SCREEN: "P1",
    SZ_DEFAULT_MODE_CODE: "T",
    SZ_SCREEN_TYPES: [{SZ_PREFIX: "P", SZ_NAME: "Preset", SZ_COUNT: 1}],
    SZ_CUSTOM_MODES: ["T", "M", "3", "4", "5", "6", "7", "8", "9"],
    SZ_SCENE_BASES: {"P": 1},
    SZ_SCREEN_RULES: {"P": []},
    SZ_PRESET_SCREENS: {
        1: ["Button 1", "Button 2", "Button 3", "Button 4", "Button 5"],
    },
}

_NEXIA_ONE_TOUCH: Final[dict[str, Any]] = {
    SZ_ID: "NEXIAONETOUCH",
    SZ_NAME: "Nexia One Touch",
    SZ_BUTTON_COUNT: 15,
    SZ_MAX_SCROLL_LINES: 15,
    SZ_MAX_DIRECT_ASSOCIATIONS: 2,  # the hub uses the lifeline/central scene
    SZ_HAS_SCREEN: True,
    SZ_HAS_THERMOSTAT_CONTROL: True,
    SZ_DEFAULT_LCD_VERSION: 1,
    SZ_DEFAULT_SCREEN: "C1",
    SZ_DEFAULT_MODE_CODE: "M",
    SZ_SCREEN_TYPES: [{SZ_PREFIX: "C", SZ_NAME: "Custom", SZ_COUNT: 3}],
    SZ_CUSTOM_MODES: ["M", "2", "3", "4", "5", "6", "7", "8", "9"],
    SZ_SCENE_BASES: {"C": 1},
    SZ_SCREEN_RULES: {"C": []},
}


EVOLVE_LCD1: Final = ControllerProfile.from_dict(_EVOLVE_LCD1)
COOPER_RFWC5: Final = ControllerProfile.from_dict(_COOPER_RFWC5)
NEXIA_ONE_TOUCH: Final = ControllerProfile.from_dict(_NEXIA_ONE_TOUCH)

PROFILES: Final[Mapping[str, ControllerProfile]] = MappingProxyType(
    {p.id: p for p in (EVOLVE_LCD1, COOPER_RFWC5, NEXIA_ONE_TOUCH)}
)


def get_profile(profile_id: str) -> ControllerProfile:
    """Return a built-in profile by its id (case insensitive)."""
    try:
        return PROFILES[profile_id.upper()]
    except KeyError:
        raise KeyError(
            f"Unknown profile: {profile_id} (known: {', '.join(PROFILES)})"
        ) from None
