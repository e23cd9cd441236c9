#!/usr/bin/env python3
"""SceneCtl - a scene-controller configuration engine.

Test the mode string codec (incl. the legacy forms).
"""

import pytest

from scenectl_codec import (
    COOPER_RFWC5,
    EVOLVE_LCD1,
    NEXIA_ONE_TOUCH,
    Association,
    ControllerProfile,
    InteractionKind,
    ModeDescriptor,
    ScreenAddress,
    decode,
    encode,
    normalise,
)
from scenectl_codec.exceptions import ProfileInvalid, ScreenAddressInvalid

M = InteractionKind.MOMENTARY
N = InteractionKind.SWITCH_SCREEN
T = InteractionKind.TOGGLE

C1 = ScreenAddress("C", 1)
C2 = ScreenAddress("C", 2)
C3 = ScreenAddress("C", 3)


TESTS_DECODE = (  # mode string, descriptor (Evolve LCD1)
    ("M", ModeDescriptor(M)),
    (
        "MS12@29,255,3;35",
        ModeDescriptor(
            M,
            scene_controllable=True,
            scene_id=12,
            associations=(Association(29, None, 3), Association(35)),
        ),
    ),
    (
        "TS5,99,10;6,50",
        ModeDescriptor(
            T,
            scene_controllable=True,
            associations=(Association(5, 99, 10), Association(6, 50)),
        ),
    ),
    (
        "TS1@2@5",
        ModeDescriptor(
            T,
            scene_controllable=True,
            scene_id=1,
            off_scene_id=2,
            associations=(Association(5),),
        ),
    ),
    ("T5;6", ModeDescriptor(T, associations=(Association(5), Association(6)))),
    ("T5,50;6", ModeDescriptor(T, associations=(Association(5), Association(6)))),
    (
        "TC5,50",  # the Cooper scene marker
        ModeDescriptor(T, scene_controllable=True, associations=(Association(5, 50),)),
    ),
    ("MS", ModeDescriptor(M, scene_controllable=True)),
    ("NC2:", ModeDescriptor(N, target_screen=C2)),
    ("NC2::", ModeDescriptor(N, target_screen=C2)),
    ("MC2:", ModeDescriptor(N, target_screen=C2)),
    ("NC3", ModeDescriptor(N, target_screen=C3)),
    ("N", ModeDescriptor(N, target_screen=C1)),
    (
        "NC2:S5",
        ModeDescriptor(
            N,
            target_screen=C2,
            scene_controllable=True,
            associations=(Association(5),),
        ),
    ),
)

TESTS_NORMALISE = (  # mode string, canonical form (Evolve LCD1)
    ("", "M"),
    ("M", "M"),
    ("TC5,50", "TS5,50"),
    ("NC2::", "NC2:"),
    ("MC2:", "NC2:"),
    ("NC3", "NC3:"),
    ("N", "NC1:"),
    ("M5;", "M5"),
    ("M5,;6", "M5;6"),
    ("M 5 ; 6 ", "M5;6"),
    ("M5;abc;6", "M5;6"),
    ("M0;5", "M5"),
    ("MS5,100,10", "MS5,255,10"),
    ("MS5,255,255", "MS5"),
    ("MS5,0", "MS5,0"),
    ("MS5,0,254", "MS5,0,254"),
    ("MS5,99,255", "MS5,99"),
    ("M5²;6", "M6"),
    ("T5,50;6", "T5;6"),
)

TESTS_MALFORMED = (  # all decode as the default mode
    "Q5",
    "NC2x",
    "NX9",
    "N:",
    "?S5",
    "MX9:",
)


@pytest.mark.parametrize("text,expected", TESTS_DECODE)
def test_decode(text: str, expected: ModeDescriptor) -> None:
    assert decode(EVOLVE_LCD1, text) == expected


@pytest.mark.parametrize("text,expected", TESTS_NORMALISE)
def test_normalise(text: str, expected: str) -> None:
    assert normalise(EVOLVE_LCD1, text) == expected


@pytest.mark.parametrize("text", TESTS_MALFORMED)
def test_decode_malformed(text: str) -> None:
    assert decode(EVOLVE_LCD1, text) == decode(EVOLVE_LCD1, "M")


@pytest.mark.parametrize("text", [text for text, _ in TESTS_DECODE])
def test_decode_is_stable(text: str) -> None:
    mode = decode(EVOLVE_LCD1, text)
    assert decode(EVOLVE_LCD1, encode(mode)) == mode


def test_decode_default_mode() -> None:
    for profile in (EVOLVE_LCD1, COOPER_RFWC5, NEXIA_ONE_TOUCH):
        default = decode(profile, profile.default_mode_code)

        assert decode(profile, "") == default
        assert decode(profile, None) == default

    assert decode(COOPER_RFWC5, None) == ModeDescriptor(T)


def test_decode_cooper_keeps_levels() -> None:
    mode = decode(COOPER_RFWC5, "T5,50,10;6")

    assert not mode.scene_controllable
    assert mode.associations == (Association(5, 50), Association(6))
    assert encode(mode) == "T5,50;6"


def test_decode_known_devices() -> None:
    mode = decode(EVOLVE_LCD1, "MS5;6,20;7", is_known_device=lambda d: d != 6)
    assert mode.devices == (5, 7)

    assert normalise(EVOLVE_LCD1, "M5;6", is_known_device=lambda d: False) == "M"


def test_decode_association_limit() -> None:
    assert decode(NEXIA_ONE_TOUCH, "M5;6;7").devices == (5, 6)
    assert decode(EVOLVE_LCD1, "M5;6;7").devices == (5, 6, 7)


def test_decode_invalid_default() -> None:
    profile = ControllerProfile.from_dict(
        {
            "id": "broken",
            "name": "Broken",
            "button_count": 5,
            "max_scroll_lines": 5,
            "max_direct_associations": 4,
            "default_screen": "C1",
            "default_mode_code": "Q",
            "screen_types": [{"prefix": "C", "name": "Custom", "count": 1}],
            "custom_modes": ["M"],
            "scene_bases": {"C": 1},
        }
    )

    with pytest.raises(ProfileInvalid):
        decode(profile, "")
    with pytest.raises(ProfileInvalid):
        decode(profile, "Q5")


def test_encode() -> None:
    assert encode(ModeDescriptor(M)) == "M"
    assert encode(ModeDescriptor(N, target_screen=C2)) == "NC2:"

    # the off scene is only written after a scene
    mode = ModeDescriptor(M, scene_controllable=True, off_scene_id=4)
    assert encode(mode) == "MS"
    mode = ModeDescriptor(M, scene_controllable=True, scene_id=3, off_scene_id=4)
    assert encode(mode) == "MS3@4@"

    # placeholders are never written
    mode = ModeDescriptor(M, associations=(Association(0), Association(5)))
    assert encode(mode) == "M5"

    assert str(Association(5, None, 10)) == "5,255,10"
    assert str(Association(5, 0)) == "5,0"
    assert str(ModeDescriptor(T, associations=(Association(5, 20),))) == "T5,20"


def test_with_prefix() -> None:
    mode = decode(EVOLVE_LCD1, "NC2:S5")

    assert mode.with_prefix("T") == ModeDescriptor(
        T, scene_controllable=True, associations=(Association(5),)
    )
    assert mode.with_prefix(N, target_screen=C3).target_screen == C3

    with pytest.raises(ScreenAddressInvalid):
        mode.with_prefix(N)
    with pytest.raises(ValueError):
        mode.with_prefix("Q")
