#!/usr/bin/env python3
"""SceneCtl - a scene-controller configuration engine.

Test the screen addresses, and the scene number of each button.
"""

import pytest

from scenectl_codec import (
    COOPER_RFWC5,
    EVOLVE_LCD1,
    NEXIA_ONE_TOUCH,
    ScreenAddress,
    ScreenType,
    id_to_screen,
    other_screen,
    scene_number,
)
from scenectl_codec.address import button_group
from scenectl_codec.exceptions import ScreenAddressInvalid

TESTS_SCENE_NUMBER = (  # profile, screen, button, state, scene number
    (EVOLVE_LCD1, "C1", 1, 1, 1),
    (EVOLVE_LCD1, "C1", 3, 1, 3),
    (EVOLVE_LCD1, "C2", 1, 2, 1006),
    (EVOLVE_LCD1, "C1", 6, 1, 301),  # a scrolling button, in group 1
    (EVOLVE_LCD1, "C1", 11, 1, 401),
    (EVOLVE_LCD1, "C9", 5, 9, 8045),
    (EVOLVE_LCD1, "T1", 1, 1, 31),
    (EVOLVE_LCD1, "W1", 1, 1, 61),
    (EVOLVE_LCD1, "P1", 1, 1, 66),
    (EVOLVE_LCD1, "P2", 5, 1, 75),
    (COOPER_RFWC5, "P1", 1, 1, 1),
    (COOPER_RFWC5, "P1", 5, 3, 2005),
    (NEXIA_ONE_TOUCH, "C1", 15, 1, 15),
    (NEXIA_ONE_TOUCH, "C2", 1, 1, 16),
)


@pytest.mark.parametrize("profile,screen,button,state,expected", TESTS_SCENE_NUMBER)
def test_scene_number(profile, screen: str, button: int, state, expected) -> None:
    assert scene_number(profile, screen, button, state) == expected
    assert scene_number(profile, ScreenAddress.from_str(screen), button, state) == (
        expected
    )


def test_scene_number_bad() -> None:
    with pytest.raises(ValueError):
        scene_number(EVOLVE_LCD1, "C1", 0)
    with pytest.raises(ValueError):
        scene_number(EVOLVE_LCD1, "C1", 1, state=0)
    with pytest.raises(ValueError):  # no base for temperature screens
        scene_number(NEXIA_ONE_TOUCH, "T1", 1)


def test_button_group() -> None:
    assert [button_group(EVOLVE_LCD1, b) for b in (1, 5, 6, 10, 11)] == [0, 0, 1, 1, 2]
    assert button_group(NEXIA_ONE_TOUCH, 15) == 0


def test_screen_address() -> None:
    screen = ScreenAddress.from_str("C3")

    assert screen.type == ScreenType.CUSTOM
    assert screen.number == 3
    assert str(screen) == "C3"
    assert screen == ScreenAddress("C", 3)
    assert screen != ScreenAddress("T", 3)
    assert len({screen, ScreenAddress(ScreenType.CUSTOM, 3)}) == 1

    assert id_to_screen("P41") == ScreenAddress("P", 41)
    assert id_to_screen("P41") is id_to_screen("P41")


@pytest.mark.parametrize("screen_id", ["", "C", "c1", "X1", "C0", "C1:", "1C", None])
def test_screen_address_bad(screen_id) -> None:
    with pytest.raises(ScreenAddressInvalid):
        ScreenAddress.from_str(screen_id)


def test_screen_address_is_valid() -> None:
    def is_valid(screen_id: str, firmware: int | None = None) -> bool:
        return ScreenAddress.from_str(screen_id).is_valid(EVOLVE_LCD1, firmware)

    assert is_valid("C1") and is_valid("C9")
    assert not is_valid("C10")
    assert not is_valid("W1")  # the LCD1 has no (configurable) welcome screen

    assert is_valid("T1", 39) and is_valid("T2", 39) and not is_valid("T3", 39)
    assert is_valid("T1", 55) and not is_valid("T2", 55) and is_valid("T3", 55)

    assert is_valid("P1") and not is_valid("P3")  # there is no preset page 3
    assert is_valid("P26", 39) and not is_valid("P31", 39)
    assert not is_valid("P19", 37) and is_valid("P18", 37)
    assert is_valid("P31", 40) and is_valid("P41", 40) and not is_valid("P2", 40)

    assert ScreenAddress.from_str("P1").is_valid(COOPER_RFWC5)
    assert not ScreenAddress.from_str("C1").is_valid(COOPER_RFWC5)


def test_has_custom_labels() -> None:
    assert ScreenAddress.from_str("C1").has_custom_labels
    assert not ScreenAddress.from_str("T3").has_custom_labels
    assert ScreenAddress.from_str("T4").has_custom_labels
    assert not ScreenAddress.from_str("P1").has_custom_labels


def test_other_screen() -> None:
    assert other_screen(EVOLVE_LCD1, "C1") == "C2"
    assert other_screen(EVOLVE_LCD1, ScreenAddress("C", 1)) == "C2"
    assert other_screen(EVOLVE_LCD1, "C5") == "C1"
    assert other_screen(EVOLVE_LCD1, "P12") == "C1"
