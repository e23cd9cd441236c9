#!/usr/bin/env python3
"""SceneCtl - a scene-controller configuration engine.

Test the scene index, and the names of the scenes it creates.
"""

import sqlite3

import pytest

from scenectl import (
    Activation,
    SceneIndex,
    SceneKey,
    create_scene_name,
    find_or_create,
)
from scenectl.scenes import (
    MAX_SCENE_NAME_LENGTH,
    TRIGGER_TEMPLATE_ACTIVATE,
    TRIGGER_TEMPLATE_DEACTIVATE,
)

TESTS_SCENE_NAME = (  # device name, label, activation, max length, scene name
    ("Kitchen", "All On", Activation.MOMENTARY, 32, "Kitchen All On"),
    ("Kitchen", "Lights", Activation.ON, 32, "Kitchen Lights On"),
    ("Kitchen", "Lights", Activation.OFF, 32, "Kitchen Lights Off"),
    ("Kitchen", "Two\\rLines", Activation.MOMENTARY, 32, "Kitchen Two Lines"),
    (
        "Evolve LCD1 Lounge Controller",
        "Reading",
        Activation.MOMENTARY,
        32,
        "Evolve LCD1 Lounge Reading",
    ),
    (
        "Evolve LCD1 Lounge Controller",
        "Reading Lights",
        Activation.ON,
        32,
        "LCD1 Lounge Reading Lights On",
    ),
    (
        "Evolve LCD1 Master Bedroom Controller",
        "Reading Lights",
        Activation.OFF,
        32,
        "LCD1 Master Reading Lights Off",
    ),
    ("Porch", "Very Long Label Words", Activation.ON, 16, "Porch Very On"),
    ("Conservatory", "Lights", Activation.MOMENTARY, 12, "Conse Lights"),
    ("Conservatory", "Illumination", Activation.OFF, 10, "Conser Off"),
    (
        "Evolve LCD1 Master Bedroom Controller",
        "Reading Lights",
        Activation.OFF,
        0,  # no limit
        "Evolve LCD1 Master Bedroom Controller Reading Lights Off",
    ),
)


@pytest.mark.parametrize("device,label,activation,length,expected", TESTS_SCENE_NAME)
def test_create_scene_name(device, label, activation, length, expected) -> None:
    name = create_scene_name(device, label, activation, max_length=length)

    assert name == expected
    assert not length or len(name) <= length


def test_create_scene_name_default_length() -> None:
    name = create_scene_name("A" * 40, "B" * 10, Activation.ON)
    assert len(name) == MAX_SCENE_NAME_LENGTH
    assert name.endswith(" On")


def test_activation() -> None:
    assert Activation.OFF.template == TRIGGER_TEMPLATE_DEACTIVATE
    assert Activation.ON.template == TRIGGER_TEMPLATE_ACTIVATE
    assert Activation.MOMENTARY.template == TRIGGER_TEMPLATE_ACTIVATE

    assert SceneKey(20, 3).template == TRIGGER_TEMPLATE_ACTIVATE
    assert SceneKey(20, 3, Activation.OFF).template == TRIGGER_TEMPLATE_DEACTIVATE


def test_find_or_create(registry: SceneIndex) -> None:
    key = SceneKey(20, 3, Activation.ON)

    first = find_or_create(registry, key, "Lounge Lights On")
    again = find_or_create(registry, key, "Another Name")

    assert first.created and first.name == "Lounge Lights On"
    assert not again.created and again.name is None
    assert again.scene_id == first.scene_id
    assert len(registry) == 1
    assert registry.scene_name(first.scene_id) == "Lounge Lights On"

    # momentary & on share a trigger, off has its own
    assert find_or_create(registry, SceneKey(20, 3), "x").scene_id == first.scene_id
    off = find_or_create(registry, SceneKey(20, 3, Activation.OFF), "Lights Off")
    assert off.created and off.scene_id != first.scene_id

    # another button, or another controller, has another scene
    assert find_or_create(registry, SceneKey(20, 4), "y").created
    assert find_or_create(registry, SceneKey(21, 3), "z").created
    assert len(registry) == 4


def test_scene_index(registry: SceneIndex) -> None:
    assert len(registry) == 0
    assert registry.find_scene(20, 1) is None
    assert registry.scene_name(1) is None

    scene_id = registry.create_scene(20, 1, TRIGGER_TEMPLATE_ACTIVATE, "One")

    assert registry.find_scene(20, 1) == scene_id
    assert registry.find_scene(20, 1, TRIGGER_TEMPLATE_ACTIVATE) == scene_id
    assert registry.find_scene(20, 1, TRIGGER_TEMPLATE_DEACTIVATE) is None

    with pytest.raises(sqlite3.IntegrityError):
        registry.create_scene(20, 1, TRIGGER_TEMPLATE_ACTIVATE, "Duplicate")

    registry.create_scene(21, 1, TRIGGER_TEMPLATE_DEACTIVATE, "Two")
    assert registry.scenes(20) == [(scene_id, 1, TRIGGER_TEMPLATE_ACTIVATE, "One")]
    assert len(registry.scenes()) == 2
