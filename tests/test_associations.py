#!/usr/bin/env python3
"""SceneCtl - a scene-controller configuration engine.

Test the editing of a button's direct associations.
"""

import pytest

from scenectl import (
    AssociationManager,
    NoOp,
    RequireConfirmThenKeep,
    RequireConfirmThenPrune,
)
from scenectl.associations import (
    RANK_NOT_OFFERED,
    RANK_NOT_SCENE_CAPABLE,
    RANK_SCENE_CAPABLE,
)
from scenectl.exceptions import AssociationLimitReached, TransitionDeclined
from scenectl_codec import (
    COOPER_RFWC5,
    EVOLVE_LCD1,
    NEXIA_ONE_TOUCH,
    Association,
    decode,
    encode,
)


@pytest.fixture()
def manager(directory) -> AssociationManager:
    return AssociationManager(EVOLVE_LCD1, directory)


def test_direct_to_scene_prunes(manager: AssociationManager) -> None:
    mode = decode(EVOLVE_LCD1, "M5;6;7")  # basic, scene, basic

    decision = manager.plan(mode, 0, 8)
    assert isinstance(decision, RequireConfirmThenPrune)
    assert decision.slots == (2,)
    assert decision.scene_controllable and decision.needs_confirmation
    assert "Garage Switch" in decision.message

    messages: list[str] = []

    def confirm(message: str) -> bool:
        messages.append(message)
        return True

    outcome = manager.apply(mode, 0, 8, confirm=confirm)

    assert messages == [decision.message]
    assert outcome.decision == decision
    assert outcome.mode.scene_controllable
    assert outcome.mode.devices == (8, 6)  # 5 was replaced, 7 was removed
    assert encode(outcome.mode) == "MS8;6"


def test_direct_to_scene_declined(manager: AssociationManager) -> None:
    mode = decode(EVOLVE_LCD1, "M5;6;7")

    with pytest.raises(TransitionDeclined):
        manager.apply(mode, 0, 8, confirm=lambda msg: False)
    with pytest.raises(TransitionDeclined):
        manager.apply(mode, 0, 8)  # no means to confirm

    assert encode(mode) == "M5;6;7"


def test_scene_to_direct_keeps(manager: AssociationManager) -> None:
    mode = decode(EVOLVE_LCD1, "MS6,50,10;8,20")

    decision = manager.plan(mode, 0, 5)
    assert isinstance(decision, RequireConfirmThenKeep)
    assert decision.slots == (1,)
    assert not decision.scene_controllable
    assert "Kitchen Dimmer" in decision.message

    outcome = manager.apply(mode, 0, 5, confirm=lambda msg: True)

    assert not outcome.mode.scene_controllable
    assert outcome.mode.associations == (Association(5), Association(8))
    assert encode(outcome.mode) == "M5;8"


def test_scene_to_direct_no_settings(manager: AssociationManager) -> None:
    mode = decode(EVOLVE_LCD1, "MS6;8")  # nothing would be lost

    assert manager.plan(mode, 0, 5) == NoOp(False)
    assert encode(manager.apply(mode, 0, 5).mode) == "M5;8"


def test_unset_master(manager: AssociationManager) -> None:
    # the second device becomes the first, and decides the list's mode
    mode = decode(EVOLVE_LCD1, "M5;6")

    assert manager.plan(mode, 0, 0) == NoOp(True)
    assert encode(manager.apply(mode, 0, 0).mode) == "MS6"

    # with no second device, the list is in direct mode
    mode = decode(EVOLVE_LCD1, "MS6,50")

    assert manager.plan(mode, 0, 0) == NoOp(False)
    assert encode(manager.apply(mode, 0, 0).mode) == "M"


def test_direct_mode_has_no_levels(manager: AssociationManager) -> None:
    mode = decode(EVOLVE_LCD1, "M5")

    outcome = manager.apply(mode, 1, 6, level=50, dimming_duration=10)

    assert not outcome.mode.scene_controllable
    assert all(a.level is None for a in outcome.mode.associations)
    assert all(a.dimming_duration is None for a in outcome.mode.associations)
    assert encode(outcome.mode) == "M5;6"


def test_scene_mode_non_scene_device(manager: AssociationManager) -> None:
    mode = decode(EVOLVE_LCD1, "MS6")

    assert manager.plan(mode, 1, 5) == NoOp(True)

    outcome = manager.apply(mode, 1, 5, level=50, dimming_duration=10)
    assert outcome.mode.associations == (Association(6), Association(5))

    outcome = manager.apply(mode, 1, 8, level="50", dimming_duration="10")
    assert outcome.mode.associations == (Association(6), Association(8, 50, 10))
    assert encode(outcome.mode) == "MS6;8,50,10"


def test_cooper_keeps_levels(directory) -> None:
    manager = AssociationManager(COOPER_RFWC5, directory)
    mode = decode(COOPER_RFWC5, "T5,50")

    assert manager.plan(mode, 0, 6) == NoOp(True)  # never needs confirmation

    outcome = manager.apply(mode, 1, 6, level=30, dimming_duration=10)
    assert encode(outcome.mode) == "TS5,50;6,30,10"

    outcome = manager.apply(mode, 0, 7, level=40, dimming_duration=10)
    assert outcome.mode.associations == (Association(7, 40),)


def test_association_limit(directory) -> None:
    manager = AssociationManager(NEXIA_ONE_TOUCH, directory)
    mode = decode(NEXIA_ONE_TOUCH, "M5;6")

    with pytest.raises(AssociationLimitReached):
        manager.apply(mode, 2, 7)
    with pytest.raises(AssociationLimitReached):
        manager.add_placeholder(mode)

    mode = decode(NEXIA_ONE_TOUCH, "M5")
    assert manager.add_placeholder(mode).associations == (
        Association(5),
        Association(0),
    )
    assert encode(manager.apply(mode, 1, 7).mode) == "M5;7"


def test_bad_slot(manager: AssociationManager) -> None:
    mode = decode(EVOLVE_LCD1, "M5")

    with pytest.raises(IndexError):
        manager.apply(mode, 3, 6)
    with pytest.raises(IndexError):
        manager.apply(mode, -1, 6)


def test_invalid_numeric_input(manager: AssociationManager) -> None:
    mode = decode(EVOLVE_LCD1, "MS6,50,10")

    outcome = manager.apply(mode, 0, 6, level="abc", dimming_duration="255")

    assert outcome.mode.associations == (Association(6, 50, 10),)  # kept
    assert len(outcome.errors) == 2
    assert outcome.messages == (
        "Level must be a number between 0 and 99",
        "Dimming duration must be a number between 0 and 254",
    )

    outcome = manager.apply(mode, 0, 6, level="", dimming_duration=" ")
    assert outcome.errors == ()
    assert outcome.mode.associations == (Association(6),)

    outcome = manager.apply(mode, 0, 6, level="0", dimming_duration=254)
    assert outcome.mode.associations == (Association(6, 0, 254),)


def test_candidate_rank(manager: AssociationManager, directory) -> None:
    mode = decode(EVOLVE_LCD1, "MS6")

    def rank(device: int, slot: int = 1, allowed: bool = False, mode=mode) -> int:
        return manager.candidate_rank(mode, slot, device, allowed)

    assert rank(6) == RANK_NOT_OFFERED  # already in the list
    assert rank(6, slot=0) == RANK_SCENE_CAPABLE  # it is this slot's device
    assert rank(8) == RANK_SCENE_CAPABLE
    assert rank(30) == RANK_NOT_OFFERED  # not Z-Wave
    assert rank(99) == RANK_NOT_OFFERED  # no such device

    assert rank(5) == RANK_NOT_OFFERED
    assert rank(5, allowed=True) == RANK_NOT_SCENE_CAPABLE
    assert rank(5, slot=0) == RANK_NOT_SCENE_CAPABLE
    assert rank(5, mode=decode(EVOLVE_LCD1, "TS6")) == RANK_NOT_SCENE_CAPABLE

    cooper = AssociationManager(COOPER_RFWC5, directory)
    assert cooper.candidate_rank(mode, 1, 5, False) == RANK_NOT_SCENE_CAPABLE


def test_checkbox_defaults(manager: AssociationManager) -> None:
    mode = decode(EVOLVE_LCD1, "MS6,50,10")

    outcome = manager.apply(mode, 1, 8, level=True, dimming_duration=True)
    assert outcome.mode.associations[1] == Association(8, 99, 0)
    assert encode(outcome.mode) == "MS6,50,10;8,99,0"
    assert not outcome.errors

    outcome = manager.apply(outcome.mode, 0, 6, level=False, dimming_duration=False)
    assert outcome.mode.associations[0] == Association(6)
    assert encode(outcome.mode) == "MS6;8,99,0"
