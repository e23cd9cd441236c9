#!/usr/bin/env python3
"""SceneCtl - a scene-controller configuration engine.

Edit the direct associations of a button.

The first association (slot 0) decides the mode of the whole list: if its device is
scene capable, the list is in scene mode (each device has a level & dimming
duration), otherwise it is in direct mode (each device is simply switched by Basic
Set). Changing the first device may therefore change every other association,
which the user must confirm first.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Final

from scenectl_codec import Association, ModeDescriptor, classify
from scenectl_codec.capabilities import NOT_ZWAVE, CapabilityRecord
from scenectl_codec.const import (
    DEFAULT_DIMMING_DURATION,
    DEFAULT_LEVEL,
    ZWAVE_ROOT_DEVICE_ID,
    InteractionKind,
)
from scenectl_codec.schemas import SZ_DIMMING_DURATION, SZ_LEVEL, parse_numeric_input

from . import exceptions as exc

if TYPE_CHECKING:
    from scenectl_codec import ControllerProfile

    from .host import DeviceDirectory


_LOGGER = logging.getLogger(__name__)


ConfirmT = Callable[[str], bool]

_CHECKBOX_DEFAULTS: Final = {
    SZ_LEVEL: DEFAULT_LEVEL,
    SZ_DIMMING_DURATION: DEFAULT_DIMMING_DURATION,
}

RANK_NOT_OFFERED: Final = 0
RANK_NOT_SCENE_CAPABLE: Final = 1
RANK_SCENE_CAPABLE: Final = 2


@dataclass(frozen=True)
class NoOp:
    """The edit changes nothing but the edited slot."""

    scene_controllable: bool
    slots: tuple[int, ...] = ()
    message: str = ""

    needs_confirmation: bool = field(default=False, init=False)


@dataclass(frozen=True)
class RequireConfirmThenKeep:
    """Scene -> direct: the devices are kept, their levels/durations are lost."""

    slots: tuple[int, ...]
    message: str

    scene_controllable: bool = field(default=False, init=False)
    needs_confirmation: bool = field(default=True, init=False)


@dataclass(frozen=True)
class RequireConfirmThenPrune:
    """Direct -> scene: the devices that are not scene capable are removed."""

    slots: tuple[int, ...]
    message: str

    scene_controllable: bool = field(default=True, init=False)
    needs_confirmation: bool = field(default=True, init=False)


Decision = NoOp | RequireConfirmThenKeep | RequireConfirmThenPrune


@dataclass(frozen=True)
class EditOutcome:
    """The result of an edit: the new mode, and any (user-facing) input errors."""

    mode: ModeDescriptor
    decision: Decision
    errors: tuple[exc.InvalidNumericInput, ...] = ()

    @property
    def messages(self) -> tuple[str, ...]:
        return tuple(str(e.message) for e in self.errors)


class AssociationManager:
    """Plan and apply the edits of a button's association list."""

    def __init__(
        self,
        profile: ControllerProfile,
        directory: DeviceDirectory,
        zwave_root_id: int = ZWAVE_ROOT_DEVICE_ID,
    ) -> None:
        self.profile = profile
        self._directory = directory
        self._root_id = zwave_root_id

    def __repr__(self) -> str:
        return f"AssociationManager(profile={self.profile.id})"

    def capabilities(self, device_id: int) -> CapabilityRecord:
        if not device_id:
            return NOT_ZWAVE
        return classify(device_id, self._directory, root_id=self._root_id)

    def _name(self, device_id: int) -> str:
        return self._directory.get_device_name(device_id) or f"device {device_id}"

    def plan(self, mode: ModeDescriptor, slot: int, device: int) -> Decision:
        """Return the consequences of setting the device of a slot (changes nothing)."""

        if self.profile.has_cooper_configuration:  # handles both kinds of device
            return NoOp(True)

        if slot != 0:
            return NoOp(mode.scene_controllable)

        assocs = mode.associations

        # if the first device is being unset, the second will become the first
        master, start = device, 1
        if not device and len(assocs) > 1:
            master, start = assocs[1].device, 2

        scene_controllable = self.capabilities(master).scene_capable

        if mode.scene_controllable and not scene_controllable:
            slots = tuple(
                i
                for i in range(start, len(assocs))
                if assocs[i].level is not None or assocs[i].dimming_duration is not None
            )
            if slots:
                return RequireConfirmThenKeep(
                    slots,
                    "You are changing the first device in a direct association list "
                    "to a non-scene capable device. Are you sure you want to lose all"
                    " level and dimming duration settings, including the "
                    f"{self._name(assocs[slots[-1]].device)}?",
                )

        elif not mode.scene_controllable and scene_controllable:
            slots = tuple(
                i
                for i in range(start, len(assocs))
                if assocs[i].device
                and self.capabilities(assocs[i].device).basic_set_only
            )
            if slots:
                return RequireConfirmThenPrune(
                    slots,
                    "You are changing the first device in a direct association list "
                    "to a scene capable device. Are you sure you want to remove all "
                    "non-scene capable devices from the list, including the "
                    f"{self._name(assocs[slots[-1]].device)}?",
                )

        return NoOp(scene_controllable)

    def add_placeholder(self, mode: ModeDescriptor) -> ModeDescriptor:
        """Return the mode with an extra (empty) association, if there is room."""

        if len(mode.associations) >= self.profile.max_direct_associations:
            raise exc.AssociationLimitReached(
                f"{self.profile.name} allows at most "
                f"{self.profile.max_direct_associations} direct associations"
            )
        return replace(mode, associations=mode.associations + (Association(0),))

    def apply(
        self,
        mode: ModeDescriptor,
        slot: int,
        device: int,
        level: int | str | bool | None = None,
        dimming_duration: int | str | bool | None = None,
        confirm: ConfirmT | None = None,
    ) -> EditOutcome:
        """Set the device (and its level/duration) of a slot, and return the new mode.

        A level or dimming duration of True (a ticked checkbox) is its default value,
        and one of False is no value.

        Will raise TransitionDeclined if the edit needs confirmation and it is not
        given, in which case nothing is changed.
        """

        if not 0 <= slot <= len(mode.associations):
            raise IndexError(
                f"Invalid slot: {slot} (the mode has {len(mode.associations)})"
            )
        if slot == len(mode.associations):
            mode = self.add_placeholder(mode)

        decision = self.plan(mode, slot, device)
        if decision.needs_confirmation and (
            confirm is None or not confirm(decision.message)
        ):
            raise exc.TransitionDeclined(decision.message)

        assocs = list(mode.associations)
        cooper = self.profile.has_cooper_configuration

        if isinstance(decision, RequireConfirmThenPrune):
            for i in decision.slots:
                _LOGGER.info("Removed device %s (slot %s)", assocs[i].device, i)
                assocs[i] = Association(0)  # dropped when next encoded

        prior = assocs[slot]
        errors: list[exc.InvalidNumericInput] = []

        def validated(
            field_: str, value: int | str | bool | None, old: int | None
        ) -> int | None:
            if isinstance(value, bool):  # before int, of which it is a subclass
                return _CHECKBOX_DEFAULTS[field_] if value else None
            try:
                return parse_numeric_input(field_, value)
            except exc.InvalidNumericInput as err:
                errors.append(err)
                return old

        new_level = validated(SZ_LEVEL, level, prior.level)
        new_duration = validated(
            SZ_DIMMING_DURATION, dimming_duration, prior.dimming_duration
        )

        if not self.capabilities(device).scene_capable:
            new_duration = None
            if not cooper:
                new_level = None

        assocs[slot] = Association(
            device, level=new_level, dimming_duration=new_duration
        )

        if not decision.scene_controllable:  # no levels, except for Cooper
            assocs = [
                Association(a.device, level=a.level if cooper else None) for a in assocs
            ]

        return EditOutcome(
            replace(
                mode,
                scene_controllable=decision.scene_controllable,
                associations=tuple(assocs),
            ),
            decision,
            errors=tuple(errors),
        )

    def candidate_rank(
        self,
        mode: ModeDescriptor,
        slot: int,
        device: int,
        non_scene_direct_allowed: bool,
    ) -> int:
        """Return how a device is offered for a slot: 0 (not), 1 (direct), 2 (scene).

        A button with a controller scene attached can only signal which of its
        devices to switch by scene activation, unless it is a toggle.
        """

        if any(
            a.device == device for i, a in enumerate(mode.associations) if i != slot
        ):
            return RANK_NOT_OFFERED

        caps = self.capabilities(device)
        if not caps.is_zwave:
            return RANK_NOT_OFFERED

        rank = RANK_SCENE_CAPABLE if caps.scene_capable else RANK_NOT_SCENE_CAPABLE

        if self.profile.has_cooper_configuration or slot == 0:
            return rank

        if (
            caps.basic_set_only
            and not non_scene_direct_allowed
            and mode.prefix != InteractionKind.TOGGLE
        ):
            return RANK_NOT_OFFERED

        return rank
