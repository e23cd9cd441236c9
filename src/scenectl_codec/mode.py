#!/usr/bin/env python3
"""SceneCtl - a scene-controller configuration engine.

Decode/encode the mode strings that configure a button of a scene controller.

The persisted form is (in its canonical form):
  prefix [target ':'] ['S' [scene_id '@' [off_scene_id '@']]] [entry (';' entry)*]
  entry := device [',' level [',' dimming_duration]]

Older writers left a number of variants in deployed configurations, all of which
must still be read (but are never written): see the parser's branches.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from . import exceptions as exc
from .address import ScreenAddress
from .const import (
    MAX_DIMMING_DURATION,
    MAX_LEVEL,
    NO_VALUE,
    SCREEN_ID_REGEX,
    InteractionKind,
    SceneMarker,
)

if TYPE_CHECKING:
    from .profiles import ControllerProfile


_LOGGER = logging.getLogger(__name__)


DeviceFilterT = Callable[[int], bool]


@dataclass(frozen=True)
class Association:
    """A direct association: the device (0 is a placeholder) and its settings."""

    device: int
    level: int | None = None
    dimming_duration: int | None = None

    @property
    def is_placeholder(self) -> bool:
        return not self.device

    def __str__(self) -> str:
        if self.dimming_duration is not None:
            level = NO_VALUE if self.level is None else self.level
            return f"{self.device},{level},{self.dimming_duration}"
        if self.level is not None:
            return f"{self.device},{self.level}"
        return str(self.device)


@dataclass(frozen=True)
class ModeDescriptor:
    """The decoded form of a mode string."""

    prefix: InteractionKind
    target_screen: ScreenAddress | None = None
    scene_controllable: bool = False
    scene_id: int | None = None
    off_scene_id: int | None = None
    associations: tuple[Association, ...] = ()

    def __str__(self) -> str:
        return encode(self)

    @property
    def devices(self) -> tuple[int, ...]:
        """Return the devices of the (non-placeholder) associations."""
        return tuple(a.device for a in self.associations if a.device)

    def with_prefix(
        self, prefix: InteractionKind | str, target_screen: ScreenAddress | None = None
    ) -> ModeDescriptor:
        """Return a copy with a new interaction kind (and switch target, if any)."""

        prefix = InteractionKind(prefix)
        if prefix == InteractionKind.SWITCH_SCREEN:
            if target_screen is None:
                raise exc.ScreenAddressInvalid("A screen switch must have a target")
            return replace(self, prefix=prefix, target_screen=target_screen)
        return replace(self, prefix=prefix, target_screen=None)


#
# The parser...


class _Scanner:
    """A cursor over a mode string, for the recursive-descent parser."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def __repr__(self) -> str:
        return f"_Scanner({self.text[: self.pos]!r} ^ {self.text[self.pos :]!r})"

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    @property
    def rest(self) -> str:
        return self.text[self.pos :]

    def peek(self) -> str:
        return self.text[self.pos] if not self.at_end else ""

    def take(self) -> str:
        char = self.peek()
        self.pos += 1 if char else 0
        return char

    def digits(self) -> str:
        start = self.pos
        while self.peek() and self.peek() in "0123456789":  # not isdigit(): "²"
            self.pos += 1
        return self.text[start : self.pos]


def _parse_prefix(scanner: _Scanner) -> InteractionKind:
    char = scanner.take()
    try:
        return InteractionKind(char)
    except ValueError:
        raise exc.MalformedModeString(f"Unknown prefix: {char!r}") from None


def _parse_screen_switch(scanner: _Scanner) -> ScreenAddress | None:
    """Consume a 'C2:' (or 'C2::') target, if there is one."""

    if not (match := SCREEN_ID_REGEX.SWITCH.match(scanner.rest)):
        return None

    # :+ not :, as some older writers appended the colon twice
    scanner.pos += match.end()
    return ScreenAddress.from_str(match.group(1))


def _parse_legacy_screen_switch(scanner: _Scanner) -> ScreenAddress:
    """Consume an old-style 'NC2' (no colon): the whole remainder is the target."""

    target = scanner.rest
    if not ScreenAddress.is_valid_id(target):
        raise exc.MalformedModeString(f"Invalid screen switch target: {target!r}")
    scanner.pos = len(scanner.text)
    return ScreenAddress.from_str(target)


def _parse_scene_ids(scanner: _Scanner) -> tuple[int | None, int | None]:
    """Consume the 'nn@' and 'nn@' that may follow the scene marker.

    Digits without a trailing '@' are not scene ids, they are (left to be parsed
    as) the first association.
    """

    ids: list[int] = []
    while len(ids) < 2:
        start = scanner.pos
        if (value := scanner.digits()) and scanner.peek() == "@":
            scanner.take()
            ids.append(int(value))
        else:
            scanner.pos = start
            break

    ids.extend([None] * (2 - len(ids)))  # type: ignore[list-item]
    return ids[0], ids[1]


def _parse_field(token: str | None, maximum: int) -> int | None:
    if token is None:
        return None
    value = int(token)
    return value if value <= maximum else None  # incl. 255, which is 'no value'


def _parse_entry(entry: str) -> Association | None:
    """Return the association of an entry, or None if it is empty/malformed."""

    scanner = _Scanner(entry.strip())
    tokens: list[str] = []

    while len(tokens) < 3:
        if not (value := scanner.digits()):
            break
        tokens.append(value)
        if scanner.peek() != ",":
            break
        scanner.take()  # a trailing ',' is tolerated

    if not tokens or not scanner.at_end:
        return None

    tokens.extend([None] * (3 - len(tokens)))  # type: ignore[list-item]
    return Association(
        int(tokens[0]),
        level=_parse_field(tokens[1], MAX_LEVEL),
        dimming_duration=_parse_field(tokens[2], MAX_DIMMING_DURATION),
    )


def _parse_associations(
    profile: ControllerProfile,
    text: str,
    is_known_device: DeviceFilterT | None,
) -> list[Association]:
    result: list[Association] = []

    for entry in text.split(";"):
        if (assoc := _parse_entry(entry)) is None:
            if entry.strip():
                _LOGGER.debug("Mode string: skipped a malformed entry: %r", entry)
            continue

        try:
            if not assoc.device:
                raise exc.UnresolvedAssociationDevice("Device 0 is a placeholder")
            if is_known_device and not is_known_device(assoc.device):
                raise exc.UnresolvedAssociationDevice(
                    f"Device {assoc.device} is not known"
                )
        except exc.UnresolvedAssociationDevice as err:
            _LOGGER.debug("Mode string: dropped an association: %s", err)
            continue

        if len(result) >= profile.max_direct_associations:
            _LOGGER.debug(
                "Mode string: dropped %s (profile %s allows %s associations)",
                entry,
                profile.id,
                profile.max_direct_associations,
            )
            break
        result.append(assoc)

    return result


def _parse(
    profile: ControllerProfile, text: str, is_known_device: DeviceFilterT | None
) -> ModeDescriptor:
    scanner = _Scanner(text)

    prefix = _parse_prefix(scanner)

    if target := _parse_screen_switch(scanner):
        # older writers stored a switch behind an 'M' prefix, e.g. 'MC2:'
        prefix = InteractionKind.SWITCH_SCREEN

    elif prefix == InteractionKind.SWITCH_SCREEN:
        if scanner.at_end:  # a bare 'N': switch to the default screen
            return ModeDescriptor(
                prefix, target_screen=ScreenAddress.from_str(profile.default_screen)
            )
        # older writers stored the target with no colon (and nothing after it)
        target = _parse_legacy_screen_switch(scanner)
        return ModeDescriptor(prefix, target_screen=target)

    scene_controllable = False
    scene_id = off_scene_id = None

    if scanner.peek() in (SceneMarker.SCENE, SceneMarker.COOPER):
        scanner.take()  # 'C' (Cooper) is read as 'S', and will be written as 'S'
        scene_controllable = True
        scene_id, off_scene_id = _parse_scene_ids(scanner)

    associations = _parse_associations(profile, scanner.rest, is_known_device)

    if not scene_controllable:  # direct mode has no levels (Cooper's excepted)
        associations = [
            Association(
                a.device,
                level=a.level if profile.has_cooper_configuration else None,
            )
            for a in associations
        ]

    return ModeDescriptor(
        prefix,
        target_screen=target,
        scene_controllable=scene_controllable,
        scene_id=scene_id,
        off_scene_id=off_scene_id,
        associations=tuple(associations),
    )


def decode(
    profile: ControllerProfile,
    text: str | None,
    is_known_device: DeviceFilterT | None = None,
) -> ModeDescriptor:
    """Return the descriptor of a mode string (never raises for a bad string).

    A missing or malformed string decodes as the profile's default mode. Entries
    for devices that the (optional) callback does not recognise are dropped.
    """

    if not text:
        text = profile.default_mode_code

    try:
        return _parse(profile, text, is_known_device)
    except (exc.MalformedModeString, exc.ScreenAddressInvalid) as err:
        _LOGGER.info(
            "Mode string %r is malformed, using the default (%s): %s",
            text,
            profile.default_mode_code,
            err,
        )

    if text == profile.default_mode_code:  # no further fallback
        raise exc.ProfileInvalid(
            f"Profile {profile.id} has an invalid default mode: {text!r}"
        )
    return decode(profile, profile.default_mode_code)


def encode(mode: ModeDescriptor) -> str:
    """Return the canonical mode string of a descriptor."""

    result = str(mode.prefix)

    if mode.prefix == InteractionKind.SWITCH_SCREEN and mode.target_screen:
        result += f"{mode.target_screen}:"

    if mode.scene_controllable:
        result += SceneMarker.SCENE
        if mode.scene_id is not None:
            result += f"{mode.scene_id}@"
            if mode.off_scene_id is not None:
                result += f"{mode.off_scene_id}@"

    return result + ";".join(str(a) for a in mode.associations if a.device)


def normalise(
    profile: ControllerProfile,
    text: str | None,
    is_known_device: DeviceFilterT | None = None,
) -> str:
    """Return the canonical form of a (possibly legacy) mode string."""
    return encode(decode(profile, text, is_known_device=is_known_device))
