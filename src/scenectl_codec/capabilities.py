#!/usr/bin/env python3
"""SceneCtl - a scene-controller configuration engine.

Classify a device from its (Z-Wave) capability string.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Final, Protocol

from .const import ZWAVE_MAX_PARENT_DEPTH, ZWAVE_ROOT_DEVICE_ID, CommandClass

if TYPE_CHECKING:
    from collections.abc import Mapping


_LOGGER = logging.getLogger(__name__)


# e.g. "0x1234|43:1,44,38," - the command classes follow the '|', each terminated by ','
CAPABILITIES_REGEX: Final = re.compile(r"^[^|]+\|([0-9:,]+)$")
COMMAND_CLASS_REGEX: Final = re.compile(r"([0-9]+):?([0-9]*),")


class CapabilitySource(Protocol):
    """The part of the host's device directory needed to classify a device."""

    def get_capability_string(self, device_id: int) -> str | None: ...

    def get_parent_device(self, device_id: int) -> int | None: ...


@dataclass(frozen=True)
class CapabilityRecord:
    """The derived capabilities of a device (never persisted)."""

    is_zwave: bool = False
    scene_capable: bool = False
    basic_set_only: bool = False
    multi_level: bool = False
    binary: bool = False
    classes: Mapping[int, int] = field(
        default_factory=lambda: MappingProxyType({}), compare=False
    )


NOT_ZWAVE: Final = CapabilityRecord()


def parse_capabilities(text: str | None) -> dict[int, int] | None:
    """Return the command classes (code: version) of a capability string.

    Return None if the string is absent or cannot be parsed. A class without a
    version is version 1.
    """

    if not text or not (match := CAPABILITIES_REGEX.match(text)):
        return None

    return {
        int(code): int(version) if version else 1
        for code, version in COMMAND_CLASS_REGEX.findall(match.group(1))
    }


def is_zwave_device(
    device_id: int, source: CapabilitySource, root_id: int = ZWAVE_ROOT_DEVICE_ID
) -> bool:
    """Return True if the device is a child (or grandchild) of the Z-Wave root."""

    for _ in range(ZWAVE_MAX_PARENT_DEPTH):
        if not (parent := source.get_parent_device(device_id)):
            return False
        if parent == root_id:
            return True
        device_id = parent
    return False


def record_from_classes(classes: Mapping[int, int] | None) -> CapabilityRecord:
    """Return the record of a Z-Wave device with these command classes."""

    if classes is None:
        return CapabilityRecord(is_zwave=True)

    scene_capable = bool(
        classes.get(CommandClass.SCENE_ACTIVATION)
        and classes.get(CommandClass.SCENE_ACTUATOR_CONF)
    )
    multi_level = bool(classes.get(CommandClass.SWITCH_MULTILEVEL))

    return CapabilityRecord(
        is_zwave=True,
        scene_capable=scene_capable,
        basic_set_only=not scene_capable,  # all Z-Wave devices support Basic Set
        multi_level=multi_level,
        binary=not multi_level and bool(classes.get(CommandClass.SWITCH_BINARY)),
        classes=MappingProxyType(dict(classes)),
    )


def classify(
    device_id: int, source: CapabilitySource, root_id: int = ZWAVE_ROOT_DEVICE_ID
) -> CapabilityRecord:
    """Return the capabilities of a device, according to its host's directory."""

    if not is_zwave_device(device_id, source, root_id=root_id):
        return NOT_ZWAVE

    text = source.get_capability_string(device_id)
    if (classes := parse_capabilities(text)) is None:
        _LOGGER.debug("Device %s has no (valid) capabilities: %r", device_id, text)

    return record_from_classes(classes)
