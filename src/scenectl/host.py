#!/usr/bin/env python3
"""SceneCtl - the interfaces of the host (home-automation controller).

The host owns the device state, the transport to the devices, the device directory
and the scenes. All are consumed, never implemented, by this package (other than
for testing).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable


@runtime_checkable
class DeviceStateStore(Protocol):
    """The persisted state variables of the host's devices."""

    def get(self, device_id: int, service_id: str, variable: str) -> str | None: ...

    def set(
        self, device_id: int, service_id: str, variable: str, value: str
    ) -> None: ...


@runtime_checkable
class ActionInvoker(Protocol):
    """The remote actions of the host's devices."""

    def invoke(
        self,
        device_id: int,
        service_id: str,
        action: str,
        arguments: Mapping[str, str | int],
    ) -> None: ...


@runtime_checkable
class DeviceDirectory(Protocol):
    """The host's devices: their parents, names and capabilities."""

    def get_capability_string(self, device_id: int) -> str | None: ...

    def get_parent_device(self, device_id: int) -> int | None: ...

    def get_device_name(self, device_id: int) -> str | None: ...

    def device_exists(self, device_id: int) -> bool: ...


@runtime_checkable
class SceneRegistry(Protocol):
    """The host's scenes, each triggered by a scene controller's button."""

    def find_scene(
        self, device_id: int, scene_number: int, template: int | None
    ) -> int | None: ...

    def create_scene(
        self, device_id: int, scene_number: int, template: int, name: str
    ) -> int: ...
