#!/usr/bin/env python3
"""SceneCtl - a scene-controller configuration engine.

Fixtures & fakes of the host (device state, actions, directory) for testing.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import pytest

from scenectl import SceneController, SceneIndex
from scenectl_codec import COOPER_RFWC5, EVOLVE_LCD1, NEXIA_ONE_TOUCH
from scenectl_codec.const import SID_SCENE_CONTROLLER, ZWAVE_ROOT_DEVICE_ID

CONTROLLER_ID = 20  # the host device that holds the controller's state
ZWAVE_NODE_ID = 21  # its Z-Wave node (has the VersionInfo variable)

# capability strings, as reported by the host
CAPS_SCENE = "211,156,0,4,16,1,L,R,B,RS,|43,44,38:3,37,"  # a dimmer
CAPS_BINARY = "211,156,0,4,16,1,L,R,B,RS,|37,39,"  # an appliance module
CAPS_MULTI = "211,156,0,4,17,1,L,R,B,RS,|38,39,"  # a dimmer, no scene support


@dataclass
class FakeDevice:
    name: str
    capabilities: str | None = None
    parent: int | None = ZWAVE_ROOT_DEVICE_ID


class FakeStateStore:
    """An in-memory DeviceStateStore."""

    def __init__(self) -> None:
        self.vars: dict[tuple[int, str, str], str] = {}

    def get(self, device_id: int, service_id: str, variable: str) -> str | None:
        return self.vars.get((device_id, service_id, variable))

    def set(self, device_id: int, service_id: str, variable: str, value: str) -> None:
        assert isinstance(value, str)
        self.vars[(device_id, service_id, variable)] = value

    def controller_var(self, variable: str) -> str | None:
        return self.get(CONTROLLER_ID, SID_SCENE_CONTROLLER, variable)


class FakeActionInvoker:
    """An ActionInvoker that records the actions invoked."""

    def __init__(self) -> None:
        self.actions: list[tuple[int, str, str, dict[str, Any]]] = []

    def invoke(
        self,
        device_id: int,
        service_id: str,
        action: str,
        arguments: Mapping[str, str | int],
    ) -> None:
        self.actions.append((device_id, service_id, action, dict(arguments)))

    def named(self, action: str) -> list[dict[str, Any]]:
        return [a[3] for a in self.actions if a[2] == action]


class FakeDirectory:
    """A DeviceDirectory of a few Z-Wave (and other) devices."""

    def __init__(self, devices: dict[int, FakeDevice] | None = None) -> None:
        self.devices: dict[int, FakeDevice] = {
            ZWAVE_ROOT_DEVICE_ID: FakeDevice("ZWave", parent=None),
            CONTROLLER_ID: FakeDevice("Evolve LCD1 Lounge Controller"),
            5: FakeDevice("Porch Switch", CAPS_BINARY),
            6: FakeDevice("Lounge Dimmer", CAPS_SCENE),
            7: FakeDevice("Garage Switch", CAPS_BINARY),
            8: FakeDevice("Kitchen Dimmer", CAPS_SCENE),
            9: FakeDevice("Hall Dimmer", CAPS_MULTI),
            30: FakeDevice("Virtual Switch", None, parent=None),  # not Z-Wave
            31: FakeDevice("Multi-channel Node", CAPS_BINARY),
            32: FakeDevice("Channel 1", CAPS_SCENE, parent=31),  # a grandchild
        }
        if devices:
            self.devices |= devices

    def get_capability_string(self, device_id: int) -> str | None:
        return self.devices[device_id].capabilities if device_id in self else None

    def get_parent_device(self, device_id: int) -> int | None:
        return self.devices[device_id].parent if device_id in self else None

    def get_device_name(self, device_id: int) -> str | None:
        return self.devices[device_id].name if device_id in self else None

    def device_exists(self, device_id: int) -> bool:
        return device_id in self

    def __contains__(self, device_id: object) -> bool:
        return device_id in self.devices


@pytest.fixture()
def store() -> FakeStateStore:
    return FakeStateStore()


@pytest.fixture()
def invoker() -> FakeActionInvoker:
    return FakeActionInvoker()


@pytest.fixture()
def directory() -> FakeDirectory:
    return FakeDirectory()


@pytest.fixture()
def registry():
    index = SceneIndex()
    yield index
    index.close()


@pytest.fixture()
def notices() -> list[str]:
    return []


def _controller(profile, store, invoker, directory, registry, notices):
    return SceneController(
        CONTROLLER_ID,
        profile,
        store,
        invoker,
        directory,
        registry,
        zwave_device_id=ZWAVE_NODE_ID,
        notify=notices.append,
    )


@pytest.fixture()
def evolve(store, invoker, directory, registry, notices) -> SceneController:
    return _controller(EVOLVE_LCD1, store, invoker, directory, registry, notices)


@pytest.fixture()
def cooper(store, invoker, directory, registry, notices) -> SceneController:
    return _controller(COOPER_RFWC5, store, invoker, directory, registry, notices)


@pytest.fixture()
def nexia(store, invoker, directory, registry, notices) -> SceneController:
    return _controller(NEXIA_ONE_TOUCH, store, invoker, directory, registry, notices)
