#!/usr/bin/env python3
"""SceneCtl - a scene-controller configuration engine.

Test the classification of devices by their capability strings.
"""

import pytest

from scenectl_codec import CapabilityRecord, classify, is_zwave_device
from scenectl_codec.capabilities import NOT_ZWAVE, parse_capabilities
from tests.conftest import (
    CAPS_BINARY,
    CAPS_MULTI,
    CAPS_SCENE,
    FakeDevice,
    FakeDirectory,
)

TESTS_PARSE = (  # capability string, command classes
    ("0x1234|43:1,44,38,", {43: 1, 44: 1, 38: 1}),
    (CAPS_SCENE, {43: 1, 44: 1, 38: 3, 37: 1}),
    (CAPS_BINARY, {37: 1, 39: 1}),
    ("0x1234|", None),
    ("0x1234|43,44,X,", None),
    ("43,44,", None),  # no '|'
    ("", None),
    (None, None),
)


@pytest.mark.parametrize("text,expected", TESTS_PARSE)
def test_parse_capabilities(text, expected) -> None:
    assert parse_capabilities(text) == expected


def test_classify() -> None:
    directory = FakeDirectory(
        {
            40: FakeDevice("Scene dimmer", "0x1234|43:1,44,38,"),
            41: FakeDevice("No version", "0x1234|43:0,44,38,"),  # 43 is not truthy
            42: FakeDevice("No capabilities", None),
            43: FakeDevice("Bad capabilities", "rubbish"),
        }
    )

    record = classify(40, directory)
    assert record.is_zwave and record.scene_capable and not record.basic_set_only
    assert record.multi_level and not record.binary
    assert dict(record.classes) == {43: 1, 44: 1, 38: 1}

    record = classify(41, directory)
    assert record.is_zwave and not record.scene_capable and record.basic_set_only

    record = classify(5, directory)
    assert record == CapabilityRecord(
        is_zwave=True, basic_set_only=True, binary=True
    )

    record = classify(9, directory)
    assert record.basic_set_only and record.multi_level and not record.binary

    # absent (or unparsable) capabilities: Z-Wave, but nothing else is known
    assert classify(42, directory) == CapabilityRecord(is_zwave=True)
    assert classify(43, directory) == CapabilityRecord(is_zwave=True)


def test_classify_not_zwave() -> None:
    directory = FakeDirectory()

    assert classify(30, directory) == NOT_ZWAVE  # no parent
    assert classify(99, directory) == NOT_ZWAVE  # no such device
    assert classify(6, directory, root_id=2) == NOT_ZWAVE  # a different root


def test_is_zwave_device() -> None:
    directory = FakeDirectory(
        {
            50: FakeDevice("Child", CAPS_MULTI, parent=32),  # a great-grandchild
        }
    )

    assert is_zwave_device(6, directory)
    assert is_zwave_device(32, directory)  # a grandchild
    assert not is_zwave_device(50, directory)  # too deep
    assert not is_zwave_device(30, directory)
    assert not is_zwave_device(1, directory)  # the root itself

    assert classify(32, directory).scene_capable
