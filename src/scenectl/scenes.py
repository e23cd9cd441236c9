#!/usr/bin/env python3
"""SceneCtl - the (host) scenes triggered by a controller's buttons."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from .host import SceneRegistry


_LOGGER = logging.getLogger(__name__)


MAX_SCENE_NAME_LENGTH: Final[int] = 32

TRIGGER_TEMPLATE_ACTIVATE: Final[int] = 1  # also for momentary buttons
TRIGGER_TEMPLATE_DEACTIVATE: Final[int] = 2

_CONTROLLER_SUFFIX: Final = " Controller"
_EVOLVE_PREFIX: Final = "Evolve "


class Activation(IntEnum):
    OFF = 0
    ON = 1
    MOMENTARY = 2

    @property
    def template(self) -> int:
        """Return the host's trigger template of the activation."""
        return TRIGGER_TEMPLATE_ACTIVATE if self else TRIGGER_TEMPLATE_DEACTIVATE

    @property
    def suffix(self) -> str:
        return {Activation.OFF: " Off", Activation.ON: " On"}.get(self, "")


@dataclass(frozen=True)
class SceneKey:
    """The trigger of a scene: a button (scene number) of a controller."""

    device_id: int
    scene_number: int
    activation: Activation = Activation.MOMENTARY

    @property
    def template(self) -> int:
        return self.activation.template


@dataclass(frozen=True)
class SceneHandle:
    scene_id: int
    name: str | None  # None if the scene was found, rather than created
    key: SceneKey
    created: bool = False


def create_scene_name(
    device_name: str,
    label: str,
    activation: Activation = Activation.MOMENTARY,
    max_length: int = MAX_SCENE_NAME_LENGTH,
) -> str:
    """Return a scene name, made to fit within the host's limit (0 is no limit).

    Shortens the device name, then the label, a word at a time, before truncating.
    """

    device_name = device_name.strip()
    label = label.replace("\\r", " ").replace("-", "").strip()  # 2-line labels
    action = activation.suffix

    while True:
        name = f"{device_name} {label}{action}"
        if not max_length or len(name) <= max_length:
            return name

        if device_name.endswith(_CONTROLLER_SUFFIX) and len(device_name) > len(
            _CONTROLLER_SUFFIX
        ):
            device_name = device_name[: -len(_CONTROLLER_SUFFIX)]
        elif device_name.startswith(_EVOLVE_PREFIX) and len(device_name) > len(
            _EVOLVE_PREFIX
        ):
            device_name = device_name[len(_EVOLVE_PREFIX) :]
        elif device_name.rfind(" ") > 0:
            device_name = device_name[: device_name.rfind(" ")]
        elif label.rfind(" ") > 0:
            label = label[: label.rfind(" ")]
        elif (length := max_length - len(f" {label}{action}")) > 0:
            return f"{device_name[:length]} {label}{action}"
        else:
            length = max(max_length - len(action), 0)
            return f"{device_name} {label}"[:length] + action


class SceneIndex:
    """A simple in-memory SQLite3 database of scenes, keyed by their trigger.

    There can be only one scene per trigger (device, scene number, template).
    """

    def __init__(self) -> None:
        self._cx = sqlite3.connect(":memory:")  # Connect to a SQLite DB in memory
        self._cu = self._cx.cursor()  # Create a cursor

        self._setup_db_schema()

    def __repr__(self) -> str:
        return f"SceneIndex({len(self)} scenes)"

    def __len__(self) -> int:
        self._cu.execute("SELECT COUNT(*) FROM scenes")
        return int(self._cu.fetchone()[0])

    def _setup_db_schema(self) -> None:
        """Setup the database schema."""

        self._cu.execute(
            """
            CREATE TABLE scenes (
                id           INTEGER PRIMARY KEY AUTOINCREMENT,
                device       INTEGER NOT NULL,
                scene_number INTEGER NOT NULL,
                template     INTEGER NOT NULL,
                name         TEXT    NOT NULL,
                UNIQUE (device, scene_number, template)
            )
            """
        )
        self._cu.execute("CREATE INDEX idx_device ON scenes (device)")

        self._cx.commit()

    def close(self) -> None:
        self._cx.commit()
        self._cx.close()

    def find_scene(
        self, device_id: int, scene_number: int, template: int | None = None
    ) -> int | None:
        """Return the id of the scene with this trigger (any template if None)."""

        sql = "SELECT id FROM scenes WHERE device = ? AND scene_number = ?"
        params: tuple[int, ...] = (device_id, scene_number)
        if template is not None:
            sql += " AND template = ?"
            params += (template,)

        self._cu.execute(sql + " ORDER BY id LIMIT 1", params)
        row = self._cu.fetchone()
        return None if row is None else int(row[0])

    def create_scene(
        self, device_id: int, scene_number: int, template: int, name: str
    ) -> int:
        """Create a scene with this trigger, and return its id.

        Will raise sqlite3.IntegrityError if there is already such a scene.
        """

        self._cu.execute(
            "INSERT INTO scenes (device, scene_number, template, name)"
            " VALUES (?, ?, ?, ?)",
            (device_id, scene_number, template, name),
        )
        self._cx.commit()
        return int(self._cu.lastrowid)  # type: ignore[arg-type]

    def scene_name(self, scene_id: int) -> str | None:
        self._cu.execute("SELECT name FROM scenes WHERE id = ?", (scene_id,))
        row = self._cu.fetchone()
        return None if row is None else str(row[0])

    def scenes(self, device_id: int | None = None) -> list[tuple[int, int, int, str]]:
        """Return the (id, scene number, template, name) of the scenes (of a device)."""

        if device_id is None:
            self._cu.execute(
                "SELECT id, scene_number, template, name FROM scenes ORDER BY id"
            )
        else:
            self._cu.execute(
                "SELECT id, scene_number, template, name FROM scenes"
                " WHERE device = ? ORDER BY id",
                (device_id,),
            )
        return [tuple(r) for r in self._cu.fetchall()]  # type: ignore[misc]


def find_or_create(registry: SceneRegistry, key: SceneKey, name: str) -> SceneHandle:
    """Return the scene of a trigger, creating it (with this name) if required.

    The lookup always precedes the creation, so a scene is created at most once.
    """

    if (scene_id := registry.find_scene(*_params(key))) is not None:
        _LOGGER.debug("Found scene %s for %s", scene_id, key)
        return SceneHandle(scene_id, None, key)

    scene_id = registry.create_scene(*_params(key), name)
    _LOGGER.info("Created scene %s (%s) for %s", scene_id, name, key)
    return SceneHandle(scene_id, name, key, created=True)


def _params(key: SceneKey) -> tuple[int, int, int]:
    return key.device_id, key.scene_number, key.template
