#!/usr/bin/env python3
"""SceneCtl - a scene-controller configuration engine.

Works with (amongst others):
- Evolve LCD1 (five buttons, LCD screens)
- Cooper RFWC5 (five buttons, no screen)
- Nexia One Touch (fifteen buttons, LCD screens)
"""

from __future__ import annotations

import logging

from scenectl_codec import (  # noqa: F401
    Association,
    ControllerProfile,
    ModeDescriptor,
    ScreenAddress,
    decode,
    encode,
    get_profile,
    normalise,
)

from .associations import (  # noqa: F401
    AssociationManager,
    Decision,
    EditOutcome,
    NoOp,
    RequireConfirmThenKeep,
    RequireConfirmThenPrune,
)
from .controller import ButtonRow, SceneController  # noqa: F401
from .scenes import (  # noqa: F401
    Activation,
    SceneHandle,
    SceneIndex,
    SceneKey,
    create_scene_name,
    find_or_create,
)
from .version import VERSION  # noqa: F401

_LOGGER = logging.getLogger(__name__)
