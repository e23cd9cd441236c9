#!/usr/bin/env python3
"""SceneCtl - a scene-controller configuration engine.

The scene controller (associations, scenes, host state).
"""

__version__ = "0.4.2"
VERSION = __version__
