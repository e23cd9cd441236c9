#!/usr/bin/env python3
"""SceneCtl - a scene-controller configuration engine.

The button mode codec (profiles, mode strings, scene addresses, capabilities).
"""

__version__ = "0.4.2"
VERSION = __version__
