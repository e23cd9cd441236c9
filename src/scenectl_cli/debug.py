#!/usr/bin/env python3
"""A CLI for the scenectl library.

Attach a remote debugger (-z waits for it, -zz does not).
"""

from __future__ import annotations

from typing import Final

SZ_DBG_MODE: Final = "debug_mode"

DEBUG_ADDR: Final = "0.0.0.0"
DEBUG_PORT: Final = 5678


def start_debugging(wait_for_client: bool, port: int = DEBUG_PORT) -> None:
    import debugpy  # type: ignore[import-untyped]

    debugpy.listen(address=(DEBUG_ADDR, port))
    print(f" - debugger is listening on: {DEBUG_ADDR}:{port}")

    if wait_for_client:
        print("   - waiting for the debugger to attach...")
        debugpy.wait_for_client()
        print("   - debugger attached, continuing.")
