#!/usr/bin/env python3
"""A CLI for the scenectl library."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Final

import click
from colorama import Fore, Style, init as colorama_init

from scenectl import exceptions as exc
from scenectl.schemas import load_profiles
from scenectl_codec import (
    PROFILES,
    ControllerProfile,
    ModeDescriptor,
    ScreenAddress,
    decode,
    normalise,
    scene_number,
)
from scenectl_codec.address import button_group
from scenectl_codec.capabilities import parse_capabilities, record_from_classes
from scenectl_codec.logger import DEFAULT_DATEFMT, DEFAULT_FMT

from .debug import SZ_DBG_MODE, start_debugging

# this is called after import colorlog to ensure its handlers wrap the correct streams
logging.basicConfig(level=logging.WARNING, format=DEFAULT_FMT, datefmt=DEFAULT_DATEFMT)


CLASSIFY: Final = "classify"
DECODE: Final = "decode"
NORMALISE: Final = "normalise"
SCENE: Final = "scene"
SCREENS: Final = "screens"

SZ_KNOWN_DEVICES: Final = "known_devices"
SZ_LCD_VERSION: Final = "lcd_version"
SZ_PROFILE: Final = "profile"

DEFAULT_PROFILE: Final = "EVOLVELCD1"

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


def _fail(msg: str) -> None:
    print(f"{Style.BRIGHT}{Fore.RED}Error: {msg}", file=sys.stderr)


def select_profile(profile_id: str, config_file: Any = None) -> ControllerProfile:
    """Return a built-in profile, or one from a YAML file (which takes precedence)."""

    profiles = dict(PROFILES)
    if config_file:
        profiles |= load_profiles(config_file.read())

    try:
        return profiles[profile_id.upper()]
    except KeyError:
        raise click.BadParameter(
            f"{profile_id!r} is not one of: {', '.join(profiles)}",
            param_hint="'-p' / '--profile'",
        ) from None


class DeviceListParamType(click.ParamType):
    name = "device_ids"

    def convert(self, value: Any, param, ctx) -> frozenset[int]:
        if isinstance(value, frozenset):
            return value
        try:
            return frozenset(int(v) for v in str(value).split(",") if v.strip())
        except ValueError:
            self.fail(f"{value!r} is not a list of device ids (e.g. 5,6,7)", param, ctx)


class ScreenParamType(click.ParamType):
    name = "screen_id"

    def convert(self, value: Any, param, ctx) -> ScreenAddress:
        if isinstance(value, ScreenAddress):
            return value
        if ScreenAddress.is_valid_id(str(value).upper()):
            return ScreenAddress.from_str(str(value).upper())
        self.fail(f"{value!r} is not a valid screen id (e.g. C1)", param, ctx)


# Args/Params for all commands
@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("-z", "--debug-mode", count=True, help="enable debugger")
@click.option(
    "-p", "--profile", default=DEFAULT_PROFILE, help="the controller profile id"
)
@click.option(
    "-c", "--config-file", type=click.File("r"), help="a YAML file of profiles"
)
@click.option("-l", "--lcd-version", type=int, help="the LCD firmware version")
@click.pass_context
def cli(ctx, profile: str, config_file=None, **kwargs: Any) -> None:
    """A CLI for the scenectl library."""

    if kwargs[SZ_DBG_MODE] > 0:  # Do first
        start_debugging(kwargs[SZ_DBG_MODE] == 1)

    try:
        ctx.obj = {
            SZ_PROFILE: select_profile(profile, config_file=config_file),
            SZ_LCD_VERSION: kwargs[SZ_LCD_VERSION],
        }
    except exc.ProfileInvalid as err:
        raise click.BadParameter(
            str(err), param_hint="'-c' / '--config-file'"
        ) from err


#
# 1/5: DECODE (a mode string)
@click.command()
@click.argument("mode-string", default="")
@click.option(  # --known-devices 5,6,7
    "-k", "--known-devices", type=DeviceListParamType(), help="e.g. '5,6,7'"
)
@click.pass_obj
def decode_mode(obj, **kwargs: Any):
    """Decode a mode string (an empty one is the profile's default mode)."""
    return DECODE, obj, kwargs


#
# 2/5: NORMALISE (mode strings, from the command line or STDIN)
@click.command()
@click.argument("mode-strings", nargs=-1)
@click.option(
    "-k", "--known-devices", type=DeviceListParamType(), help="e.g. '5,6,7'"
)
@click.pass_obj
def normalise_mode(obj, **kwargs: Any):
    """Rewrite mode strings into their canonical form."""

    if not kwargs["mode_strings"]:
        kwargs["mode_strings"] = tuple(line.strip() for line in sys.stdin)
    return NORMALISE, obj, kwargs


#
# 3/5: SCENE (the scene number of a button)
@click.command()
@click.argument("screen", type=ScreenParamType())
@click.argument("button", type=click.IntRange(min=1))
@click.option("-s", "--state", type=click.IntRange(min=1), default=1)
@click.pass_obj
def scene(obj, **kwargs: Any):
    """Return the scene number of a button (and state) of a screen."""
    return SCENE, obj, kwargs


#
# 4/5: CLASSIFY (a capability string)
@click.command()
@click.argument("capabilities")
@click.pass_obj
def classify(obj, **kwargs: Any):
    """Classify a Z-Wave device by its capability string."""
    return CLASSIFY, obj, kwargs


#
# 5/5: SCREENS (of a profile and firmware version)
@click.command()
@click.pass_obj
def screens(obj, **kwargs: Any):
    """List the screens of the controller (for its firmware version)."""
    return SCREENS, obj, kwargs


def mode_to_dict(mode: ModeDescriptor) -> dict[str, Any]:
    return {
        "prefix": str(mode.prefix),
        "kind": mode.prefix.display_name,
        "target_screen": mode.target_screen and str(mode.target_screen),
        "scene_controllable": mode.scene_controllable,
        "scene_id": mode.scene_id,
        "off_scene_id": mode.off_scene_id,
        "associations": [
            {
                "device": a.device,
                "level": a.level,
                "dimming_duration": a.dimming_duration,
            }
            for a in mode.associations
        ],
        "canonical": str(mode),
    }


def run_command(command: str, obj: dict[str, Any], **kwargs: Any) -> Any:
    """Return the (JSON-serialisable) result of a command."""

    profile: ControllerProfile = obj[SZ_PROFILE]

    known = kwargs.get(SZ_KNOWN_DEVICES)
    is_known = None if known is None else known.__contains__

    if command == DECODE:
        return mode_to_dict(
            decode(profile, kwargs["mode_string"], is_known_device=is_known)
        )

    if command == NORMALISE:
        return [
            normalise(profile, s, is_known_device=is_known)
            for s in kwargs["mode_strings"]
        ]

    if command == SCENE:
        screen, button, state = kwargs["screen"], kwargs["button"], kwargs["state"]
        return {
            "screen": str(screen),
            "button": button,
            "state": state,
            "group": button_group(profile, button),
            "scene_number": scene_number(profile, screen, button, state),
        }

    if command == CLASSIFY:
        record = record_from_classes(parse_capabilities(kwargs["capabilities"]))
        return {
            "is_zwave": record.is_zwave,
            "scene_capable": record.scene_capable,
            "basic_set_only": record.basic_set_only,
            "multi_level": record.multi_level,
            "binary": record.binary,
            "classes": {str(k): v for k, v in sorted(record.classes.items())},
        }

    if command == SCREENS:
        return [
            {"id": screen_id, "name": name}
            for screen_id, name in profile.available_screens(obj[SZ_LCD_VERSION])
        ]

    raise NotImplementedError(f"Unknown command: {command}")


cli.add_command(decode_mode, name=DECODE)
cli.add_command(normalise_mode, name=NORMALISE)
cli.add_command(scene)
cli.add_command(classify)
cli.add_command(screens)


def main() -> None:
    colorama_init(autoreset=True)

    try:
        result = cli(standalone_mode=False)
    except click.ClickException as err:
        _fail(err.format_message())
        sys.exit(-1)

    if isinstance(result, int) or result is None:  # e.g. --help
        sys.exit(result or 0)

    (command, obj, kwargs) = result

    try:
        output = run_command(command, obj, **kwargs)
    except (exc.SceneCtlException, ValueError) as err:
        _fail(str(err))
        sys.exit(1)

    print(json.dumps(output, indent=4, ensure_ascii=False))


if __name__ == "__main__":
    main()
