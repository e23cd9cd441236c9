#!/usr/bin/env python3
"""SceneCtl - a scene-controller configuration engine.

The glue between one physical scene controller and its host: it reads & writes the
controller's state variables, invokes its remote actions, and drives the codec and
the association manager.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final

import voluptuous as vol

from scenectl_codec import (
    SID_SCENE_CONTROLLER,
    SID_ZWAVE_DEVICE,
    Align,
    Font,
    InteractionKind,
    Language,
    ModeDescriptor,
    ScreenAddress,
    ScreenType,
    decode,
    encode,
    other_screen,
    scene_number,
)
from scenectl_codec.const import (
    DEFAULT_ALIGN,
    DEFAULT_FONT,
    DEFAULT_TIMEOUT_SECS,
    ENERGY_MODE_LABEL,
    LANGUAGE_MAX_PRESET_SCREENS,
    SZ_ALIGN,
    SZ_CURRENT_SCREEN,
    SZ_FONT,
    SZ_LABEL,
    SZ_MODE,
    SZ_NUM_LINES,
    SZ_PEER_ID,
    SZ_PRESET_LANGUAGE,
    SZ_SET_NUM_LINES,
    SZ_SET_PRESET_LANGUAGE,
    SZ_SET_SCREEN,
    SZ_SET_SCREEN_TIMEOUT,
    SZ_TEMPERATURE_DEVICE,
    SZ_TIMEOUT_ENABLE,
    SZ_TIMEOUT_SCREEN,
    SZ_TIMEOUT_SECONDS,
    SZ_UPDATE_CUSTOM_LABEL,
    SZ_UPDATE_TEMPERATURE_DEVICE,
    SZ_VERSION_INFO,
    TEMPERATURE_SCREENS,
    THERMOSTAT_MODE_LABEL,
    ZWAVE_ROOT_DEVICE_ID,
    button_var,
    screen_var,
    state_button,
)
from scenectl_codec.logger import EDIT_LOGGER, set_edit_logging
from scenectl_codec.schemas import SCH_TIMEOUT_SECONDS

from . import exceptions as exc
from .associations import AssociationManager, ConfirmT, EditOutcome
from .scenes import (
    Activation,
    SceneHandle,
    SceneKey,
    create_scene_name,
    find_or_create,
)
from .schemas import (
    SZ_EDIT_LOG,
    SZ_LCD_VERSION,
    SZ_PROFILE,
    SZ_ZWAVE_ROOT_ID,
    load_config,
)

if TYPE_CHECKING:
    from scenectl_codec import ControllerProfile

    from .host import ActionInvoker, DeviceDirectory, DeviceStateStore, SceneRegistry


_LOGGER = logging.getLogger(__name__)


NotifyT = Callable[[str], None]

SZ_CUSTOM: Final = "custom"
SZ_PRESET: Final = "preset"
SZ_TEMPERATURE: Final = "temperature"

VERSION_INFO_REGEX: Final = re.compile(r",([0-9]+)$")  # the last number is the LCD's


@dataclass(frozen=True)
class ButtonRow:
    """A row of a screen: a button, or one of the (virtual) states of a button."""

    button: int  # the (virtual) button number, as used in the state variables
    state: int
    label: str
    label_source: str  # custom, preset or temperature
    font: Font | None
    align: Align | None
    mode: ModeDescriptor
    configurable: bool  # has an interaction mode, scenes & direct associations
    mode_options: tuple[InteractionKind, ...] = ()
    scene_number: int | None = None
    activations: tuple[Activation, ...] = ()
    scene_attachable: bool = False


class SceneController:
    """A scene controller, as seen through its host."""

    def __init__(
        self,
        device_id: int,
        profile: ControllerProfile,
        store: DeviceStateStore,
        invoker: ActionInvoker,
        directory: DeviceDirectory,
        registry: SceneRegistry,
        zwave_device_id: int | None = None,
        zwave_root_id: int = ZWAVE_ROOT_DEVICE_ID,
        lcd_version: int | None = None,
        notify: NotifyT | None = None,
    ) -> None:
        """Create the controller of a (host) device.

        The controller's state is held by device_id. Its Z-Wave node (that has the
        firmware version) is zwave_device_id, or else the device's PeerID.
        """

        self.id = device_id
        self.profile = profile

        self._store = store
        self._invoker = invoker
        self._directory = directory
        self._registry = registry

        self._zwave_device_id = zwave_device_id
        self._lcd_version = lcd_version
        self._notify = notify

        self.associations = AssociationManager(
            profile, directory, zwave_root_id=zwave_root_id
        )

    @classmethod
    def from_config(
        cls,
        device_id: int,
        config: dict[str, Any],
        store: DeviceStateStore,
        invoker: ActionInvoker,
        directory: DeviceDirectory,
        registry: SceneRegistry,
        **kwargs: Any,
    ) -> SceneController:
        """Create a controller from a configuration (see SCH_CONFIG).

        If the configuration has an edit_log, the edit logger is (re)configured.
        """

        cfg = load_config(config)
        if cfg[SZ_EDIT_LOG]:
            set_edit_logging(EDIT_LOGGER, **cfg[SZ_EDIT_LOG])

        return cls(
            device_id,
            cfg[SZ_PROFILE],
            store,
            invoker,
            directory,
            registry,
            zwave_root_id=cfg[SZ_ZWAVE_ROOT_ID],
            lcd_version=cfg[SZ_LCD_VERSION],
            **kwargs,
        )

    def __repr__(self) -> str:
        return f"SceneController({self.id}, profile={self.profile.id})"

    def __str__(self) -> str:
        return self._directory.get_device_name(self.id) or repr(self)

    #
    # The host's state and actions...

    def _get(self, variable: str) -> str | None:
        return self._store.get(self.id, SID_SCENE_CONTROLLER, variable)

    def _set(self, variable: str, value: str | int) -> None:
        EDIT_LOGGER.info("%s = %s", variable, value, extra={"device": self.id})
        self._store.set(self.id, SID_SCENE_CONTROLLER, variable, str(value))

    def _invoke(self, action: str, **arguments: str | int) -> None:
        EDIT_LOGGER.info("%s(%s)", action, arguments, extra={"device": self.id})
        self._invoker.invoke(self.id, SID_SCENE_CONTROLLER, action, arguments)

    def _user_error(self, err: exc.SceneCtlException) -> None:
        EDIT_LOGGER.warning("", extra={"device": self.id, "error_text": err})
        if self._notify:
            self._notify(str(err.message or err))

    @property
    def zwave_device_id(self) -> int:
        if self._zwave_device_id is None:
            try:
                self._zwave_device_id = int(self._get(SZ_PEER_ID) or self.id)
            except ValueError:
                self._zwave_device_id = self.id
        return self._zwave_device_id

    @property
    def lcd_version(self) -> int:
        """Return the LCD firmware version (from the Z-Wave node's VersionInfo)."""

        if self._lcd_version is not None:
            return self._lcd_version

        info = self._store.get(self.zwave_device_id, SID_ZWAVE_DEVICE, SZ_VERSION_INFO)
        if info and (match := VERSION_INFO_REGEX.search(info)):
            return int(match.group(1))
        return self.profile.default_lcd_version

    @property
    def current_screen(self) -> ScreenAddress:
        if self.profile.has_screen and ScreenAddress.is_valid_id(
            screen := self._get(SZ_CURRENT_SCREEN)
        ):
            return ScreenAddress.from_str(screen)  # type: ignore[arg-type]
        return ScreenAddress.from_str(self.profile.default_screen)

    @property
    def preset_language(self) -> Language:
        if not self.profile.has_preset_languages:
            return Language.ENGLISH
        try:
            return Language(int(self._get(SZ_PRESET_LANGUAGE) or Language.ENGLISH))
        except ValueError:
            return Language.ENGLISH

    def _screen(self, screen: ScreenAddress | str | None) -> ScreenAddress:
        if screen is None:
            return self.current_screen
        if isinstance(screen, ScreenAddress):
            return screen
        return ScreenAddress.from_str(screen)

    def is_known_device(self, device_id: int) -> bool:
        return self._directory.device_exists(device_id)

    #
    # Screens...

    def available_screens(self) -> list[tuple[str, str]]:
        return self.profile.available_screens(self.lcd_version)

    def languages(
        self, screen: ScreenAddress | str | None = None
    ) -> tuple[Language, ...]:
        screen = self._screen(screen)
        return self.profile.languages_supported(
            screen.type, screen.number, self.lcd_version
        )

    def set_screen(self, screen: ScreenAddress | str) -> None:
        """Show a screen on the controller."""

        if not self.profile.has_screen:
            return

        screen = self._screen(screen)
        if not screen.is_valid(self.profile, self.lcd_version):
            raise exc.ScreenAddressInvalid(
                f"{self.profile.name} (v{self.lcd_version}) has no screen {screen}"
            )

        # a preset page may not exist in the current language
        if self.profile.has_preset_languages and screen.type in (
            ScreenType.PRESET,
            ScreenType.TEMPERATURE,
        ):
            language = self.preset_language
            if screen.number > LANGUAGE_MAX_PRESET_SCREENS[language]:
                _LOGGER.info("%s: %s is not in %s", self, screen, language.name)
                self._invoke(SZ_SET_PRESET_LANGUAGE, Language=int(Language.ENGLISH))
                self._set(SZ_PRESET_LANGUAGE, int(Language.ENGLISH))

        self._invoke(
            SZ_SET_SCREEN, Screen=str(screen), Timeout="false", ForceClear="false"
        )
        self._set(SZ_CURRENT_SCREEN, str(screen))

    def set_preset_language(self, language: Language | int) -> None:
        if not self.profile.has_preset_languages:
            return

        try:
            language = Language(int(language))
        except ValueError:
            raise exc.ConfigurationError(f"Unknown language: {language}") from None

        self._invoke(SZ_SET_PRESET_LANGUAGE, Language=int(language))
        self._set(SZ_PRESET_LANGUAGE, int(language))

    def num_lines(self, screen: ScreenAddress | str | None = None) -> int:
        """Return the number of lines (scrolling buttons) of a screen."""

        screen = self._screen(screen)
        if (
            screen.type != ScreenType.CUSTOM
            or self.profile.max_scroll_lines <= self.profile.button_count
        ):
            return self.profile.button_count

        try:
            lines = int(self._get(screen_var(SZ_NUM_LINES, str(screen))) or 0)
        except ValueError:
            lines = 0
        return self._clamp_lines(lines or self.profile.button_count)

    def _clamp_lines(self, lines: int) -> int:
        return min(max(lines, self.profile.button_count), self.profile.max_scroll_lines)

    def change_num_lines(self, screen: ScreenAddress | str, lines: int) -> int:
        """Set the number of lines of a (custom) screen, and return it (as clamped)."""

        screen = self._screen(screen)
        lines = self._clamp_lines(lines)

        self._invoke(SZ_SET_NUM_LINES, Screen=str(screen), Lines=lines)
        self._set(screen_var(SZ_NUM_LINES, str(screen)), lines)
        return lines

    def timeout(
        self, screen: ScreenAddress | str | None = None
    ) -> tuple[bool, str, int]:
        """Return the (enabled, screen, seconds) of a screen's timeout."""

        screen = self._screen(screen)
        enabled = self._get(screen_var(SZ_TIMEOUT_ENABLE, str(screen))) == "true"

        if not (target := self._get(screen_var(SZ_TIMEOUT_SCREEN, str(screen)))):
            target = other_screen(self.profile, screen)
            enabled = False

        try:
            seconds = int(self._get(screen_var(SZ_TIMEOUT_SECONDS, str(screen))) or 0)
        except ValueError:
            seconds = 0
        if not seconds:
            seconds = DEFAULT_TIMEOUT_SECS
            enabled = False

        return enabled, target, seconds

    def change_timeout(
        self,
        screen: ScreenAddress | str,
        enabled: bool | None = None,
        timeout_screen: ScreenAddress | str | None = None,
        seconds: int | str | None = None,
    ) -> bool:
        """Configure the screen to switch to, if no button is pressed for a while.

        Editing the target or the seconds (enabled is None) enables the timeout. Will
        return False (and notify) if the seconds are invalid, and change nothing.
        """

        screen = self._screen(screen)
        old_enabled, old_target, old_seconds = self.timeout(screen)

        enable = True if enabled is None else enabled
        target = str(timeout_screen or old_target)
        seconds = old_seconds if seconds is None else seconds

        if enable:
            try:
                seconds = SCH_TIMEOUT_SECONDS(seconds)
            except vol.Invalid:
                self._user_error(
                    exc.InvalidTimeout(
                        "Timeout must be between five seconds and one hour."
                    )
                )
                return False

        self._invoke(
            SZ_SET_SCREEN_TIMEOUT,
            Screen=str(screen),
            Enable=str(enable).lower(),
            TimeoutScreen=target,
            TimeoutSeconds=str(seconds),
        )
        self._set(screen_var(SZ_TIMEOUT_ENABLE, str(screen)), str(enable).lower())
        self._set(screen_var(SZ_TIMEOUT_SCREEN, str(screen)), target)
        self._set(screen_var(SZ_TIMEOUT_SECONDS, str(screen)), str(seconds))
        return True

    def select_temperature_device(
        self, screen: ScreenAddress | str, device_id: int | None
    ) -> None:
        """Set the thermostat (or temperature sensor) shown by a temperature screen."""

        screen = self._screen(screen)
        if screen.type != ScreenType.TEMPERATURE:
            raise exc.ScreenAddressInvalid(f"{screen} is not a temperature screen")

        self._invoke(
            SZ_UPDATE_TEMPERATURE_DEVICE,
            Screen=str(screen),
            TemperatureDevice=device_id or 0,
        )
        self._set(screen_var(SZ_TEMPERATURE_DEVICE, str(screen)), device_id or 0)

    #
    # Buttons...

    def get_mode(self, screen: ScreenAddress | str, button: int) -> ModeDescriptor:
        """Return the (decoded) mode of a button, as currently persisted."""

        text = self._get(button_var(SZ_MODE, str(self._screen(screen)), button))
        return decode(self.profile, text, is_known_device=self.is_known_device)

    def _label(self, screen: str, button: int) -> tuple[str, Font, Align]:
        label = self._get(button_var(SZ_LABEL, screen, button)) or ""
        font = self._get(button_var(SZ_FONT, screen, button))
        align = self._get(button_var(SZ_ALIGN, screen, button))
        return (
            label,
            Font(font) if font in Font._value2member_map_ else DEFAULT_FONT,
            Align(align) if align in Align._value2member_map_ else DEFAULT_ALIGN,
        )

    def _write_mode(
        self,
        screen: str,
        button: int,
        mode: ModeDescriptor,
        label: tuple[str, Font, Align] | None = None,
    ) -> str:
        text = encode(mode)

        if self.profile.has_screen:
            text_, font, align = label or self._label(screen, button)
            self._invoke(
                SZ_UPDATE_CUSTOM_LABEL,
                Screen=screen,
                Button=button,
                Label=text_,
                Font=str(font),
                Align=str(align),
                Mode=text,
            )
            if label:
                self._set(button_var(SZ_LABEL, screen, button), text_)
                self._set(button_var(SZ_FONT, screen, button), str(font))
                self._set(button_var(SZ_ALIGN, screen, button), str(align))
        else:
            self._invoke(
                SZ_UPDATE_CUSTOM_LABEL, Screen=screen, Button=button, Mode=text
            )

        self._set(button_var(SZ_MODE, screen, button), text)
        return text

    def change_label(
        self,
        screen: ScreenAddress | str,
        button: int,
        label: str | None = None,
        font: Font | str | None = None,
        align: Align | str | None = None,
        prefix: InteractionKind | str | None = None,
        target_screen: ScreenAddress | str | None = None,
    ) -> str:
        """Change the label, font, alignment and/or interaction mode of a button.

        Return the new mode string. Anything not given is left as it is.
        """

        screen = self._screen(screen)
        old_label, old_font, old_align = self._label(str(screen), button)

        try:
            new_font = Font(font or old_font)
            new_align = Align(align or old_align)
        except ValueError as err:
            raise exc.ConfigurationError(str(err)) from err

        mode = self.get_mode(screen, button)

        if prefix is None and mode.prefix != InteractionKind.SWITCH_SCREEN:
            prefix = mode.prefix

        if prefix is None or InteractionKind(prefix) == InteractionKind.SWITCH_SCREEN:
            target = target_screen or mode.target_screen
            mode = mode.with_prefix(
                InteractionKind.SWITCH_SCREEN,
                self._screen(target or other_screen(self.profile, screen)),
            )
        else:
            mode = mode.with_prefix(prefix)

        return self._write_mode(
            str(screen),
            button,
            mode,
            label=(old_label if label is None else label, new_font, new_align),
        )

    def select_direct_device(
        self,
        screen: ScreenAddress | str,
        button: int,
        slot: int,
        device_id: int,
        level: int | str | bool | None = None,
        dimming_duration: int | str | bool | None = None,
        confirm: ConfirmT | None = None,
    ) -> EditOutcome | None:
        """Set a direct association of a button (a slot beyond the last adds one).

        Return None if the edit was declined, or not possible (nothing is changed).
        """

        screen = self._screen(screen)
        mode = self.get_mode(screen, button)

        try:
            outcome = self.associations.apply(
                mode,
                slot,
                device_id,
                level=level,
                dimming_duration=dimming_duration,
                confirm=confirm,
            )
        except exc.TransitionDeclined as err:
            _LOGGER.info("%s: the edit was declined: %s", self, err)
            return None
        except exc.AssociationLimitReached as err:
            self._user_error(err)
            return None

        for err in outcome.errors:
            self._user_error(err)

        self._write_mode(str(screen), button, outcome.mode)
        return outcome

    def add_direct_device(
        self,
        screen: ScreenAddress | str,
        button: int,
        device_id: int,
        confirm: ConfirmT | None = None,
    ) -> EditOutcome | None:
        """Append a direct association to a button."""

        slot = len(self.get_mode(screen, button).associations)
        return self.select_direct_device(
            screen, button, slot, device_id, confirm=confirm
        )

    def non_scene_direct_allowed(
        self, screen: ScreenAddress | str, button: int, state: int = 1
    ) -> bool:
        """Return True if a basic-set-only device may be a (non-first) association.

        Not if the button has N states, or a scene attached, unless it is a Cooper.
        """

        if self.profile.has_cooper_configuration:
            return True

        screen = self._screen(screen)
        if state != 1 or self.get_mode(screen, button).prefix.num_states > 1:
            return False
        number = scene_number(self.profile, screen, button, state)
        return self._registry.find_scene(self.id, number, None) is None

    def candidate_devices(
        self,
        screen: ScreenAddress | str,
        button: int,
        slot: int,
        device_ids: Iterable[int],
        state: int = 1,
    ) -> dict[int, int]:
        """Return the devices that may be offered for a slot, with their rank (1/2)."""

        screen = self._screen(screen)
        mode = self.get_mode(screen, state_button(button, state))
        allowed = self.non_scene_direct_allowed(screen, button, state=state)

        ranks = {}
        for device_id in device_ids:
            if device_id == self.id:
                continue
            if rank := self.associations.candidate_rank(
                mode, slot, device_id, allowed
            ):
                ranks[device_id] = rank
        return ranks

    #
    # Scenes...

    def set_scene(
        self,
        screen: ScreenAddress | str,
        button: int,
        activation: Activation = Activation.MOMENTARY,
        state: int = 1,
        label: str | None = None,
        max_name_length: int | None = None,
    ) -> SceneHandle:
        """Return the (host) scene triggered by a button, creating it if required."""

        screen = self._screen(screen)
        number = scene_number(self.profile, screen, button, state)
        virtual = state_button(button, state)

        if label is None:
            fixed = None
            if state == 1:  # as shown by the rows of the screen
                fixed = self._fixed_label(screen, button, self.get_mode(screen, button))
            label = fixed[0] if fixed else self._label(str(screen), virtual)[0]

        name = create_scene_name(
            self._directory.get_device_name(self.id) or str(self.id),
            label,
            activation,
            **({} if max_name_length is None else {"max_length": max_name_length}),
        )
        return find_or_create(
            self._registry, SceneKey(self.id, number, Activation(activation)), name
        )

    #
    # The rows of a screen...

    def _mode_options(self, screen: ScreenAddress) -> tuple[InteractionKind, ...]:
        result = []
        for kind in self.profile.custom_modes:
            if kind in (InteractionKind.THERMOSTAT_MODE, InteractionKind.ENERGY_MODE):
                if not (
                    self.profile.has_thermostat_control
                    and screen.type == ScreenType.TEMPERATURE
                    and screen.number > self.profile.num_temperature_screens
                ):
                    continue
            elif screen.type == ScreenType.PRESET and kind.num_states > 1:
                if self.profile.has_screen:  # preset screens have no N-state buttons
                    continue
            result.append(kind)
        return tuple(result)

    def _fixed_label(
        self, screen: ScreenAddress, button: int, mode: ModeDescriptor
    ) -> tuple[str, str] | None:
        """Return the (label, source) of a button that has a built-in label."""

        if screen.type == ScreenType.PRESET:
            if not (labels := self.profile.preset_labels(screen.number)):
                return None
            return (labels[button - 1] if button <= len(labels) else ""), SZ_PRESET

        if screen.type != ScreenType.TEMPERATURE:
            return None

        if screen.number <= len(TEMPERATURE_SCREENS):
            labels = TEMPERATURE_SCREENS[screen.number - 1]
            return (labels[button - 1] if button <= len(labels) else ""), SZ_TEMPERATURE
        if 2 <= button <= 4:  # the up/down buttons & the temperature
            return TEMPERATURE_SCREENS[0][button - 1], SZ_TEMPERATURE
        if mode.prefix == InteractionKind.THERMOSTAT_MODE:
            return THERMOSTAT_MODE_LABEL, SZ_TEMPERATURE
        if mode.prefix == InteractionKind.ENERGY_MODE:
            return ENERGY_MODE_LABEL, SZ_TEMPERATURE
        return None

    def buttons(self, screen: ScreenAddress | str | None = None) -> list[ButtonRow]:
        """Return the rows of a screen, incl. a row per state of N-state buttons."""

        screen = self._screen(screen)
        options = self._mode_options(screen)
        result: list[ButtonRow] = []

        for button in range(1, self.num_lines(screen) + 1):
            first = self.get_mode(screen, button)
            configurable = screen.type != ScreenType.TEMPERATURE or button in (1, 5)

            for state in range(1, first.prefix.num_states + 1):
                virtual = state_button(button, state)
                mode = first
                if state > 1:  # the extra states behave as momentary buttons
                    mode = self.get_mode(screen, virtual)
                    if mode.prefix != InteractionKind.MOMENTARY:
                        mode = mode.with_prefix(InteractionKind.MOMENTARY)

                font: Font | None = None
                align: Align | None = None
                if state == 1 and (fixed := self._fixed_label(screen, button, mode)):
                    label, source = fixed
                else:
                    label, font, align = self._label(str(screen), virtual)
                    source = SZ_CUSTOM

                if not configurable:
                    result.append(
                        ButtonRow(
                            virtual, state, label, source, font, align, mode, False
                        )
                    )
                    continue

                result.append(
                    ButtonRow(
                        virtual,
                        state,
                        label,
                        source,
                        font,
                        align,
                        mode,
                        True,
                        mode_options=options if state == 1 else (),
                        scene_number=scene_number(
                            self.profile, screen, button, state
                        ),
                        activations=(
                            (Activation.ON, Activation.OFF)
                            if mode.prefix == InteractionKind.TOGGLE
                            else (Activation.MOMENTARY,)
                        ),
                        scene_attachable=self._scene_attachable(mode),
                    )
                )

        return result

    def _scene_attachable(self, mode: ModeDescriptor) -> bool:
        """Return False if the first direct device is not scene capable."""

        if self.profile.has_cooper_configuration or not mode.associations:
            return True
        return not self.associations.capabilities(
            mode.associations[0].device
        ).basic_set_only
