"""Mode manager coordinating Normal/Insert/Visual/Command pipelines."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Type

from vim_trainer.keymaps import KeymapRegistry, KeymapResolver
from vim_trainer.keymaps.defaults import load_default_keymaps
from vim_trainer.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult

Clock = Callable[[], float]


@dataclass(frozen=True, slots=True)
class Deadline:
    """When the partial key sequence of ``mode`` stops waiting."""

    mode: str
    at: float
    timeout_ms: int

    def expired(self, now: float) -> bool:
        return self.at <= now


class ModeManager:
    """Owns active mode, handles transitions, and dispatches key events.

    Pending-sequence deadlines are plain data checked against ``clock``;
    nothing fires on its own. Hosts call ``process_timeouts`` periodically
    and every key event checks for expired deadlines before dispatch.
    """

    def __init__(
        self,
        context: ModeContext,
        *,
        keymap_registry: KeymapRegistry | None = None,
        keymap_resolver: KeymapResolver | None = None,
        load_defaults: bool = True,
        clock: Clock = time.monotonic,
    ) -> None:
        self.context = context
        self._modes: Dict[str, Mode] = {}
        self._active: Optional[str] = None
        self.logger = telemetry.get_logger("vim_trainer.modes")
        self.keymap_registry = keymap_registry or KeymapRegistry(
            logger_name="vim_trainer.keymaps"
        )
        if load_defaults and keymap_registry is None:
            load_default_keymaps(self.keymap_registry)
        self.keymap_resolver = keymap_resolver or KeymapResolver(
            self.keymap_registry, logger_name="vim_trainer.keymaps"
        )
        self.context.extras.setdefault("keymap_registry", self.keymap_registry)
        self.context.extras.setdefault("keymap_resolver", self.keymap_resolver)
        self.context.extras.setdefault("mode_manager", self)
        self._clock = clock
        self._deadline: Optional[Deadline] = None

    @property
    def active_mode(self) -> Optional[Mode]:
        if self._active is None:
            return None
        return self._modes.get(self._active)

    @property
    def active_name(self) -> str:
        return self._active or "normal"

    def get_mode(self, name: str) -> Mode:
        try:
            return self._modes[name]
        except KeyError as exc:
            raise KeyError(f"Unknown mode '{name}'") from exc

    def register_mode(
        self,
        mode_cls: Type[Mode],
        /,
        *mode_args: object,
        **mode_kwargs: object,
    ) -> Mode:
        mode = mode_cls(self.context, *mode_args, **mode_kwargs)
        if mode.name in self._modes:
            raise ValueError(f"Mode '{mode.name}' already registered")
        self._modes[mode.name] = mode
        if self._active is None:
            self._active = mode.name
            mode.on_enter(None)
        return mode

    def switch_mode(self, name: str) -> None:
        if name not in self._modes:
            raise KeyError(f"Unknown mode '{name}'")
        previous = self.active_mode
        if previous and previous.name == name:
            return
        if previous:
            self.cancel_timeout(previous.name)
            previous.on_exit(name)
        self._active = name
        self._modes[name].on_enter(previous.name if previous else None)
        self.cancel_timeout(name)
        telemetry.record_event("mode.switch", level="debug", data={"mode": name})

    def reset(self, name: str = "normal") -> None:
        """Drop pending input everywhere and activate ``name``."""

        self._deadline = None
        for mode in self._modes.values():
            mode.reset()
        self.switch_mode(name)

    def handle_key(self, key: KeyInput) -> ModeResult:
        self.process_timeouts()
        mode = self.active_mode
        if mode is None:
            raise RuntimeError("No active mode registered")
        with telemetry.span(
            name=f"mode::{mode.name}",
            component="modes",
            metadata={"key": key.key, "mode": mode.name},
        ):
            result = mode.handle_key(key)
        return self._after_mode_result(mode, result)

    def _after_mode_result(self, mode: Mode, result: ModeResult) -> ModeResult:
        if result.timeout_ms:
            self.arm_timeout(mode.name, result.timeout_ms)
        else:
            self.cancel_timeout(mode.name)
        if result.switch_to:
            self.switch_mode(result.switch_to)
        return result

    # ------------------------------------------------------------------
    # Deadlines
    # ------------------------------------------------------------------
    @property
    def deadline(self) -> Optional[Deadline]:
        return self._deadline

    def arm_timeout(self, mode_name: str, timeout_ms: int) -> Deadline:
        """Start (or restart) the wait for the next key of a partial sequence."""

        self._deadline = Deadline(
            mode=mode_name,
            at=self._clock() + timeout_ms / 1000.0,
            timeout_ms=timeout_ms,
        )
        return self._deadline

    def cancel_timeout(self, mode_name: Optional[str] = None) -> None:
        if self.has_pending_timeout(mode_name):
            self._deadline = None

    def has_pending_timeout(self, mode_name: Optional[str] = None) -> bool:
        if self._deadline is None:
            return False
        return mode_name is None or self._deadline.mode == mode_name

    def process_timeouts(self, now: Optional[float] = None) -> Dict[str, ModeResult]:
        """Expire the deadline if ``now`` (default: the clock) has reached it."""

        deadline = self._deadline
        if deadline is None:
            return {}
        if not deadline.expired(self._clock() if now is None else now):
            return {}
        return {deadline.mode: self._expire(deadline)}

    def force_timeout(self, mode_name: Optional[str] = None) -> Dict[str, ModeResult]:
        deadline = self._deadline
        if deadline is None or mode_name not in (None, deadline.mode):
            return {}
        return {deadline.mode: self._expire(deadline)}

    def _expire(self, deadline: Deadline) -> ModeResult:
        self._deadline = None
        mode = self._modes.get(deadline.mode)
        if mode is None:
            return ModeResult(consumed=False, status="timeout")
        self.logger.debug(
            "pending input in %s expired after %d ms",
            deadline.mode,
            deadline.timeout_ms,
        )
        with telemetry.span(
            name=f"mode_timeout::{deadline.mode}",
            component="modes",
            metadata={"mode": deadline.mode},
        ):
            result = mode.handle_timeout()
        return self._after_mode_result(mode, result)


__all__ = ["Clock", "Deadline", "ModeManager"]
