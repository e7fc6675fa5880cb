"""Value types for key bindings: strokes, sequences, actions and bindings."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Optional

ARGUMENT_PLACEHOLDER = "<char>"


@dataclass(frozen=True, slots=True)
class KeyStroke:
    """One key as the modes tokenise it: ``d``, ``ESC`` or ``ctrl+r``."""

    key: str
    modifiers: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("key cannot be empty")
        cleaned = sorted({m.strip().lower() for m in self.modifiers if m.strip()})
        object.__setattr__(self, "modifiers", tuple(cleaned))

    @classmethod
    def parse(cls, token: str) -> "KeyStroke":
        """Split ``ctrl+r`` style tokens; a bare ``+`` is a plain key."""

        if len(token) > 1 and "+" in token:
            *modifiers, key = token.split("+")
            return cls(key=key, modifiers=tuple(modifiers))
        return cls(key=token)

    @property
    def token(self) -> str:
        if not self.modifiers:
            return self.key
        return "+".join(self.modifiers + (self.key,))


@dataclass(frozen=True, slots=True)
class KeySequence:
    """Keys typed in order.

    ``timeout_ms`` bounds how long a partial match may wait for the next key;
    ``None`` leaves it to the mode.
    """

    strokes: tuple[KeyStroke, ...]
    timeout_ms: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.strokes:
            raise ValueError("KeySequence requires at least one stroke")
        if self.timeout_ms is not None and self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")

    @classmethod
    def from_strings(
        cls, *keys: str, timeout_ms: Optional[int] = None
    ) -> "KeySequence":
        return cls(
            strokes=tuple(KeyStroke.parse(key) for key in keys if key),
            timeout_ms=timeout_ms,
        )

    @property
    def tokens(self) -> tuple[str, ...]:
        return tuple(stroke.token for stroke in self.strokes)

    def with_timeout(self, timeout_ms: int) -> "KeySequence":
        return KeySequence(self.strokes, timeout_ms=timeout_ms)


Handler = Callable[..., object]


@dataclass(frozen=True, slots=True)
class ActionRef:
    """A named editor operation bindings can point at."""

    id: str
    handler: Handler
    description: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("ActionRef id cannot be empty")
        if not callable(self.handler):
            raise TypeError("handler must be callable")

    def __call__(self, *args: object, **kwargs: object) -> object:
        return self.handler(*args, **kwargs)


@dataclass(frozen=True, slots=True)
class Binding:
    """Keys in one mode that run an action.

    With ``argument`` set the keys are a prefix and the next printable key
    is captured verbatim as the argument (``f<char>``, ``r<char>``). A mode
    holds at most one binding per :attr:`key_signature`.
    """

    id: str
    mode: str
    sequence: KeySequence
    action_id: str
    description: str = ""
    argument: bool = False

    def __post_init__(self) -> None:
        for field_name in ("id", "mode", "action_id"):
            if not getattr(self, field_name):
                raise ValueError(f"binding {field_name} cannot be empty")

    @property
    def key_signature(self) -> str:
        tokens = self.sequence.tokens
        if self.argument:
            tokens += (ARGUMENT_PLACEHOLDER,)
        return " ".join(tokens)

    def with_timeout(self, timeout_ms: int) -> "Binding":
        return replace(self, sequence=self.sequence.with_timeout(timeout_ms))


__all__ = [
    "ARGUMENT_PLACEHOLDER",
    "ActionRef",
    "Binding",
    "KeySequence",
    "KeyStroke",
]
