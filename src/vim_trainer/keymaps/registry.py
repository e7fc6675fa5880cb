"""Keymap registry: named actions plus one binding table per mode."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, Optional

from vim_trainer.runtime.telemetry import SpanHandle, span

from .models import ActionRef, Binding


@dataclass(frozen=True, slots=True)
class RegistryStats:
    """Counts reported by :meth:`KeymapRegistry.stats`."""

    action_count: int
    binding_count: int
    modes: tuple[str, ...]


class KeymapConflictError(RuntimeError):
    """Raised when a mode already binds the same key signature."""

    def __init__(self, binding: Binding, existing: Binding):
        super().__init__(
            f"Binding '{binding.id}' ({binding.mode}: {binding.key_signature}) "
            f"conflicts with '{existing.id}'"
        )
        self.binding = binding
        self.existing = existing


class KeymapRegistry:
    """Stores actions and bindings; resolvers rebuild when ``revision`` moves.

    Each mode maps a key signature to exactly one binding id, so ``dd`` in
    normal mode and ``dd`` in visual mode are independent entries while a
    second ``dd`` in normal mode is a conflict.
    """

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._actions: Dict[str, ActionRef] = {}
        self._bindings: Dict[str, Binding] = {}
        self._tables: Dict[str, Dict[str, str]] = {}
        self._logger_name = logger_name
        self._revision = 0

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def revision(self) -> int:
        return self._revision

    def get_action(self, action_id: str) -> ActionRef:
        try:
            return self._actions[action_id]
        except KeyError as exc:
            raise KeyError(f"Action '{action_id}' is not registered") from exc

    def get_binding(self, binding_id: str) -> Binding:
        try:
            return self._bindings[binding_id]
        except KeyError as exc:
            raise KeyError(f"Binding '{binding_id}' is not registered") from exc

    def find(self, mode: str, key_signature: str) -> Optional[Binding]:
        binding_id = self._tables.get(mode, {}).get(key_signature)
        return self._bindings[binding_id] if binding_id else None

    def iter_bindings(self, mode: Optional[str] = None) -> Iterator[Binding]:
        if mode is None:
            yield from self._bindings.values()
            return
        for binding_id in self._tables.get(mode, {}).values():
            yield self._bindings[binding_id]

    def stats(self) -> RegistryStats:
        return RegistryStats(
            action_count=len(self._actions),
            binding_count=len(self._bindings),
            modes=tuple(sorted(self._tables)),
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def register_action(self, action: ActionRef, *, replace: bool = False) -> ActionRef:
        with self._span("register_action", action_id=action.id):
            if not replace and action.id in self._actions:
                raise ValueError(f"Action '{action.id}' already registered")
            self._actions[action.id] = action
            return action

    def register_binding(self, binding: Binding, *, replace: bool = False) -> Binding:
        """Add ``binding``; with ``replace`` it evicts whatever it collides with."""

        with self._span(
            "register_binding", binding_id=binding.id, mode=binding.mode
        ) as handle:
            self._require_action(binding, handle)
            existing = self.find(binding.mode, binding.key_signature)
            previous = self._bindings.get(binding.id)

            if not replace:
                if existing is not None:
                    handle.add_metadata("conflict", existing.id)
                    raise KeymapConflictError(binding, existing)
                if previous is not None:
                    raise ValueError(f"Binding id '{binding.id}' already registered")

            for stale in {b.id: b for b in (existing, previous) if b}.values():
                self._drop(stale)
            self._store(binding)
            return binding

    def unregister_binding(self, binding_id: str) -> Optional[Binding]:
        with self._span("unregister_binding", binding_id=binding_id):
            binding = self._bindings.get(binding_id)
            if binding is not None:
                self._drop(binding)
            return binding

    def update_binding(self, binding_id: str, **changes: object) -> Binding:
        """Rebind in place, e.g. ``update_binding(id, sequence=...)``."""

        with self._span("update_binding", binding_id=binding_id) as handle:
            current = self.get_binding(binding_id)
            updated = replace(current, **changes)
            if updated.id != binding_id:
                raise ValueError("update_binding cannot change a binding id")
            self._require_action(updated, handle)

            existing = self.find(updated.mode, updated.key_signature)
            if existing is not None and existing.id != binding_id:
                handle.add_metadata("conflict", existing.id)
                raise KeymapConflictError(updated, existing)

            self._drop(current)
            self._store(updated)
            return updated

    def override_sequence_timeouts(
        self,
        *,
        timeout_ms: int,
        mode: Optional[str] = None,
        binding_ids: Optional[Iterable[str]] = None,
    ) -> None:
        """Change how long partial matches wait, per mode or per binding."""

        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")

        if binding_ids is not None:
            targets = [self.get_binding(binding_id) for binding_id in binding_ids]
        else:
            targets = list(self.iter_bindings(mode))
        if not targets:
            return

        # The key signature is unchanged, so the mode tables stay valid.
        for binding in targets:
            self._bindings[binding.id] = binding.with_timeout(timeout_ms)
        self._revision += 1

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _span(
        self, operation: str, **metadata: object
    ) -> AbstractContextManager[SpanHandle]:
        return span(
            f"keymaps::{operation}",
            logger_name=self._logger_name,
            component="keymaps",
            metadata=metadata,
        )

    def _require_action(self, binding: Binding, handle: SpanHandle) -> None:
        if binding.action_id in self._actions:
            return
        handle.add_metadata("missing_action", binding.action_id)
        raise KeyError(
            f"Binding '{binding.id}' references unknown action '{binding.action_id}'"
        )

    def _store(self, binding: Binding) -> None:
        self._bindings[binding.id] = binding
        self._tables.setdefault(binding.mode, {})[binding.key_signature] = binding.id
        self._revision += 1

    def _drop(self, binding: Binding) -> None:
        self._bindings.pop(binding.id, None)
        table = self._tables.get(binding.mode)
        if table is not None:
            table.pop(binding.key_signature, None)
            if not table:
                del self._tables[binding.mode]
        self._revision += 1


__all__ = [
    "KeymapConflictError",
    "KeymapRegistry",
    "RegistryStats",
]
