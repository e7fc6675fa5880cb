"""Trie-based keymap resolution with telemetry instrumentation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Literal, Optional, Sequence

from vim_trainer.runtime.telemetry import span

from .models import ARGUMENT_PLACEHOLDER, ActionRef, Binding
from .registry import KeymapRegistry

Status = Literal["match", "pending", "miss"]


@dataclass(slots=True)
class TrieNode:
    """One typed prefix: what it completes and where it can continue."""

    binding: Optional[Binding] = None
    argument_binding: Optional[Binding] = None
    children: Dict[str, "TrieNode"] = field(default_factory=dict)

    def child(self, token: str) -> "TrieNode":
        return self.children.setdefault(token, TrieNode())

    def next_tokens(self) -> tuple[str, ...]:
        if self.argument_binding is not None:
            return (ARGUMENT_PLACEHOLDER,)
        return tuple(sorted(self.children))

    def walk(self) -> Iterator[Binding]:
        """Every binding at or below this node."""

        stack = [self]
        while stack:
            node = stack.pop()
            if node.binding is not None:
                yield node.binding
            if node.argument_binding is not None:
                yield node.argument_binding
            stack.extend(node.children.values())


@dataclass(slots=True)
class KeymapTrie:
    """Bindings of a single mode arranged by key token."""

    mode: str
    revision: int
    root: TrieNode = field(default_factory=TrieNode)

    def add(self, binding: Binding) -> None:
        node = self.root
        for token in binding.sequence.tokens:
            node = node.child(token)
        if binding.argument:
            node.argument_binding = binding
        else:
            node.binding = binding


@dataclass(frozen=True, slots=True)
class ResolutionMatch:
    """A completed binding, its action and the details typed alongside it."""

    binding: Binding
    action: ActionRef
    argument: Optional[str] = None
    count: Optional[int] = None


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """What the typed tokens amount to so far."""

    status: Status
    match: Optional[ResolutionMatch] = None
    consumed: int = 0
    next_expected: tuple[str, ...] = ()
    timeout_ms: Optional[int] = None


def is_argument_token(token: str) -> bool:
    """Arguments are single printable characters, never named keys."""

    return len(token) == 1


def _shortest_timeout(node: TrieNode) -> Optional[int]:
    """Tightest explicit timeout below ``node``; ``None`` defers to the mode."""

    explicit = [b.sequence.timeout_ms for b in node.walk() if b.sequence.timeout_ms]
    return min(explicit, default=None)


class KeymapResolver:
    """Resolves typed tokens against the registry, one cached trie per mode.

    At each step an argument-taking prefix captures the final token outright;
    otherwise exact child transitions are followed. A node with a binding is
    a match, which means ``d`` alone never waits when ``d`` itself is bound.
    A node that only leads further is pending.
    """

    def __init__(
        self, registry: KeymapRegistry, *, logger_name: str | None = None
    ) -> None:
        self._registry = registry
        self._logger_name = logger_name
        self._tries: Dict[str, KeymapTrie] = {}

    def resolve(self, mode: str, tokens: Sequence[str]) -> ResolutionResult:
        typed = tuple(tokens)
        with span(
            "keymaps::resolve",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"mode": mode, "keys": "".join(typed)},
        ) as handle:
            result = self._walk(self._trie(mode).root, typed)
            handle.add_metadata("status", result.status)
            if result.match is not None:
                handle.add_metadata("binding_id", result.match.binding.id)
            if result.timeout_ms is not None:
                handle.add_metadata("timeout_ms", result.timeout_ms)
            return result

    def reset(self, mode: Optional[str] = None) -> None:
        if mode is None:
            self._tries.clear()
        else:
            self._tries.pop(mode, None)

    def _walk(self, node: TrieNode, typed: tuple[str, ...]) -> ResolutionResult:
        last = len(typed) - 1
        for index, token in enumerate(typed):
            if node.argument_binding is not None and index == last:
                if not is_argument_token(token):
                    return ResolutionResult(status="miss", consumed=index)
                return ResolutionResult(
                    status="match",
                    match=self._match(node.argument_binding, argument=token),
                    consumed=index + 1,
                )
            child = node.children.get(token)
            if child is None:
                return ResolutionResult(status="miss", consumed=index)
            node = child

        if node.binding is not None:
            return ResolutionResult(
                status="match", match=self._match(node.binding), consumed=len(typed)
            )
        next_expected = node.next_tokens()
        if typed and next_expected:
            return ResolutionResult(
                status="pending",
                consumed=len(typed),
                next_expected=next_expected,
                timeout_ms=_shortest_timeout(node),
            )
        return ResolutionResult(status="miss", consumed=len(typed))

    def _trie(self, mode: str) -> KeymapTrie:
        revision = self._registry.revision()
        trie = self._tries.get(mode)
        if trie is not None and trie.revision == revision:
            return trie

        trie = KeymapTrie(mode=mode, revision=revision)
        for binding in self._registry.iter_bindings(mode):
            trie.add(binding)
        self._tries[mode] = trie
        return trie

    def _match(
        self, binding: Binding, *, argument: Optional[str] = None
    ) -> ResolutionMatch:
        return ResolutionMatch(
            binding=binding,
            action=self._registry.get_action(binding.action_id),
            argument=argument,
        )


__all__ = [
    "KeymapResolver",
    "KeymapTrie",
    "ResolutionMatch",
    "ResolutionResult",
    "TrieNode",
    "is_argument_token",
]
