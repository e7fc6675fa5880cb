from __future__ import annotations

from vim_trainer.keymaps import (
    ActionRef,
    Binding,
    KeySequence,
    KeymapRegistry,
    KeymapResolver,
)


def make_action(action_id: str) -> ActionRef:
    return ActionRef(id=action_id, handler=lambda *args, **kwargs: None)


def make_binding(
    binding_id: str,
    *,
    mode: str = "normal",
    keys: tuple[str, ...] = ("g", "g"),
    action_id: str = "core.test",
    argument: bool = False,
    timeout_ms: int = 1000,
) -> Binding:
    return Binding(
        id=binding_id,
        mode=mode,
        sequence=KeySequence.from_strings(*keys, timeout_ms=timeout_ms),
        action_id=action_id,
        argument=argument,
    )


def build_registry(bindings: list[Binding]) -> KeymapRegistry:
    registry = KeymapRegistry()
    action_ids = {binding.action_id for binding in bindings}
    for action_id in action_ids:
        registry.register_action(make_action(action_id))
    for binding in bindings:
        registry.register_binding(binding)
    return registry


def test_resolver_matches_exact_sequence() -> None:
    binding = make_binding("normal.gg")
    registry = build_registry([binding])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("normal", ("g", "g"))

    assert result.status == "match"
    assert result.match is not None
    assert result.match.binding.id == binding.id


def test_resolver_reports_pending_for_prefix() -> None:
    binding = make_binding("normal.gg")
    registry = build_registry([binding])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("normal", ("g",))

    assert result.status == "pending"
    assert result.next_expected == ("g",)


def test_resolver_misses_unknown_continuation() -> None:
    registry = build_registry([make_binding("normal.dd", keys=("d", "d"))])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("normal", ("d", "z"))

    assert result.status == "miss"
    assert result.consumed == 1


def test_resolver_prefers_exact_match_over_longer_sequence() -> None:
    short = make_binding("normal.g", keys=("g",), action_id="core.short")
    longer = make_binding("normal.gx", keys=("g", "x"), action_id="core.long")
    registry = build_registry([short, longer])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("normal", ("g",))

    assert result.status == "match"
    assert result.match is not None
    assert result.match.binding.id == "normal.g"


def test_resolver_argument_binding_captures_next_key() -> None:
    binding = make_binding("normal.find", keys=("f",), argument=True)
    registry = build_registry([binding])
    resolver = KeymapResolver(registry)

    pending = resolver.resolve("normal", ("f",))
    assert pending.status == "pending"
    assert pending.next_expected == ("<char>",)

    match = resolver.resolve("normal", ("f", "3"))
    assert match.status == "match"
    assert match.match is not None
    assert match.match.argument == "3"


def test_resolver_argument_binding_rejects_named_keys() -> None:
    binding = make_binding("normal.replace", keys=("r",), argument=True)
    registry = build_registry([binding])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("normal", ("r", "ESC"))

    assert result.status == "miss"


def test_resolver_pending_returns_timeout_hint() -> None:
    binding = make_binding("normal.gg", timeout_ms=1500)
    registry = build_registry([binding])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("normal", ("g",))

    assert result.status == "pending"
    assert result.timeout_ms == 1500


def test_resolver_scopes_bindings_by_mode() -> None:
    registry = build_registry([make_binding("visual.gg", mode="visual")])
    resolver = KeymapResolver(registry)

    assert resolver.resolve("normal", ("g", "g")).status == "miss"
    assert resolver.resolve("visual", ("g", "g")).status == "match"


def test_resolver_cache_refreshes_on_revision() -> None:
    registry = build_registry([])
    resolver = KeymapResolver(registry)

    miss = resolver.resolve("normal", ("x",))
    assert miss.status == "miss"

    new_binding = make_binding("normal.x", keys=("x",), action_id="core.x")
    registry.register_action(make_action("core.x"))
    registry.register_binding(new_binding)

    match = resolver.resolve("normal", ("x",))
    assert match.status == "match"
    assert match.match is not None
    assert match.match.binding.id == new_binding.id


def test_resolver_pending_without_explicit_timeout_defers_to_mode() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action("core.test"))
    registry.register_binding(
        Binding(
            id="normal.gg",
            mode="normal",
            sequence=KeySequence.from_strings("g", "g"),
            action_id="core.test",
        )
    )

    result = KeymapResolver(registry).resolve("normal", ("g",))

    assert result.status == "pending"
    assert result.timeout_ms is None
