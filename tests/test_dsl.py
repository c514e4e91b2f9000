from __future__ import annotations

from chordmap.keys.dsl import (
    canonical_key,
    canonical_sequence,
    normalize_for_display,
    normalize_key_sequence_for_display,
    normalize_live_chord,
    parse_chord,
    parse_key_sequence,
)
from chordmap.keys.ir import DisplayProfile, Modifier


def _mods(chord) -> set[str]:
    return {getattr(mod, "value", mod) for mod in chord.modifiers}


def test_parse_chord_basic() -> None:
    chord = parse_chord("cmd+shift+k")

    assert _mods(chord) == {"cmd", "shift"}
    assert chord.base_key == "k"
    assert chord.raw == "cmd+shift+k"


def test_canonical_key_is_permutation_invariant() -> None:
    assert canonical_key(parse_chord("shift+cmd+k")) == canonical_key(parse_chord("cmd+shift+k"))
    assert canonical_key(parse_chord("shift+cmd+k")) == "cmd+shift+k"


def test_parse_chord_is_case_insensitive() -> None:
    upper = parse_chord("CMD+K")
    lower = parse_chord("cmd+k")

    assert upper.modifiers == lower.modifiers
    assert upper.base_key == lower.base_key
    assert upper.canonical_key == lower.canonical_key
    # raw keeps the original text
    assert upper.raw == "CMD+K"


def test_single_modifier_token_is_base_key() -> None:
    chord = parse_chord("shift")

    assert chord.modifiers == frozenset()
    assert chord.base_key == "shift"


def test_trailing_modifier_is_base_key() -> None:
    chord = parse_chord("cmd+shift")

    assert chord.modifiers == frozenset({Modifier.CMD})
    assert chord.base_key == "shift"


def test_first_non_modifier_becomes_base_key() -> None:
    chord = parse_chord("ctrl+a+b")

    assert chord.modifiers == frozenset({Modifier.CTRL})
    assert chord.base_key == "a"


def test_unknown_tokens_are_accepted() -> None:
    chord = parse_chord("hyper+numpad_add")

    assert chord.modifiers == frozenset()
    assert chord.base_key == "hyper"


def test_plus_key() -> None:
    chord = parse_chord("ctrl++")

    assert chord.modifiers == frozenset({Modifier.CTRL})
    assert chord.base_key == "+"
    assert canonical_key(chord) == "ctrl++"


def test_parse_key_sequence_preserves_order() -> None:
    chords = parse_key_sequence("  cmd+k   cmd+s ")

    assert [c.raw for c in chords] == ["cmd+k", "cmd+s"]
    assert [c.base_key for c in chords] == ["k", "s"]


def test_parse_key_sequence_empty() -> None:
    assert parse_key_sequence("") == ()
    assert parse_key_sequence("   ") == ()


def test_canonical_sequence_accepts_string_or_tokens() -> None:
    assert canonical_sequence("shift+cmd+k S") == ("cmd+shift+k", "s")
    assert canonical_sequence(["shift+cmd+k", "S"]) == ("cmd+shift+k", "s")


def test_canonical_key_from_text() -> None:
    assert canonical_key("Option+Cmd+G") == "cmd+option+g"


def test_symbol_display() -> None:
    chord = parse_chord("cmd+shift+k")

    assert normalize_for_display(chord, DisplayProfile.SYMBOL) == "⇧⌘K"
    assert normalize_for_display(parse_chord("ctrl+option+p"), DisplayProfile.SYMBOL) == "⌃⌥P"


def test_symbol_display_collapses_aliased_modifiers() -> None:
    assert normalize_for_display(parse_chord("alt+option+k"), DisplayProfile.SYMBOL) == "⌥K"
    assert normalize_for_display(parse_chord("cmd+meta+k"), DisplayProfile.SYMBOL) == "⌘K"


def test_text_display() -> None:
    assert normalize_for_display(parse_chord("cmd+shift+k"), DisplayProfile.TEXT) == "Ctrl+Shift+K"
    assert normalize_for_display(parse_chord("alt+f4"), DisplayProfile.TEXT) == "Alt+F4"
    # cmd and ctrl both read as Ctrl on text platforms
    assert normalize_for_display(parse_chord("ctrl+cmd+x"), DisplayProfile.TEXT) == "Ctrl+X"


def test_sequence_display() -> None:
    text = normalize_key_sequence_for_display("cmd+k cmd+s", DisplayProfile.SYMBOL)

    assert text == "⌘K ⌘S"


def test_normalize_live_chord() -> None:
    assert normalize_live_chord("Cmd+Opt+G") == "cmd+option+g"
    assert normalize_live_chord("opt") == "option"
    assert normalize_live_chord("ctrl++") == "ctrl++"
