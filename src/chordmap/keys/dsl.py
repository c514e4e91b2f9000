from __future__ import annotations

import re
from typing import Iterable

from .ir import Chord, DisplayProfile, Modifier


_MODIFIER_TOKENS = {m.value for m in Modifier}

# A "+" is a separator only when something follows it, so "ctrl++" is ctrl + plus.
_CHORD_SPLIT = re.compile(r"\+(?=.)")

_LIVE_ALIASES = {"opt": Modifier.OPTION.value}

# macOS menus list ⌃⌥⇧⌘; other platforms read Ctrl+Alt+Shift.
_SYMBOL_ORDER = (
    Modifier.CTRL,
    Modifier.ALT,
    Modifier.OPTION,
    Modifier.SHIFT,
    Modifier.CMD,
    Modifier.META,
)
_TEXT_ORDER = (
    Modifier.CTRL,
    Modifier.CMD,
    Modifier.ALT,
    Modifier.OPTION,
    Modifier.SHIFT,
    Modifier.META,
)

_SYMBOL_LABELS = {
    Modifier.CMD: "⌘",
    Modifier.META: "⌘",
    Modifier.CTRL: "⌃",
    Modifier.ALT: "⌥",
    Modifier.OPTION: "⌥",
    Modifier.SHIFT: "⇧",
}

_TEXT_LABELS = {
    Modifier.CMD: "Ctrl",
    Modifier.CTRL: "Ctrl",
    Modifier.ALT: "Alt",
    Modifier.OPTION: "Alt",
    Modifier.SHIFT: "Shift",
    Modifier.META: "Meta",
}


def parse_chord(raw: str) -> Chord:
    """Parse ``cmd+shift+k`` style text into a Chord.

    A token counts as a modifier only when it is not the last one, so a bare
    ``shift`` is a base key. Tokens after the base key are dropped.
    """

    tokens = _CHORD_SPLIT.split(raw.strip().lower())

    modifiers: set[Modifier] = set()
    base_key: str | None = None
    last = len(tokens) - 1
    for i, token in enumerate(tokens):
        if token in _MODIFIER_TOKENS and i < last:
            modifiers.add(Modifier(token))
            continue
        base_key = token
        break

    return Chord(modifiers=frozenset(modifiers), base_key=base_key or "", raw=raw)


def parse_key_sequence(sequence: str) -> tuple[Chord, ...]:
    """Parse a whitespace separated chord sequence; empty text gives ``()``."""

    return tuple(parse_chord(token) for token in sequence.split())


def canonical_key(chord: Chord | str) -> str:
    if isinstance(chord, str):
        chord = parse_chord(chord)
    return chord.canonical_key


def canonical_sequence(sequence: str | Iterable[str]) -> tuple[str, ...]:
    if isinstance(sequence, str):
        chords: Iterable[Chord] = parse_key_sequence(sequence)
    else:
        chords = (parse_chord(token) for token in sequence if token.strip())
    return tuple(chord.canonical_key for chord in chords)


def normalize_for_display(chord: Chord, profile: DisplayProfile) -> str:
    base = chord.base_key.upper()

    if profile == DisplayProfile.SYMBOL:
        return "".join([*_modifier_labels(chord, _SYMBOL_ORDER, _SYMBOL_LABELS), base])
    return "+".join([*_modifier_labels(chord, _TEXT_ORDER, _TEXT_LABELS), base])


def _modifier_labels(
    chord: Chord,
    order: tuple[Modifier, ...],
    table: dict[Modifier, str],
) -> list[str]:
    # Aliased modifiers (alt/option, cmd/meta) share a label and render once.
    labels: list[str] = []
    for mod in order:
        if mod not in chord.modifiers:
            continue
        label = table[mod]
        if label not in labels:
            labels.append(label)
    return labels


def normalize_key_sequence_for_display(sequence: str, profile: DisplayProfile) -> str:
    return " ".join(normalize_for_display(chord, profile) for chord in parse_key_sequence(sequence))


def normalize_live_chord(raw: str) -> str:
    """Lowercase a captured chord and map capture-layer aliases (``opt``)."""

    tokens = _CHORD_SPLIT.split(raw.strip().lower())
    return "+".join(_LIVE_ALIASES.get(token, token) for token in tokens)
