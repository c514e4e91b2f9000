"""Keybinding chord parsing, prefix trees, live sequence matching and search."""

from __future__ import annotations

__version__ = "0.1.0"

from .index import (
    COMPLETES_MARKER,
    LiveSequenceTracker,
    PrefixNode,
    SearchRanker,
    SearchResult,
    build_prefix_tree,
    find_node,
)
from .keys import (
    Chord,
    ChordmapConfig,
    DisplayProfile,
    KeybindingsFrontend,
    ParsedBinding,
    StructuralParseError,
    canonical_key,
    parse_chord,
    parse_key_sequence,
)
from .session import ChordmapSession

__all__ = [
    "COMPLETES_MARKER",
    "Chord",
    "ChordmapConfig",
    "ChordmapSession",
    "DisplayProfile",
    "KeybindingsFrontend",
    "LiveSequenceTracker",
    "ParsedBinding",
    "PrefixNode",
    "SearchRanker",
    "SearchResult",
    "StructuralParseError",
    "build_prefix_tree",
    "canonical_key",
    "find_node",
    "parse_chord",
    "parse_key_sequence",
]
