from __future__ import annotations

from .config import ChordmapConfig, KeybindingRecord, apply_filters, load_config
from .dsl import (
    canonical_key,
    canonical_sequence,
    normalize_for_display,
    normalize_key_sequence_for_display,
    normalize_live_chord,
    parse_chord,
    parse_key_sequence,
)
from .frontend import KeybindingsFrontend, StructuralParseError, derive_category
from .ir import Chord, DisplayProfile, Modifier, ParsedBinding, ValidationResult

__all__ = [
    "Chord",
    "ChordmapConfig",
    "DisplayProfile",
    "KeybindingRecord",
    "KeybindingsFrontend",
    "Modifier",
    "ParsedBinding",
    "StructuralParseError",
    "ValidationResult",
    "apply_filters",
    "canonical_key",
    "canonical_sequence",
    "derive_category",
    "load_config",
    "normalize_for_display",
    "normalize_key_sequence_for_display",
    "normalize_live_chord",
    "parse_chord",
    "parse_key_sequence",
]
