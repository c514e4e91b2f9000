from __future__ import annotations

from enum import Enum
from typing import Any, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Modifier(str, Enum):
    """Modifier tokens recognised in a chord; anything else is base-key material."""

    ALT = "alt"
    CMD = "cmd"
    CTRL = "ctrl"
    META = "meta"
    OPTION = "option"
    SHIFT = "shift"


class DisplayProfile(str, Enum):
    """How chords are rendered for people."""

    SYMBOL = "symbol"
    TEXT = "text"


class Chord(BaseModel):
    """One keypress: an unordered modifier set plus exactly one base key."""

    model_config = ConfigDict(frozen=True)

    modifiers: FrozenSet[Modifier] = Field(default_factory=frozenset)
    base_key: str
    raw: str

    @property
    def canonical_key(self) -> str:
        parts = sorted(mod.value for mod in self.modifiers)
        return "+".join([*parts, self.base_key])


class ParsedBinding(BaseModel):
    """A validated keybinding record.

    ``key_sequence`` and ``chords`` are always derived from ``key``; values
    passed for them are ignored.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    key_sequence: Tuple[str, ...] = ()
    chords: Tuple[Chord, ...] = ()
    command: str
    disabled: bool = False
    when: Optional[str] = None
    source_editor: str = "unknown"
    command_label: Optional[str] = None
    category: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _derive_chords(cls, data: Any) -> Any:
        if not isinstance(data, dict) or not isinstance(data.get("key"), str):
            return data

        # Imported here: dsl builds Chord instances from this module.
        from .dsl import parse_key_sequence

        chords = parse_key_sequence(data["key"])
        return {
            **data,
            "key_sequence": tuple(chord.raw for chord in chords),
            "chords": chords,
        }

    @property
    def is_multi_chord(self) -> bool:
        return len(self.chords) > 1


class ValidationResult(BaseModel):
    """Outcome of checking one raw record without parsing it."""

    valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
