from __future__ import annotations

import sys
import tomllib
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, StrictStr

from .ir import DisplayProfile, ParsedBinding


class KeybindingRecord(BaseModel):
    """One raw entry of a keybindings file, before parsing."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    key: StrictStr = Field(min_length=1)
    command: StrictStr = Field(min_length=1)
    when: Optional[StrictStr] = None
    command_label: Optional[StrictStr] = Field(default=None, alias="commandLabel")


def _default_display_profile() -> DisplayProfile:
    if sys.platform == "darwin":
        return DisplayProfile.SYMBOL
    return DisplayProfile.TEXT


class ChordmapConfig(BaseModel):
    """Read-only settings supplied by the host; every field has a default."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    display_profile: DisplayProfile = Field(default_factory=_default_display_profile)
    live_timeout_ms: PositiveInt = 3000
    search_result_limit: PositiveInt = 50
    category_derivation: Literal["simple", "metadata", "off"] = "simple"
    show_disabled_bindings: bool = True

    @property
    def derive_categories(self) -> bool:
        # No extension metadata is available here, so "metadata" uses the namespace table too.
        return self.category_derivation != "off"


def load_config(path: str | Path | None) -> ChordmapConfig:
    """Load a TOML settings file; ``None`` gives the defaults.

    Settings may sit at the top level or under a ``[chordmap]`` table.
    """

    if path is None:
        return ChordmapConfig()

    path = Path(path)
    data = tomllib.loads(path.read_text(encoding="utf-8"))
    section = data.get("chordmap", data)
    return ChordmapConfig.model_validate(section)


def apply_filters(bindings: List[ParsedBinding], config: ChordmapConfig) -> List[ParsedBinding]:
    if config.show_disabled_bindings:
        return list(bindings)
    return [b for b in bindings if not b.disabled]
