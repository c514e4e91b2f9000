from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from chordmap.keys.ir import ParsedBinding

from .fuzzy import DEFAULT_DISTANCE, DEFAULT_THRESHOLD, field_score

MIN_MATCH_CHAR_LENGTH = 2


class MatchedFields(BaseModel):
    """Which field groups contributed to a hit, for highlighting."""

    key: bool = False
    command: bool = False
    category: bool = False


class SearchResult(BaseModel):
    binding: ParsedBinding
    score: float
    matched_fields: MatchedFields = Field(default_factory=MatchedFields)


class _Field(BaseModel):
    name: str
    weight: float
    group: Optional[str]
    getter: Callable[[ParsedBinding], Optional[str]]


# Relative weights: key sequence > command id = command label > category > when.
_FIELDS: Tuple[_Field, ...] = (
    _Field(name="key", weight=2.0, group="key", getter=lambda b: b.key),
    _Field(name="command", weight=1.5, group="command", getter=lambda b: b.command),
    _Field(name="command_label", weight=1.5, group="command", getter=lambda b: b.command_label),
    _Field(name="category", weight=1.0, group="category", getter=lambda b: b.category),
    _Field(name="when", weight=0.5, group=None, getter=lambda b: b.when),
)
_MAX_WEIGHT = max(f.weight for f in _FIELDS)


class SearchRanker:
    """Weighted fuzzy search over the most recently indexed bindings."""

    def __init__(
        self,
        *,
        threshold: float = DEFAULT_THRESHOLD,
        distance: int = DEFAULT_DISTANCE,
        min_match_char_length: int = MIN_MATCH_CHAR_LENGTH,
    ) -> None:
        self._threshold = threshold
        self._distance = distance
        self._min_match_char_length = min_match_char_length
        self._bindings: List[ParsedBinding] = []
        self._built = False

    def build_index(self, bindings: List[ParsedBinding]) -> None:
        self._bindings = list(bindings)
        self._built = True

    def search(self, query: str, limit: int = 50) -> List[SearchResult]:
        pattern = query.strip() if query else ""
        if not self._built or limit <= 0:
            return []
        if len(pattern) < self._min_match_char_length:
            return []

        scored: List[Tuple[float, int, SearchResult]] = []
        for index, binding in enumerate(self._bindings):
            result = self._score(pattern, binding)
            if result is not None:
                scored.append((result.score, index, result))

        scored.sort(key=lambda item: (item[0], item[1]))
        return [result for _, _, result in scored[:limit]]

    def filter_by_category(self, category: str) -> List[ParsedBinding]:
        return [b for b in self._bindings if b.category == category]

    def filter_multi_chord(self) -> List[ParsedBinding]:
        return [b for b in self._bindings if b.is_multi_chord]

    def filter_single_chord(self) -> List[ParsedBinding]:
        return [b for b in self._bindings if not b.is_multi_chord]

    def get_categories(self) -> List[str]:
        return sorted({b.category for b in self._bindings if b.category is not None})

    def get_category_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for binding in self._bindings:
            if binding.category is None:
                continue
            counts[binding.category] = counts.get(binding.category, 0) + 1
        return counts

    def _score(self, pattern: str, binding: ParsedBinding) -> Optional[SearchResult]:
        best: Optional[float] = None
        groups: set[str] = set()

        for field in _FIELDS:
            value = field.getter(binding)
            if not value:
                continue
            score = field_score(
                pattern,
                value,
                threshold=self._threshold,
                distance=self._distance,
            )
            if score is None:
                continue
            weighted = score * _MAX_WEIGHT / field.weight
            if best is None or weighted < best:
                best = weighted
            if field.group is not None:
                groups.add(field.group)

        if best is None:
            return None
        return SearchResult(
            binding=binding,
            score=best,
            matched_fields=MatchedFields(
                key="key" in groups,
                command="command" in groups,
                category="category" in groups,
            ),
        )
