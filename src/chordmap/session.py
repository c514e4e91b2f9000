from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from chordmap.index.live_tracker import LiveSequenceTracker
from chordmap.index.prefix_tree import (
    PrefixNode,
    PrefixTree,
    TreeStats,
    build_prefix_tree,
    find_conflicts,
    find_node,
    get_tree_stats,
)
from chordmap.index.scheduler import Scheduler
from chordmap.index.search import SearchRanker, SearchResult
from chordmap.keys.config import ChordmapConfig, apply_filters
from chordmap.keys.dsl import normalize_key_sequence_for_display
from chordmap.keys.frontend import KeybindingsFrontend
from chordmap.keys.ir import ParsedBinding

logger = logging.getLogger(__name__)


class ChordmapSession:
    """Wires the parser, prefix tree, ranker and live tracker together."""

    def __init__(
        self,
        config: Optional[ChordmapConfig] = None,
        *,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self.config = config or ChordmapConfig()
        self.frontend = KeybindingsFrontend()
        self.ranker = SearchRanker()
        self.tracker = LiveSequenceTracker(
            timeout_ms=self.config.live_timeout_ms,
            scheduler=scheduler,
        )
        self.bindings: List[ParsedBinding] = []
        self.tree: PrefixTree = {}

    def load_file(self, path: str | Path, source_editor: str) -> List[ParsedBinding]:
        path = Path(path)
        return self.load_content(path.read_text(encoding="utf-8"), source_editor)

    def load_content(self, content: str, source_editor: str) -> List[ParsedBinding]:
        """Parse and replace every derived structure; nothing is patched in place."""

        bindings = self.frontend.parse_keybindings_file(
            content,
            source_editor,
            derive_categories=self.config.derive_categories,
        )
        self.bindings = bindings
        self.tree = build_prefix_tree(bindings)
        self.ranker.build_index(bindings)
        logger.info("loaded %d bindings from %s", len(bindings), source_editor)
        return bindings

    def visible_bindings(self) -> List[ParsedBinding]:
        return self.tracker.filter_bindings(apply_filters(self.bindings, self.config))

    def next_possible_keys(self) -> List[str]:
        return self.tracker.get_next_possible_keys(self.tree)

    def search(self, query: str, limit: Optional[int] = None) -> List[SearchResult]:
        if limit is None:
            limit = self.config.search_result_limit
        return self.ranker.search(query, limit)

    def lookup(self, sequence: str) -> Optional[PrefixNode]:
        return find_node(self.tree, sequence)

    def display(self, sequence: str) -> str:
        return normalize_key_sequence_for_display(sequence, self.config.display_profile)

    def stats(self) -> TreeStats:
        return get_tree_stats(self.tree)

    def conflicts(self) -> List[PrefixNode]:
        return find_conflicts(self.tree)

    def close(self) -> None:
        self.tracker.dispose()
