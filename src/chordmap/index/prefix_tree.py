from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from pydantic import BaseModel, Field

from chordmap.keys.dsl import canonical_sequence
from chordmap.keys.ir import ParsedBinding

logger = logging.getLogger(__name__)


class PrefixNode(BaseModel):
    """One chord step; ``bindings`` holds the bindings that end exactly here."""

    chord: str
    canonical_key: str
    children: Dict[str, PrefixNode] = Field(default_factory=dict)
    bindings: List[ParsedBinding] = Field(default_factory=list)
    full_path: List[str] = Field(default_factory=list)

    @property
    def depth(self) -> int:
        return len(self.full_path) - 1


class TreeStats(BaseModel):
    total_nodes: int = 0
    max_depth: int = 0
    single_chord_count: int = 0
    multi_chord_count: int = 0


PrefixTree = Dict[str, PrefixNode]


def build_prefix_tree(bindings: Iterable[ParsedBinding]) -> PrefixTree:
    """Index bindings by canonical chord path, keyed by the first chord."""

    roots: PrefixTree = {}

    for binding in bindings:
        chords = binding.chords
        if not chords:
            logger.debug("skipping binding with empty key sequence: %s", binding.command)
            continue

        first = chords[0]
        node = roots.get(first.canonical_key)
        if node is None:
            node = PrefixNode(
                chord=first.raw,
                canonical_key=first.canonical_key,
                full_path=[first.raw],
            )
            roots[first.canonical_key] = node

        full_path = [first.raw]
        for chord in chords[1:]:
            full_path.append(chord.raw)
            child = node.children.get(chord.canonical_key)
            if child is None:
                child = PrefixNode(
                    chord=chord.raw,
                    canonical_key=chord.canonical_key,
                    full_path=list(full_path),
                )
                node.children[chord.canonical_key] = child
            node = child

        node.bindings.append(binding)

    return roots


def find_node(tree: PrefixTree, sequence: str | Iterable[str]) -> Optional[PrefixNode]:
    """Return the node at exactly ``sequence``, or ``None`` on the first missing edge."""

    keys = canonical_sequence(sequence)
    if not keys:
        return None

    node = tree.get(keys[0])
    for key in keys[1:]:
        if node is None:
            return None
        node = node.children.get(key)
    return node


def iter_nodes(tree: PrefixTree) -> Iterator[PrefixNode]:
    """Pre-order walk over every node."""

    def _walk(node: PrefixNode) -> Iterator[PrefixNode]:
        yield node
        for child in node.children.values():
            yield from _walk(child)

    for root in tree.values():
        yield from _walk(root)


def get_leaf_nodes(tree: PrefixTree) -> List[PrefixNode]:
    return [node for node in iter_nodes(tree) if node.bindings]


def get_nodes_at_depth(tree: PrefixTree, depth: int) -> List[PrefixNode]:
    if depth < 0:
        return []
    if depth == 0:
        return list(tree.values())
    return [node for node in iter_nodes(tree) if node.depth == depth]


def get_tree_stats(tree: PrefixTree) -> TreeStats:
    stats = TreeStats()
    for node in iter_nodes(tree):
        depth = node.depth
        stats.total_nodes += 1
        stats.max_depth = max(stats.max_depth, depth)
        if depth == 0:
            stats.single_chord_count += len(node.bindings)
        else:
            stats.multi_chord_count += len(node.bindings)
    return stats


def flatten_tree(tree: PrefixTree) -> List[ParsedBinding]:
    bindings: List[ParsedBinding] = []
    for node in iter_nodes(tree):
        bindings.extend(node.bindings)
    return bindings


def find_conflicts(tree: PrefixTree) -> List[PrefixNode]:
    """Nodes where two or more bindings with different commands end.

    A binding that merely extends a shorter one is not a conflict.
    """

    return [
        node
        for node in iter_nodes(tree)
        if len({b.command for b in node.bindings}) > 1
    ]
