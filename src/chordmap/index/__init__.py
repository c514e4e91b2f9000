from __future__ import annotations

from .live_tracker import COMPLETES_MARKER, LiveSequenceTracker, LiveTrackerState, Subscription
from .prefix_tree import (
    PrefixNode,
    PrefixTree,
    TreeStats,
    build_prefix_tree,
    find_conflicts,
    find_node,
    flatten_tree,
    get_leaf_nodes,
    get_nodes_at_depth,
    get_tree_stats,
)
from .scheduler import AsyncioScheduler, Scheduler, ThreadingScheduler
from .search import MatchedFields, SearchRanker, SearchResult

__all__ = [
    "COMPLETES_MARKER",
    "AsyncioScheduler",
    "LiveSequenceTracker",
    "LiveTrackerState",
    "MatchedFields",
    "PrefixNode",
    "PrefixTree",
    "Scheduler",
    "SearchRanker",
    "SearchResult",
    "Subscription",
    "ThreadingScheduler",
    "TreeStats",
    "build_prefix_tree",
    "find_conflicts",
    "find_node",
    "flatten_tree",
    "get_leaf_nodes",
    "get_nodes_at_depth",
    "get_tree_stats",
]
