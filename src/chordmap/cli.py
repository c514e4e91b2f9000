from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List

from pydantic import BaseModel, TypeAdapter

from .index.prefix_tree import PrefixNode
from .index.search import SearchResult
from .keys.config import load_config
from .keys.frontend import StructuralParseError
from .keys.ir import ParsedBinding
from .session import ChordmapSession


class LookupReport(BaseModel):
    """What a typed-out sequence resolves to."""

    sequence: List[str]
    display: str
    bindings: List[ParsedBinding]
    next_keys: List[str]


class ConflictReport(BaseModel):
    path: List[str]
    commands: List[str]


def _lookup(session: ChordmapSession, sequence: str) -> LookupReport:
    tracker = session.tracker
    tracker.activate()
    try:
        for chord in sequence.split():
            tracker.key_event(chord)
        return LookupReport(
            sequence=tracker.get_current_sequence(),
            display=session.display(sequence),
            bindings=session.visible_bindings(),
            next_keys=session.next_possible_keys(),
        )
    finally:
        tracker.deactivate()


def _conflicts(nodes: List[PrefixNode]) -> List[ConflictReport]:
    return [
        ConflictReport(path=list(node.full_path), commands=[b.command for b in node.bindings])
        for node in nodes
    ]


def run(args: argparse.Namespace) -> str:
    session = ChordmapSession(load_config(args.config))
    try:
        session.load_file(args.keybindings, args.source_editor)

        if args.command == "stats":
            return session.stats().model_dump_json(indent=args.indent)
        if args.command == "search":
            results: List[SearchResult] = session.search(args.query, args.limit)
            return TypeAdapter(List[SearchResult]).dump_json(results, indent=args.indent).decode("utf-8")
        if args.command == "lookup":
            return _lookup(session, args.sequence).model_dump_json(indent=args.indent)
        if args.command == "conflicts":
            reports = _conflicts(session.conflicts())
            return TypeAdapter(List[ConflictReport]).dump_json(reports, indent=args.indent).decode("utf-8")
        if args.command == "display":
            return session.display(args.sequence)
        raise ValueError(f"unknown command: {args.command}")
    finally:
        session.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chordmap",
        description="Inspect chord sequences, prefixes and conflicts in a keybindings.json file.",
    )
    parser.add_argument("keybindings", type=Path, help="keybindings.json path (comments allowed)")
    parser.add_argument("--config", type=Path, default=None, help="chordmap settings toml path")
    parser.add_argument("--source-editor", default="VS Code", help="editor name recorded on each binding")
    parser.add_argument("--indent", type=int, default=2, help="JSON indent (default: 2)")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output to stderr")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("stats", help="prefix tree statistics")
    search = sub.add_parser("search", help="fuzzy search bindings")
    search.add_argument("query")
    search.add_argument("--limit", type=int, default=None, help="maximum results (default: from config)")
    lookup = sub.add_parser("lookup", help="bindings and continuations for a chord sequence")
    lookup.add_argument("sequence", help='e.g. "cmd+k cmd+s"')
    sub.add_parser("conflicts", help="sequences bound to more than one command")
    display = sub.add_parser("display", help="render a chord sequence with the configured profile")
    display.add_argument("sequence")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        output = run(args)
    except StructuralParseError as exc:
        parser.error(str(exc))
    print(output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
