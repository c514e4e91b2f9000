from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

from pydantic import ValidationError

from .config import KeybindingRecord
from .dsl import parse_key_sequence
from .ir import ParsedBinding, ValidationResult

logger = logging.getLogger(__name__)

DISABLE_MARKER = "-"

_CATEGORIES: Dict[str, str] = {
    "git": "Git",
    "workbench": "Workbench",
    "editor": "Editor",
    "terminal": "Terminal",
    "debug": "Debug",
    "explorer": "Explorer",
    "search": "Search",
    "scm": "Source Control",
    "extensions": "Extensions",
    "notebook": "Notebook",
    "testing": "Testing",
    "task": "Tasks",
    "file": "Files",
    "view": "Views",
    "list": "Lists",
    "problems": "Problems",
    "output": "Output",
    "markdown": "Markdown",
    "references": "References",
    "rename": "Refactoring",
    "go": "Navigation",
    "window": "Window",
}


class StructuralParseError(ValueError):
    """The keybindings content cannot be read as an array of records."""


def derive_category(command: str) -> str:
    """Map a command namespace (``git.pull`` -> ``git``) to a category label."""

    return _CATEGORIES.get(command.split(".", 1)[0], "Other")


def strip_jsonc(text: str) -> str:
    """Turn JSON-with-comments into strict JSON: comments and trailing commas go."""

    return _drop_trailing_commas(_strip_comments(text))


def _strip_comments(text: str) -> str:
    # Newlines inside comments are kept so decoder line numbers stay accurate.
    out: list[str] = []
    i = 0
    n = len(text)
    in_string = False

    while i < n:
        ch = text[i]

        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 1
            elif ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
            continue

        if ch == "/" and i + 1 < n and text[i + 1] == "/":
            i += 2
            while i < n and text[i] != "\n":
                i += 1
            continue

        if ch == "/" and i + 1 < n and text[i + 1] == "*":
            i += 2
            while i + 1 < n and not (text[i] == "*" and text[i + 1] == "/"):
                if text[i] == "\n":
                    out.append("\n")
                i += 1
            i += 2
            continue

        out.append(ch)
        i += 1

    return "".join(out)


def _drop_trailing_commas(text: str) -> str:
    out: list[str] = []
    n = len(text)
    in_string = False
    escaped = False

    for i, ch in enumerate(text):
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == ",":
            j = i + 1
            while j < n and text[j] in " \t\r\n":
                j += 1
            if j < n and text[j] in "}]":
                continue
        out.append(ch)

    return "".join(out)


class KeybindingsFrontend:
    """Parse keybindings files (JSON with comments) into ParsedBinding lists."""

    def load_file(
        self,
        path: str | Path,
        source_editor: str,
        *,
        derive_categories: bool = True,
    ) -> List[ParsedBinding]:
        path = Path(path)
        content = path.read_text(encoding="utf-8")
        return self.parse_keybindings_file(content, source_editor, derive_categories=derive_categories)

    def parse_keybindings_file(
        self,
        content: str,
        source_editor: str,
        *,
        derive_categories: bool = True,
    ) -> List[ParsedBinding]:
        raw_bindings = self._decode(content)

        parsed: List[ParsedBinding] = []
        for index, raw in enumerate(raw_bindings):
            binding = self.parse_binding(raw, source_editor, derive_categories=derive_categories)
            if binding is None:
                logger.warning("skipping malformed binding #%d: %r", index, raw)
                continue
            parsed.append(binding)

        logger.debug("parsed %d of %d bindings from %s", len(parsed), len(raw_bindings), source_editor)
        return parsed

    def parse_binding(
        self,
        raw: Any,
        source_editor: str,
        *,
        derive_categories: bool = True,
    ) -> ParsedBinding | None:
        """Build one ParsedBinding, or ``None`` when the record is unusable."""

        if not isinstance(raw, dict):
            return None
        try:
            record = KeybindingRecord.model_validate(raw)
        except ValidationError as exc:
            logger.debug("invalid binding %r: %s", raw, exc)
            return None

        disabled = record.command.startswith(DISABLE_MARKER)
        command = record.command[len(DISABLE_MARKER) :] if disabled else record.command

        return ParsedBinding(
            key=record.key,
            command=command,
            disabled=disabled,
            when=record.when,
            source_editor=source_editor,
            command_label=record.command_label,
            category=derive_category(command) if derive_categories else None,
        )

    def validate_binding(self, raw: Any) -> ValidationResult:
        if not isinstance(raw, dict):
            return ValidationResult(valid=False, errors=["binding must be an object"])

        errors: list[str] = []
        warnings: list[str] = []
        key = raw.get("key")
        command = raw.get("command")
        when = raw.get("when")

        if not key:
            errors.append('missing "key" field')
        elif not isinstance(key, str):
            errors.append('"key" must be a string')
        elif not parse_key_sequence(key):
            errors.append(f"invalid key format: {key!r}")

        if not command:
            errors.append('missing "command" field')
        elif not isinstance(command, str):
            errors.append('"command" must be a string')

        if when is not None and not isinstance(when, str):
            warnings.append('"when" should be a string')

        return ValidationResult(valid=not errors, errors=errors, warnings=warnings)

    def validate_bindings(
        self,
        raws: List[Any],
        *,
        source_editor: str = "unknown",
    ) -> Tuple[List[ParsedBinding], List[Dict[str, Any]]]:
        """Split raw records into parsed bindings and error reports."""

        valid: List[ParsedBinding] = []
        invalid: List[Dict[str, Any]] = []
        for raw in raws:
            result = self.validate_binding(raw)
            parsed = self.parse_binding(raw, source_editor) if result.valid else None
            if parsed is None:
                if result.valid:
                    # Passed the checks but failed strict record typing (e.g. a non-string "when").
                    result = ValidationResult(
                        valid=False,
                        errors=["record does not match the keybinding schema"],
                        warnings=result.warnings,
                    )
                invalid.append({"binding": raw, "errors": result.errors, "warnings": result.warnings})
                continue
            valid.append(parsed)
        return valid, invalid

    @staticmethod
    def _decode(content: str) -> list:
        try:
            data = json.loads(strip_jsonc(content))
        except (json.JSONDecodeError, RecursionError) as exc:
            raise StructuralParseError(f"failed to parse keybindings: {exc}") from exc

        if not isinstance(data, list):
            raise StructuralParseError(
                f"keybindings must contain an array, got: {type(data).__name__}"
            )
        return data
