from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from chordmap.index.live_tracker import COMPLETES_MARKER
from chordmap.keys.config import ChordmapConfig, apply_filters, load_config
from chordmap.keys.ir import DisplayProfile
from chordmap.session import ChordmapSession


def _fixture(name: str) -> Path:
    return Path(__file__).with_name(name)


def test_load_config_from_toml() -> None:
    config = load_config(_fixture("chordmap.toml"))

    assert config.display_profile == DisplayProfile.SYMBOL
    assert config.live_timeout_ms == 1500
    assert config.search_result_limit == 10
    # not in the file, so the default applies
    assert config.category_derivation == "simple"
    assert config.show_disabled_bindings is True


def test_load_config_defaults() -> None:
    config = load_config(None)

    assert config.live_timeout_ms == 3000
    assert config.search_result_limit == 50
    assert config.derive_categories


def test_load_config_top_level_table(tmp_path: Path) -> None:
    path = tmp_path / "settings.toml"
    path.write_text('display_profile = "text"\ncategory_derivation = "off"\n', encoding="utf-8")
    config = load_config(path)

    assert config.display_profile == DisplayProfile.TEXT
    assert not config.derive_categories


def test_invalid_config_value_raises() -> None:
    with pytest.raises(ValidationError):
        ChordmapConfig.model_validate({"live_timeout_ms": -1})


def test_session_wires_components(scheduler) -> None:
    config = ChordmapConfig(display_profile=DisplayProfile.TEXT, live_timeout_ms=1500)
    session = ChordmapSession(config, scheduler=scheduler)
    bindings = session.load_file(_fixture("keybindings.jsonc"), "VS Code")

    assert len(bindings) == 7
    assert session.stats().total_nodes == 7
    assert session.search("git.pull")[0].binding.command == "git.pull"
    assert session.lookup("cmd+k cmd+s") is not None
    assert session.display("cmd+k cmd+s") == "Ctrl+K Ctrl+S"
    assert len(session.conflicts()) == 1

    session.tracker.activate()
    session.tracker.key_event("cmd+k")
    assert scheduler.pending[0].delay == pytest.approx(1.5)
    assert [b.command for b in session.visible_bindings()] == ["workbench.action.files.saveAll", "x"]
    assert set(session.next_possible_keys()) == {"cmd+s", COMPLETES_MARKER}

    session.close()
    assert not session.tracker.is_active()
    assert scheduler.pending == []


def test_reload_replaces_everything(scheduler) -> None:
    session = ChordmapSession(scheduler=scheduler)
    session.load_file(_fixture("keybindings.jsonc"), "VS Code")
    old_tree = session.tree

    session.load_content('[{"key": "ctrl+j", "command": "a"}]', "Other Editor")

    assert [b.command for b in session.bindings] == ["a"]
    assert list(session.tree) == ["ctrl+j"]
    assert session.tree is not old_tree
    assert session.search("git.pull") == []


def test_hidden_disabled_bindings(scheduler) -> None:
    session = ChordmapSession(ChordmapConfig(show_disabled_bindings=False), scheduler=scheduler)
    session.load_file(_fixture("keybindings.jsonc"), "VS Code")

    visible = session.visible_bindings()
    assert len(visible) == 6
    assert all(not b.disabled for b in visible)
    assert len(apply_filters(session.bindings, ChordmapConfig())) == 7


def test_search_limit_comes_from_config(scheduler) -> None:
    session = ChordmapSession(ChordmapConfig(search_result_limit=1), scheduler=scheduler)
    session.load_file(_fixture("keybindings.jsonc"), "VS Code")

    assert len(session.search("cmd")) == 1
    assert len(session.search("cmd", limit=3)) == 3


def test_metadata_category_derivation_is_accepted(tmp_path: Path) -> None:
    path = tmp_path / "settings.toml"
    path.write_text('category_derivation = "metadata"\n', encoding="utf-8")
    config = load_config(path)

    assert config.category_derivation == "metadata"
    assert config.derive_categories
