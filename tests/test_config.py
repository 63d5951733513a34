from pathlib import Path

import pytest

from examtex.config import (
    DEFAULT_CONFIG, ConfigError, ExtractConfig, SanitizeConfig, config_from_dict, load_config,
)


def test_defaults():
    assert load_config(None) is DEFAULT_CONFIG
    assert DEFAULT_CONFIG.sanitize == SanitizeConfig()
    assert DEFAULT_CONFIG.extract == ExtractConfig()
    assert DEFAULT_CONFIG.sanitize.blank_cm_per_underscore == 0.3
    assert DEFAULT_CONFIG.sanitize.blank_max_cm == 4.0


def test_yaml_overrides(tmp_path: Path):
    p = tmp_path / "examtex.yaml"
    p.write_text(
        "sanitize:\n"
        "  blank_max_cm: 3\n"
        "extract:\n"
        "  extra_boilerplate: [Read The Passage]\n"
        "  layouts: [subsection_q, plain_q]\n",
        encoding="utf-8",
    )
    cfg = load_config(p)
    assert cfg.sanitize.blank_max_cm == 3.0
    assert cfg.sanitize.blank_cm_per_underscore == 0.3
    assert cfg.extract.extra_boilerplate == ("read the passage",)
    assert cfg.extract.layouts == ("subsection_q", "plain_q")


def test_empty_file_gives_defaults(tmp_path: Path):
    p = tmp_path / "empty.yaml"
    p.write_text("", encoding="utf-8")
    assert load_config(p) == DEFAULT_CONFIG


@pytest.mark.parametrize("data", [
    {"sanitize": {"blank_max_cm": 0}},
    {"sanitize": {"colour": "red"}},
    {"extract": {"min_content_length": "five"}},
    {"render": {}},
])
def test_invalid_settings_are_rejected(data):
    with pytest.raises(ConfigError):
        config_from_dict(data)


def test_unreadable_files(tmp_path: Path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "missing.yaml")

    bad = tmp_path / "bad.yaml"
    bad.write_text("sanitize: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="YAML parse error"):
        load_config(bad)

    listy = tmp_path / "list.yaml"
    listy.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(listy)
