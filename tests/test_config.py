"""
Tests for gocodegen.config
==========================
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from gocodegen.config import TemplateConfig


class TestTemplateConfig:
    """Tests for TemplateConfig validation."""

    def test_defaults(self) -> None:
        config = TemplateConfig()
        assert config.name == "generated.go"
        assert config.prune_unused_imports is True
        assert config.trim_blocks is True
        assert config.lstrip_blocks is True
        assert config.keep_trailing_newline is True

    def test_name_is_stripped(self) -> None:
        assert TemplateConfig(name="  out.go ").name == "out.go"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name(self, name: str) -> None:
        with pytest.raises(ValidationError):
            TemplateConfig(name=name)

    def test_unknown_key(self) -> None:
        with pytest.raises(ValidationError):
            TemplateConfig(prune=True)  # type: ignore[call-arg]

    def test_frozen(self) -> None:
        config = TemplateConfig()
        with pytest.raises(ValidationError):
            config.name = "other.go"  # type: ignore[misc]


class TestFromToml:
    """Tests for TemplateConfig.from_toml."""

    def test_reads_tool_table(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text(
            '[project]\nname = "x"\n\n'
            '[tool.gocodegen]\nname = "models_gen.go"\nprune_unused_imports = false\n'
        )
        config = TemplateConfig.from_toml(path)
        assert config.name == "models_gen.go"
        assert config.prune_unused_imports is False
        assert config.trim_blocks is True

    def test_missing_table(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "x"\n')
        assert TemplateConfig.from_toml(path) == TemplateConfig()

    def test_invalid_table(self, tmp_path: Path) -> None:
        path = tmp_path / "gocodegen.toml"
        path.write_text("[tool.gocodegen]\nunknown = 1\n")
        with pytest.raises(ValidationError):
            TemplateConfig.from_toml(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            TemplateConfig.from_toml(tmp_path / "nope.toml")
