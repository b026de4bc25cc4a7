"""
gocodegen.config - Template Configuration
=========================================

Settings that control how :mod:`gocodegen.codetemplate` parses and renders
templates. They can be given directly or read from the ``[tool.gocodegen]``
table of a TOML file such as ``pyproject.toml``:

.. code-block:: toml

    [tool.gocodegen]
    name = "models_gen.go"
    prune_unused_imports = true
    trim_blocks = true
"""

from __future__ import annotations

import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TemplateConfig(BaseModel):
    """
    Options for parsing and rendering a Go code template.

    Attributes
    ----------
    name : str
        Template name, used in Jinja2 error messages and as the filename
        reported when the rendered code fails to parse.

    prune_unused_imports : bool
        Remove imports the rendered code does not reference. Disable to
        keep every import literally written in the template.

    trim_blocks : bool
        Remove the first newline after a block tag (``{% if %}``).

    lstrip_blocks : bool
        Strip whitespace before a block tag at the start of a line.

    keep_trailing_newline : bool
        Keep a single trailing newline of the template text.

    Examples
    --------
    >>> TemplateConfig().name
    'generated.go'
    >>> TemplateConfig(prune_unused_imports=False).prune_unused_imports
    False
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(
        default="generated.go",
        description="Template name used in error messages",
        min_length=1,
    )
    prune_unused_imports: bool = Field(
        default=True,
        description="Delete unreferenced imports after rendering",
    )
    trim_blocks: bool = Field(
        default=True,
        description="Remove the first newline after a block tag",
    )
    lstrip_blocks: bool = Field(
        default=True,
        description="Strip leading whitespace before block tags",
    )
    keep_trailing_newline: bool = Field(
        default=True,
        description="Preserve the template's trailing newline",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "Template name must not be blank."
            raise ValueError(msg)
        return v

    @classmethod
    def from_toml(cls, path: Path) -> TemplateConfig:
        """
        Load configuration from the ``[tool.gocodegen]`` table of a TOML file.

        Parameters
        ----------
        path : Path
            Path to the TOML file.

        Returns
        -------
        TemplateConfig
            Validated configuration; defaults when the table is absent.

        Raises
        ------
        FileNotFoundError
            If the file doesn't exist.
        ValidationError
            If the table contains unknown keys or invalid values.
        """
        with open(path, "rb") as f:
            data = tomllib.load(f)

        table = data.get("tool", {}).get("gocodegen", {})
        return cls(**table)
