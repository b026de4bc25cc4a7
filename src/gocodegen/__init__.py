"""
gocodegen - Utilities for Generating Go Code
============================================

A library for Python programs that emit Go source files. It keeps track
of the imports a generated file needs while the file is being written,
so generators never declare imports by hand.

Features
--------
- **Import registry**: collision-free aliases for every imported package
- **Symbols**: ``math.Max``-style references that import their package
  as they are printed
- **Templates**: Jinja2 templates whose ``{{ header() }}`` is filled in
  after the body is rendered
- **Pruning**: unused imports are removed from the final output

Example
-------
>>> from gocodegen import FileImports, assumed_package_name, parse, sym
>>> tmpl = parse("{{ header() }}\\n\\nvar x = {{ fn }}(1, 2)\\n")
>>> imports = FileImports(assumed_package_name("abc/mypkg"))
>>> code = tmpl.render(imports, {"fn": sym("alt/math", "Max")})

Architecture
------------
- ``models``: Package, Symbol and ImportSpec value types
- ``imports``: FileImports, the per-file import registry
- ``codetemplate``: Jinja2-based Go code templates
- ``unusedimports``: removal of unreferenced imports
- ``goast``: tree-sitter based Go parsing and printing
- ``config``: Pydantic template configuration
- ``debugutil``: output comparison helpers for tests
"""

# =============================================================================
# Package Metadata
# =============================================================================
__version__ = "0.1.0"

# =============================================================================
# Public API Exports
# =============================================================================

from gocodegen.codetemplate import Template, parse
from gocodegen.config import TemplateConfig
from gocodegen.errors import (
    AliasSpaceExhaustedError,
    CodegenError,
    DiscardedImportError,
    FormattingError,
    GoSyntaxError,
    ImportDeletionError,
    InvalidAliasError,
)
from gocodegen.imports import MAX_ALIAS_ATTEMPTS, FileImports, default_suggester
from gocodegen.models import (
    GoCodeFormattable,
    ImportSpec,
    Package,
    Symbol,
    assumed_package_name,
    explicit_package_name,
    sym,
)
from gocodegen.unusedimports import prune_unparsed


__all__ = [
    "MAX_ALIAS_ATTEMPTS",
    "AliasSpaceExhaustedError",
    "CodegenError",
    "DiscardedImportError",
    "FileImports",
    "FormattingError",
    "GoCodeFormattable",
    "GoSyntaxError",
    "ImportDeletionError",
    "ImportSpec",
    "InvalidAliasError",
    "Package",
    "Symbol",
    "Template",
    "TemplateConfig",
    "__version__",
    "assumed_package_name",
    "default_suggester",
    "explicit_package_name",
    "parse",
    "prune_unparsed",
    "sym",
]
