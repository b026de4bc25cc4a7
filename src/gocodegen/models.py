"""
gocodegen.models - Packages, Symbols and Import Specs
=====================================================

This module defines the value types that identify Go code entities from
the point of view of a code generator:

    Package
    ├── import_path: str   (identity, e.g. "golang.org/x/tools/v2")
    └── name: str          (declared name, e.g. "tools")

    Symbol
    ├── package: Package
    └── name: str          (e.g. "Max" in math.Max)

    ImportSpec
    ├── alias: str         (file-local package name)
    └── package: Package

All three are frozen Pydantic models: they are created once and never
mutated, so they can be shared freely between registries and templates.

Formatting Capability
---------------------
Any value that knows how to print itself as Go code *in the context of a
particular file's imports* implements :class:`GoCodeFormattable`. When a
template renders such a value it calls ``go_code(imports)`` with the
file's :class:`~gocodegen.imports.FileImports`, which registers the import
as a side effect. :class:`Symbol` is the built-in implementation.

Usage Example
-------------
>>> from gocodegen.models import assumed_package_name, sym
>>> assumed_package_name("github.com/foo/go-bar/v3").name
'bar'
>>> sym("math", "Max").package.import_path
'math'
"""

from __future__ import annotations

import posixpath
import re
import unicodedata
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from gocodegen.errors import DiscardedImportError


if TYPE_CHECKING:
    from gocodegen.imports import FileImports


# Aliases with special meaning in an import spec
DISCARD_ALIAS = "_"
DOT_ALIAS = "."

_VERSION_SEGMENT = re.compile(r"v[0-9]+")

GO_KEYWORDS = frozenset({
    "break", "case", "chan", "const", "continue", "default", "defer",
    "else", "fallthrough", "for", "func", "go", "goto", "if", "import",
    "interface", "map", "package", "range", "return", "select", "struct",
    "switch", "type", "var",
})


# =============================================================================
# Formatting Capability
# =============================================================================

class GoCodeFormattable(ABC):
    """
    A value that renders as Go code relative to a file's imports.

    Implementations may add imports to ``imports`` while formatting; that
    is how rendering a template body discovers which packages a file
    needs. Third-party types can either subclass this class or be
    registered as virtual subclasses with ``GoCodeFormattable.register``.
    """

    @abstractmethod
    def go_code(self, imports: FileImports) -> str:
        """Return the Go source text for this value inside ``imports``' file."""


# =============================================================================
# Package
# =============================================================================

class Package(BaseModel):
    """
    A Go package, identified by its import path.

    Attributes
    ----------
    import_path : str
        The string that appears in an import declaration, e.g.
        ``"golang.org/x/tools/go/ast/astutil"``. Two packages with the
        same import path are equal regardless of ``name``.

    name : str
        The identifier from the package clause of the package's own
        source files. It is the default local name when the package is
        imported without an alias.

    Examples
    --------
    >>> Package(import_path="alt/math", name="math") == Package(
    ...     import_path="alt/math", name="other")
    True
    """

    model_config = ConfigDict(frozen=True)

    import_path: str = Field(description="Import path identifying the package")
    name: str = Field(description="Name declared in the package clause")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Package):
            return NotImplemented
        return self.import_path == other.import_path

    def __hash__(self) -> int:
        return hash(self.import_path)

    def __str__(self) -> str:
        return self.import_path

    @property
    def is_universe(self) -> bool:
        """True for the pseudo-package of predeclared identifiers (``int64``, ``len``)."""
        return self.import_path == ""

    def symbol(self, name: str) -> Symbol:
        """Return the symbol ``name`` exported by (or local to) this package."""
        return Symbol(package=self, name=name)


# =============================================================================
# Symbol
# =============================================================================

class Symbol(BaseModel, GoCodeFormattable):
    """
    A (package, identifier) pair such as ``math.Max``.

    When the symbol belongs to the package of the file being generated it
    is printed as its bare name. Predeclared identifiers live in the
    universe package (empty import path) and are printed bare as well.
    Every other symbol is printed as ``alias.Name`` where the alias comes
    from the file's import registry, or bare when the package is
    dot-imported.
    """

    model_config = ConfigDict(frozen=True)

    package: Package
    name: str

    def __str__(self) -> str:
        if self.package.is_universe:
            return self.name
        return f"{self.package.import_path}.{self.name}"

    def go_code(self, imports: FileImports) -> str:
        """
        Print the symbol, importing its package if needed.

        Raises
        ------
        DiscardedImportError
            If the package is imported with the blank identifier ``_``.
        """
        if self.package.is_universe or self.package == imports.file_package:
            return self.name
        spec = imports.add(self.package)
        if spec.alias == DOT_ALIAS:
            return self.name
        if spec.alias == DISCARD_ALIAS:
            raise DiscardedImportError(self.package.import_path, self.name)
        return f"{spec.alias}.{self.name}"


# =============================================================================
# Import Spec
# =============================================================================

class ImportSpec(BaseModel):
    """
    One entry in a Go file's import block.

    Attributes
    ----------
    alias : str
        The name that refers to the package inside the importing file.

    package : Package
        The imported package.
    """

    model_config = ConfigDict(frozen=True)

    alias: str
    package: Package

    @property
    def is_explicit(self) -> bool:
        """
        Whether the spec needs an explicit package name in the source.

        This is the case whenever the local alias differs from the
        package's declared name.
        """
        return self.alias != self.package.name

    @property
    def is_discard(self) -> bool:
        """Whether this is a side-effect import (``import _ "pkg"``)."""
        return self.alias == DISCARD_ALIAS

    def go_code(self) -> str:
        """Return the import spec line without indentation."""
        quoted = quote_import_path(self.package.import_path)
        if self.is_explicit:
            return f"{self.alias} {quoted}"
        return quoted


# =============================================================================
# Constructors
# =============================================================================

def _is_identifier_char(ch: str) -> bool:
    if ch.isascii():
        return ch.isalnum() or ch == "_"
    return ch.isalpha() or unicodedata.category(ch) == "Nd"


def assumed_package_name(import_path: str) -> Package:
    """
    Guess the declared name of a package from its import path alone.

    The defining source files are usually not available to a generator,
    so the name is derived purely from the string:

    1. Take the last path element.
    2. If it is a major version suffix (``v2``, ``v10``) use the element
       before it instead.
    3. Drop a leading ``go-``.
    4. Cut at the first character that cannot appear in an identifier.

    Parameters
    ----------
    import_path : str
        The package's import path.

    Returns
    -------
    Package
        A package whose ``name`` is the inferred declared name.

    Examples
    --------
    >>> assumed_package_name("go.lang/x/tools/v2").name
    'tools'
    >>> assumed_package_name("github.com/mattn/go-sqlite3").name
    'sqlite3'
    >>> assumed_package_name("gopkg.in/yaml.v3").name
    'yaml'
    """
    trimmed = import_path.rstrip("/")
    base = posixpath.basename(trimmed) if trimmed else "."
    if _VERSION_SEGMENT.fullmatch(base):
        parent = posixpath.dirname(trimmed)
        if parent:
            base = posixpath.basename(parent)
    base = base.removeprefix("go-")
    for i, ch in enumerate(base):
        if not _is_identifier_char(ch):
            base = base[:i]
            break
    return Package(import_path=import_path, name=base)


def explicit_package_name(import_path: str, name: str) -> Package:
    """Build a package whose declared name is known rather than guessed."""
    return Package(import_path=import_path, name=name)


def sym(import_path: str, name: str) -> Symbol:
    """
    Shorthand for ``assumed_package_name(import_path).symbol(name)``.

    An empty import path yields a predeclared identifier:

    >>> sym("", "int64").package.is_universe
    True
    """
    return assumed_package_name(import_path).symbol(name)


def quote_import_path(import_path: str) -> str:
    """Quote an import path as a Go interpreted string literal."""
    escaped = import_path.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def is_go_identifier(name: str) -> bool:
    """Whether ``name`` can be declared as a Go identifier (keywords excluded)."""
    if not name or name in GO_KEYWORDS or unicodedata.category(name[0]) == "Nd":
        return False
    return all(_is_identifier_char(ch) for ch in name)


def is_exported(name: str) -> bool:
    """Go's exported-identifier rule: the first character is upper case."""
    return bool(name) and name[0].isupper()
