"""
gocodegen.errors - Exception Hierarchy
======================================

Errors raised by gocodegen fall into two families:

1. **Caller errors** derive from :class:`CodegenError`. They describe
   something the caller can fix (a bad configuration value, an invalid
   alias) and are safe to catch and report.

2. **Internal defects** derive from :class:`RuntimeError`. Running out of
   aliases or failing to re-parse generated code means the generator and
   the code it produced disagree. These are not meant to be caught by
   ordinary error handling and propagate with a full traceback.

Template syntax and execution errors are not wrapped: Jinja2's own
exception types (``jinja2.TemplateSyntaxError``, ``jinja2.UndefinedError``)
already carry the template name and line number.
"""

from __future__ import annotations


class CodegenError(Exception):
    """Base class for caller-fixable gocodegen errors."""


class InvalidAliasError(CodegenError, ValueError):
    """An explicit import alias is not a valid Go identifier."""


class DiscardedImportError(CodegenError):
    """A symbol was referenced from a package imported only for its side effects."""

    def __init__(self, import_path: str, name: str) -> None:
        self.import_path = import_path
        self.name = name
        super().__init__(
            f"cannot reference {name!r}: {import_path!r} is imported with the blank identifier"
        )


# =============================================================================
# Fatal Defects
# =============================================================================

class AliasSpaceExhaustedError(RuntimeError):
    """
    No free local alias could be found for an import path.

    Raised by :meth:`gocodegen.imports.FileImports.add` when the alias
    suggester produced no acceptable candidate within
    :data:`gocodegen.imports.MAX_ALIAS_ATTEMPTS` tries. This usually means one
    registry is being reused for far too many packages with the same name.
    """

    def __init__(self, import_path: str, attempts: int) -> None:
        self.import_path = import_path
        self.attempts = attempts
        super().__init__(
            f"no acceptable alias found for importing {import_path!r} "
            f"after {attempts} attempts"
        )


class FormattingError(RuntimeError):
    """Generated Go code could not be post-processed."""


class GoSyntaxError(FormattingError):
    """
    Go source text failed to parse.

    Attributes
    ----------
    filename : str
        Name used to identify the source in messages (may be empty).
    line : int
        1-based line of the first syntax error.
    column : int
        1-based column of the first syntax error.
    """

    def __init__(self, filename: str, line: int, column: int, detail: str = "") -> None:
        self.filename = filename
        self.line = line
        self.column = column
        self.detail = detail
        location = f"{filename or '<source>'}:{line}:{column}"
        message = f"parse error: {location}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ImportDeletionError(FormattingError):
    """An import selected for pruning could not be removed from the tree."""

    def __init__(self, name: str, path: str) -> None:
        self.name = name
        self.path = path
        super().__init__(
            f"tried to delete import (local name = {name!r}, path = {path!r}) and failed"
        )


__all__ = [
    "AliasSpaceExhaustedError",
    "CodegenError",
    "DiscardedImportError",
    "FormattingError",
    "GoSyntaxError",
    "ImportDeletionError",
    "InvalidAliasError",
]
