"""
gocodegen.goast - Go Source Parsing and Printing
================================================

A thin wrapper around the tree-sitter Go grammar offering exactly what
the import pruner needs:

    GoFile(source)               parse, raising GoSyntaxError on bad input
    GoFile.imports()             list the file's import specs
    GoFile.delete_import(n, p)   remove one import spec
    GoFile.print()               canonical source text

Edits are applied to the source bytes and the file is re-parsed after
each one, so the tree always describes the current text.

Printing
--------
``print()`` applies the parts of gofmt's layout rules that edits can
disturb: trailing whitespace is removed, consecutive blank lines collapse
to one, and the file ends with exactly one newline. Raw string literals
and block comments are left untouched.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

import tree_sitter_go as tsgo
from tree_sitter import Language, Node, Parser, Tree

from gocodegen.errors import GoSyntaxError


if TYPE_CHECKING:
    from collections.abc import Iterator


GO_LANGUAGE = Language(tsgo.language())

_BLANK_LINE_AHEAD = re.compile(rb"[ \t]*\n")
_BLANK_LINE_BEHIND = re.compile(rb"\n[ \t]*\n\Z")


@dataclass(frozen=True)
class ImportDecl:
    """
    A single import spec as written in the source.

    Attributes
    ----------
    name : str
        Explicit package name: an identifier, ``_``, ``.``, or ``""`` when
        the spec has none.
    path : str
        Unquoted import path.
    line : int
        1-based line of the spec.
    """

    name: str
    path: str
    line: int

    def __str__(self) -> str:
        return f"(local name = {self.name!r}, path = {self.path!r})"


def _unquote(literal: str) -> str:
    if literal.startswith("`"):
        return literal[1:-1]
    body = literal[1:-1]
    return body.replace('\\"', '"').replace("\\\\", "\\")


class GoFile:
    """
    A parsed Go source file.

    Parameters
    ----------
    source : str
        Complete Go source text.
    filename : str
        Name used in error messages only.

    Raises
    ------
    GoSyntaxError
        If the source does not parse or lacks a package clause.
    """

    def __init__(self, source: str, filename: str = "") -> None:
        self.filename = filename
        self._source = source.encode("utf-8")
        self._tree = self._parse(self._source)

    # -------------------------------------------------------------------------
    # Parsing
    # -------------------------------------------------------------------------

    def _parse(self, source: bytes) -> Tree:
        tree = Parser(GO_LANGUAGE).parse(source)
        root = tree.root_node
        if root.has_error:
            bad = _first_error(root)
            row, column = bad.start_point if bad is not None else root.start_point
            if bad is not None and bad.is_missing:
                detail = f"missing {bad.type}"
            else:
                snippet = self._snippet(bad, source)
                detail = f"unexpected {snippet!r}" if snippet else "syntax error"
            raise GoSyntaxError(self.filename, row + 1, column + 1, detail)
        if not any(child.type == "package_clause" for child in root.children):
            raise GoSyntaxError(self.filename, 1, 1, "expected 'package'")
        return tree

    @staticmethod
    def _snippet(node: Node | None, source: bytes) -> str:
        if node is None:
            return ""
        text = source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")
        return text.splitlines()[0][:40] if text else ""

    @property
    def root_node(self) -> Node:
        """Root ``source_file`` node of the current tree."""
        return self._tree.root_node

    @property
    def source(self) -> str:
        """Current source text, without canonical printing applied."""
        return self._source.decode("utf-8")

    def text(self, node: Node) -> str:
        """Return the source text covered by ``node``."""
        return self._source[node.start_byte:node.end_byte].decode("utf-8")

    def walk(self, start: Node | None = None) -> Iterator[Node]:
        """Yield ``start`` (default: root) and all its descendants, depth first."""
        cursor = (self.root_node if start is None else start).walk()
        visited_children = False
        while True:
            if not visited_children:
                yield cursor.node
                if not cursor.goto_first_child():
                    visited_children = True
            elif cursor.goto_next_sibling():
                visited_children = False
            elif not cursor.goto_parent():
                break
            else:
                visited_children = True

    # -------------------------------------------------------------------------
    # Imports
    # -------------------------------------------------------------------------

    def _import_declarations(self) -> list[tuple[Node, list[Node]]]:
        decls = []
        for child in self.root_node.children:
            if child.type != "import_declaration":
                continue
            specs: list[Node] = []
            for part in child.named_children:
                if part.type == "import_spec":
                    specs.append(part)
                elif part.type == "import_spec_list":
                    specs.extend(n for n in part.named_children if n.type == "import_spec")
            decls.append((child, specs))
        return decls

    def _import_decl(self, spec: Node) -> ImportDecl:
        name_node = spec.child_by_field_name("name")
        path_node = spec.child_by_field_name("path")
        return ImportDecl(
            name=self.text(name_node) if name_node is not None else "",
            path=_unquote(self.text(path_node)),
            line=spec.start_point[0] + 1,
        )

    def imports(self) -> list[ImportDecl]:
        """Return every import spec in source order."""
        return [
            self._import_decl(spec)
            for _, specs in self._import_declarations()
            for spec in specs
        ]

    def delete_import(self, name: str, path: str) -> bool:
        """
        Remove the import spec with the given explicit name and path.

        When the spec is the last one of its declaration, the whole
        declaration goes and comments written inside it are kept as
        top-level comments.

        Parameters
        ----------
        name : str
            Explicit package name of the spec, ``""`` for none.
        path : str
            Unquoted import path.

        Returns
        -------
        bool
            False if no such spec exists.
        """
        for decl, specs in self._import_declarations():
            for spec in specs:
                info = self._import_decl(spec)
                if info.name != name or info.path != path:
                    continue
                if len(specs) == 1:
                    self._delete_declaration(decl)
                else:
                    self._delete_spec(spec)
                return True
        return False

    def _delete_spec(self, spec: Node) -> None:
        start, end = self._line_span(spec)
        source = self._source
        if source[end - 1:end] == b"\n":
            # Don't leave a blank line just inside the parentheses.
            blank_after = _BLANK_LINE_AHEAD.match(source, end)
            blank_before = _BLANK_LINE_BEHIND.search(source, 0, start)
            if source[:start].endswith(b"(\n") and blank_after:
                end = blank_after.end()
            elif source[end:].lstrip(b" \t").startswith(b")") and blank_before:
                start = blank_before.start() + 1
        self._splice(start, end, b"")

    def _delete_declaration(self, decl: Node) -> None:
        comments = [
            self.text(node) for node in self.walk(decl) if node.type == "comment"
        ]
        replacement = "".join(f"{comment}\n" for comment in comments).encode("utf-8")
        start, end = self._line_span(decl)
        if end == decl.end_byte and replacement:
            replacement = replacement.rstrip(b"\n")
        self._splice(start, end, replacement)

    def _line_span(self, node: Node) -> tuple[int, int]:
        """
        Byte range to delete for ``node``.

        Whole lines are taken when the node is alone on them (a trailing
        line comment counts as part of the node). Otherwise just the node
        and a following ``;``.
        """
        source = self._source
        line_start = source.rfind(b"\n", 0, node.start_byte) + 1
        line_end = source.find(b"\n", node.end_byte)
        if line_end == -1:
            line_end = len(source)
        before = source[line_start:node.start_byte]
        after = source[node.end_byte:line_end].strip()
        if not before.strip() and (not after or after.startswith(b"//")):
            return line_start, min(line_end + 1, len(source))

        end = node.end_byte
        rest = source[end:line_end]
        if rest.lstrip().startswith(b";"):
            end += len(rest) - len(rest.lstrip()) + 1
        return node.start_byte, end

    def _splice(self, start: int, end: int, replacement: bytes) -> None:
        self._source = self._source[:start] + replacement + self._source[end:]
        self._tree = self._parse(self._source)

    # -------------------------------------------------------------------------
    # Printing
    # -------------------------------------------------------------------------

    def _protected_ranges(self) -> list[tuple[int, int]]:
        return [
            (node.start_byte, node.end_byte)
            for node in self.walk()
            if node.type == "raw_string_literal"
            or (node.type == "comment" and self._source.startswith(b"/*", node.start_byte))
        ]

    def print(self) -> str:
        """Return the source in canonical layout."""
        protected = self._protected_ranges()
        out: list[bytes] = []
        offset = 0
        for line in self._source.split(b"\n"):
            newline_at = offset + len(line)
            offset = newline_at + 1
            if any(start < newline_at < end for start, end in protected):
                out.append(line)
                continue
            line = line.rstrip(b" \t\r")
            if not line and (not out or out[-1] == b""):
                continue
            out.append(line)

        while out and out[-1] == b"":
            out.pop()
        if not out:
            return ""
        return b"\n".join(out).decode("utf-8") + "\n"

    def __str__(self) -> str:
        return self.print()


def _first_error(node: Node) -> Node | None:
    if node.is_error or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = _first_error(child)
        if found is not None:
            return found
    return node
