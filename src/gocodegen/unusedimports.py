"""
gocodegen.unusedimports - Unused Import Pruning
===============================================

Library form of the import pruning done by ``goimports``, intended for
code generators. A template may import packages it only uses on some
code paths; pruning removes whichever imports the rendered output does
not reference.

Algorithm
---------
1. Parse the file (:class:`~gocodegen.goast.GoFile`).
2. Collect *references*: every ``X.Sel`` selector expression or qualified
   type where ``X`` is an identifier with no local binding in scope and
   ``Sel`` is exported.
3. Collect the imports, ignoring ``_`` and ``.`` imports and ``"C"``.
4. Delete every import whose local name has no reference.
5. Print the tree.

Step 2 is syntactic, not a type check. Any unbound identifier counts as a
package reference, so ``x.Field`` on an identifier the walker cannot see a
declaration for (a dot-imported name, say) keeps an import named ``x``
alive. Generated code rarely hits this.

Usage Example
-------------
>>> print(prune_unparsed("x.go", 'package foo\\nimport "bar"\\n'), end="")
package foo
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Mapping
from typing import TYPE_CHECKING

from gocodegen.errors import ImportDeletionError
from gocodegen.goast import GoFile, ImportDecl
from gocodegen.models import DISCARD_ALIAS, DOT_ALIAS, assumed_package_name, is_exported


if TYPE_CHECKING:
    from tree_sitter import Node


logger = logging.getLogger(__name__)

# Left-hand identifier -> exported right-hand names seen with it
References = dict[str, set[str]]

_FUNCTION_NODES = frozenset({"function_declaration", "method_declaration", "func_literal"})

_SCOPE_NODES = frozenset({
    "block",
    "if_statement",
    "for_statement",
    "expression_switch_statement",
    "type_switch_statement",
    "select_statement",
    "expression_case",
    "type_case",
    "default_case",
    "communication_case",
})

_PARAMETER_NODES = frozenset({
    "parameter_declaration",
    "variadic_parameter_declaration",
    "type_parameter_declaration",
})


# =============================================================================
# Public API
# =============================================================================

def prune_unparsed(filename: str, src: str) -> str:
    """
    Parse Go source, remove unused imports and print the result.

    Parameters
    ----------
    filename : str
        Used only in error messages.
    src : str
        Go source text.

    Returns
    -------
    str
        The pruned source.

    Raises
    ------
    GoSyntaxError
        If ``src`` does not parse.
    ImportDeletionError
        If an unused import could not be deleted.
    """
    go_file = GoFile(src, filename)
    prune_parsed(go_file)
    return go_file.print()


def prune_parsed(
    go_file: GoFile,
    package_names: Mapping[str, str] | None = None,
) -> list[ImportDecl]:
    """
    Remove unused imports from an already parsed file, in place.

    Parameters
    ----------
    go_file : GoFile
        The file to edit.
    package_names : Mapping[str, str] | None
        Known declared package names by import path. Paths not listed
        fall back to :func:`~gocodegen.models.assumed_package_name`.

    Returns
    -------
    list[ImportDecl]
        The imports that were deleted.
    """
    refs = collect_references(go_file)
    unused = [
        imp for imp in collect_imports(go_file)
        if import_identifier(imp, package_names) not in refs
    ]

    for imp in unused:
        if not go_file.delete_import(imp.name, imp.path):
            raise ImportDeletionError(imp.name, imp.path)
        logger.debug("pruned unused import %s from %s", imp, go_file.filename or "<source>")
    return unused


def collect_imports(go_file: GoFile) -> list[ImportDecl]:
    """Return the file's prunable imports: no ``_``, ``.`` or ``"C"`` imports."""
    return [
        imp for imp in go_file.imports()
        if imp.path != "C" and imp.name not in (DISCARD_ALIAS, DOT_ALIAS)
    ]


def import_identifier(imp: ImportDecl, package_names: Mapping[str, str] | None = None) -> str:
    """
    Return the identifier an import introduces into the file.

    The explicit name if there is one, else the known package name, else
    the name guessed from the import path.
    """
    if imp.name:
        return imp.name
    if package_names and package_names.get(imp.path):
        return package_names[imp.path]
    return assumed_package_name(imp.path).name


def collect_references(go_file: GoFile) -> References:
    """Map each unbound selector operand to the exported names selected from it."""
    return _ReferenceCollector(go_file).collect()


# =============================================================================
# Reference Collection
# =============================================================================

class _Scope:
    __slots__ = ("names", "parent")

    def __init__(self, parent: _Scope | None = None) -> None:
        self.names: set[str] = set()
        self.parent = parent

    def declare(self, name: str) -> None:
        if name != "_":
            self.names.add(name)

    def resolves(self, name: str) -> bool:
        scope: _Scope | None = self
        while scope is not None:
            if name in scope.names:
                return True
            scope = scope.parent
        return False


class _ReferenceCollector:
    """Walks a Go syntax tree tracking lexical scopes."""

    def __init__(self, go_file: GoFile) -> None:
        self._file = go_file
        self._refs: defaultdict[str, set[str]] = defaultdict(set)

    def collect(self) -> References:
        root = self._file.root_node
        file_scope = _Scope()
        self._declare_top_level(root, file_scope)
        for child in root.children:
            self._visit(child, file_scope)
        return dict(self._refs)

    # -------------------------------------------------------------------------
    # Declarations
    # -------------------------------------------------------------------------

    def _declare_top_level(self, root: Node, scope: _Scope) -> None:
        # Package-level names are visible throughout the file, before and
        # after their declaration.
        for child in root.children:
            if child.type == "function_declaration":
                self._declare_field(child, "name", scope)
            elif child.type in ("var_declaration", "const_declaration", "type_declaration"):
                for spec in _specs(child):
                    self._declare_field(spec, "name", scope)

    def _declare_field(self, node: Node, field: str, scope: _Scope) -> None:
        for name in node.children_by_field_name(field):
            scope.declare(self._file.text(name))

    def _declare_identifiers(self, node: Node | None, scope: _Scope) -> None:
        if node is None:
            return
        if node.type == "identifier":
            scope.declare(self._file.text(node))
            return
        for child in node.named_children:
            if child.type == "identifier":
                scope.declare(self._file.text(child))

    def _declare_parameters(self, node: Node | None, scope: _Scope) -> None:
        if node is None or node.type not in ("parameter_list", "type_parameter_list"):
            return
        for param in node.named_children:
            if param.type in _PARAMETER_NODES:
                self._declare_field(param, "name", scope)

    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------

    def _record(self, operand: Node | None, selected: Node | None, scope: _Scope) -> None:
        if operand is None or selected is None:
            return
        if operand.type not in ("identifier", "package_identifier"):
            return
        name = self._file.text(operand)
        if scope.resolves(name):
            # A local binding, not a package.
            return
        selected_name = self._file.text(selected)
        if not is_exported(selected_name):
            return
        self._refs[name].add(selected_name)

    def _visit_children(self, node: Node, scope: _Scope) -> None:
        for child in node.children:
            self._visit(child, scope)

    def _visit(self, node: Node, scope: _Scope) -> None:
        kind = node.type

        if kind == "selector_expression":
            self._record(
                node.child_by_field_name("operand"),
                node.child_by_field_name("field"),
                scope,
            )
        elif kind == "qualified_type":
            self._record(
                node.child_by_field_name("package"),
                node.child_by_field_name("name"),
                scope,
            )
        elif kind in _FUNCTION_NODES:
            inner = _Scope(scope)
            for field in ("receiver", "type_parameters", "parameters", "result"):
                self._declare_parameters(node.child_by_field_name(field), inner)
            self._visit_children(node, inner)
            return
        elif kind == "short_var_declaration":
            self._visit_optional(node.child_by_field_name("right"), scope)
            self._declare_identifiers(node.child_by_field_name("left"), scope)
            return
        elif kind in ("range_clause", "receive_statement"):
            self._visit_optional(node.child_by_field_name("right"), scope)
            left = node.child_by_field_name("left")
            if _has_token(node, ":="):
                self._declare_identifiers(left, scope)
            else:
                self._visit_optional(left, scope)
            return
        elif kind in ("var_spec", "const_spec"):
            # The new names are in scope only after the spec.
            self._visit_children(node, scope)
            self._declare_field(node, "name", scope)
            return
        elif kind in ("type_spec", "type_alias"):
            self._declare_field(node, "name", scope)
        elif kind == "type_switch_statement":
            inner = _Scope(scope)
            alias = node.child_by_field_name("alias")
            for child in node.children:
                if alias is not None and child == alias:
                    self._declare_identifiers(child, inner)
                else:
                    self._visit(child, inner)
            return
        elif kind in _SCOPE_NODES:
            self._visit_children(node, _Scope(scope))
            return

        self._visit_children(node, scope)

    def _visit_optional(self, node: Node | None, scope: _Scope) -> None:
        if node is not None:
            self._visit(node, scope)


def _specs(decl: Node) -> list[Node]:
    specs = []
    for child in decl.named_children:
        if child.type in ("var_spec_list", "const_spec_list", "type_spec_list"):
            specs.extend(child.named_children)
        else:
            specs.append(child)
    return [
        spec for spec in specs
        if spec.type in ("var_spec", "const_spec", "type_spec", "type_alias")
    ]


def _has_token(node: Node, token: str) -> bool:
    return any(not child.is_named and child.type == token for child in node.children)
