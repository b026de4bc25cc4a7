"""
gocodegen.imports - Per-File Import Registry
============================================

:class:`FileImports` tracks the import block of one generated Go file. It
is created once per output file, grows while the file body is rendered
(every formatted :class:`~gocodegen.models.Symbol` calls :meth:`FileImports.add`),
and is finally asked to print itself into the file header.

Alias Selection
---------------
Each import path gets exactly one :class:`~gocodegen.models.ImportSpec`. The
first time a path is added, a *suggester* proposes candidate local names
in order of preference and the registry keeps the first one that is a
valid identifier and not already taken. The default suggester proposes
the package's declared name and then ``name1``, ``name2``, ...::

    add(math)            -> "math"
    add(alternative/math) -> "math1"

Only :data:`MAX_ALIAS_ATTEMPTS` candidates are examined. Running out is a
programming error and raises :class:`~gocodegen.errors.AliasSpaceExhaustedError`
instead of silently dropping the import.

Output Layout
-------------
:meth:`FileImports.format` prints three groups, each sorted by import path
and separated by a blank line::

    import (
        "math"                      <- unaliased

        math1 "alternative/math"    <- aliased

        _ "embed"                   <- side-effect imports
    )

Thread Safety
-------------
All reads take a shared lock and :meth:`FileImports.add` holds an exclusive
lock for its whole check-then-insert sequence, so concurrent renders into
one registry never create two specs for the same path. Suggesters run
under that lock and must not call back into the registry.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from itertools import count, islice

from gocodegen.errors import AliasSpaceExhaustedError, InvalidAliasError
from gocodegen.models import (
    DISCARD_ALIAS,
    DOT_ALIAS,
    ImportSpec,
    Package,
    is_go_identifier,
)


logger = logging.getLogger(__name__)

# Upper bound on alias candidates examined for a single import path
MAX_ALIAS_ATTEMPTS = 1000

Suggester = Callable[[Package], Iterable[str]]


# =============================================================================
# Reader/Writer Lock
# =============================================================================

class RWLock:
    """
    A lock allowing many concurrent readers or one writer.

    Not reentrant: a thread holding the write lock must not acquire it,
    or the read lock, again.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


# =============================================================================
# Alias Suggestion
# =============================================================================

def numbered_aliases(base: str) -> Iterator[str]:
    """Yield ``base``, ``base1``, ``base2``, ... without end."""
    yield base
    for suffix in count(1):
        yield f"{base}{suffix}"


def default_suggester(package: Package) -> Iterator[str]:
    """
    Suggest the declared package name, then numbered variants of it.

    Packages whose name could not be inferred fall back to ``pkg``.
    """
    return numbered_aliases(package.name or "pkg")


# =============================================================================
# File Imports
# =============================================================================

class FileImports:
    """
    The set of imports of one Go file, plus the file's own package.

    Parameters
    ----------
    file_package : Package
        Package the generated file belongs to. Symbols from this package
        are printed without a qualifier and never imported.

    imports : Iterable[Package]
        Packages to import up front, added in order with no explicit alias.
        Seeding reserves the natural name for packages the caller cares
        about most.

    suggester : Suggester | None
        Custom alias suggestion function. Receives the package being
        imported and returns candidate aliases in preference order.
        Defaults to :func:`default_suggester`.

    Examples
    --------
    >>> from gocodegen.models import assumed_package_name
    >>> fi = FileImports(assumed_package_name("abc.xyz/mypkg"))
    >>> fi.add(assumed_package_name("math")).alias
    'math'
    >>> fi.add(assumed_package_name("alternative/math")).alias
    'math1'
    """

    def __init__(
        self,
        file_package: Package,
        imports: Iterable[Package] = (),
        suggester: Suggester | None = None,
    ) -> None:
        self._file_package = file_package
        self._specs: list[ImportSpec] = []
        self._by_alias: dict[str, ImportSpec] = {}
        self._by_import_path: dict[str, ImportSpec] = {}
        self._suggester = suggester
        self._lock = RWLock()

        for package in imports:
            self.add(package)

    @property
    def file_package(self) -> Package:
        """Package of the file in which the imports appear."""
        return self._file_package

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def add(self, package: Package, alias: str = "") -> ImportSpec:
        """
        Import ``package``, or return its existing import spec.

        Parameters
        ----------
        package : Package
            The package to import.

        alias : str
            Preferred local name. Empty means "use the package name". The
            discard alias ``_`` and the dot alias ``.`` are always honored
            since they do not introduce a name into the file scope. Any
            other alias is tried first and numbered on conflict.

        Returns
        -------
        ImportSpec
            The spec for ``package.import_path``. Adding a path that is
            already present returns the original spec unchanged, whatever
            ``alias`` is passed.

        Raises
        ------
        InvalidAliasError
            If ``alias`` is not a valid Go identifier.
        AliasSpaceExhaustedError
            If no acceptable alias was found within
            :data:`MAX_ALIAS_ATTEMPTS` candidates.
        """
        if alias and alias not in (DISCARD_ALIAS, DOT_ALIAS) and not is_go_identifier(alias):
            raise InvalidAliasError(f"invalid import alias {alias!r} for {package.import_path!r}")

        with self._lock.write():
            existing = self._by_import_path.get(package.import_path)
            if existing is not None:
                return existing

            if alias in (DISCARD_ALIAS, DOT_ALIAS):
                return self._register(ImportSpec(alias=alias, package=package))

            if alias:
                candidates: Iterable[str] = numbered_aliases(alias)
            else:
                suggester = self._suggester or default_suggester
                candidates = suggester(package)

            for candidate in islice(candidates, MAX_ALIAS_ATTEMPTS):
                if candidate in self._by_alias or not is_go_identifier(candidate):
                    continue
                return self._register(ImportSpec(alias=candidate, package=package))

        raise AliasSpaceExhaustedError(package.import_path, MAX_ALIAS_ATTEMPTS)

    def _register(self, spec: ImportSpec) -> ImportSpec:
        # Caller holds the write lock.
        if spec.alias not in (DISCARD_ALIAS, DOT_ALIAS):
            self._by_alias[spec.alias] = spec
        self._by_import_path[spec.package.import_path] = spec
        self._specs.append(spec)
        logger.debug(
            "imported %r as %r in package %r",
            spec.package.import_path, spec.alias, self._file_package.import_path,
        )
        return spec

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def find(self, package: Package) -> ImportSpec | None:
        """Return the spec importing ``package``, or None if it is not imported."""
        with self._lock.read():
            return self._by_import_path.get(package.import_path)

    def list(self) -> list[ImportSpec]:
        """Return all import specs sorted by import path."""
        with self._lock.read():
            specs = list(self._specs)
        return sorted(specs, key=lambda spec: spec.package.import_path)

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._specs)

    def __iter__(self) -> Iterator[ImportSpec]:
        return iter(self.list())

    def __contains__(self, package: object) -> bool:
        return isinstance(package, Package) and self.find(package) is not None

    # -------------------------------------------------------------------------
    # Formatting
    # -------------------------------------------------------------------------

    def format(self, include_header: bool = False) -> str:
        """
        Print the import declaration, optionally preceded by the package clause.

        Parameters
        ----------
        include_header : bool
            If True, prefix the output with ``package <name>`` and a blank
            line.

        Returns
        -------
        str
            Go source text. An empty registry yields an empty import block,
            so the header is then just the package clause.
        """
        simple: list[str] = []
        aliased: list[str] = []
        discarded: list[str] = []
        for spec in self.list():
            if spec.is_discard:
                discarded.append(spec.go_code())
            elif spec.is_explicit:
                aliased.append(spec.go_code())
            else:
                simple.append(spec.go_code())

        sections = [
            "\n".join(f"\t{line}" for line in group)
            for group in (simple, aliased, discarded)
            if group
        ]
        block = ""
        if sections:
            body = "\n\n".join(sections)
            block = f"import (\n{body}\n)"

        if not include_header:
            return block
        clause = f"package {self._file_package.name}"
        return f"{clause}\n\n{block}" if block else clause

    def __str__(self) -> str:
        return self.format(include_header=False)

    def __repr__(self) -> str:
        return f"FileImports({self._file_package.import_path!r}, {len(self)} imports)"
