"""
gocodegen.codetemplate - Jinja2 Templates for Go Code
=====================================================

Templates are ordinary Jinja2 templates with two twists:

1. Any value implementing :class:`~gocodegen.models.GoCodeFormattable`
   (such as a :class:`~gocodegen.models.Symbol`) is printed with
   ``go_code(imports)`` against the file's
   :class:`~gocodegen.imports.FileImports`, so ``{{ max_fn }}`` renders as
   ``math.Max`` *and* imports ``"math"``.

2. ``{{ header() }}`` and ``{{ imports() }}`` print the package clause plus
   import block, or the import block alone. ``{{ header }}`` and
   ``{{ imports }}`` work too.

Only the value that finally reaches ``{{ ... }}`` goes through the
registry. A filter that turns symbols into a string first, such as
``{{ fns|join(", ") }}``, sees ``str(symbol)`` (``alt/math.Max``) and
registers nothing. Print each symbol on its own instead::

    {% for fn in fns %}{{ fn }}{% if not loop.last %}, {% endif %}{% endfor %}

Rendering Pipeline
------------------
The import block depends on every symbol the body prints, so it can only
be written once the body is done. Each render therefore runs in phases:

    1. Render the body. header()/imports() emit unique placeholder tokens
       while symbols populate the FileImports registry.
    2. Replace the placeholder tokens with the final import block.
    3. Optionally prune imports the output does not use (see
       :mod:`gocodegen.unusedimports`), so a template can spell out an
       import for code that sits in an ``{% if %}`` branch and have it
       vanish when the branch is not rendered.

Placeholder tokens embed the SHA-256 of the template text, so they cannot
appear literally in it.

Usage Example
-------------
>>> from gocodegen import FileImports, assumed_package_name, sym
>>> tmpl = parse('''{{ header() }}
...
... var x = {{ fn }}(1, 2)
... ''')
>>> print(tmpl.render(
...     FileImports(assumed_package_name("abc/mypkg")),
...     {"fn": sym("math", "Max")},
... ), end="")
package mypkg
<BLANKLINE>
import (
	"math"
)
<BLANKLINE>
var x = math.Max(1, 2)
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Callable, Mapping
from functools import partial
from typing import TYPE_CHECKING, Any

from jinja2 import Environment, StrictUndefined

from gocodegen.config import TemplateConfig
from gocodegen.models import GoCodeFormattable
from gocodegen.unusedimports import prune_unparsed


if TYPE_CHECKING:
    from typing import TextIO

    from jinja2 import Template as JinjaTemplate

    from gocodegen.imports import FileImports


logger = logging.getLogger(__name__)

# (filename, code) -> code, applied to the rendered output
Formatter = Callable[[str, str], str]

# (imports, value) -> text, applied to every {{ expression }}
ValueFormatter = Callable[["FileImports", Any], str]


# =============================================================================
# Value Formatting
# =============================================================================

def format_value(imports: FileImports, value: Any) -> str:
    """
    Print a template value for the file described by ``imports``.

    Values implementing :class:`GoCodeFormattable` are printed through
    ``go_code``; everything else goes through ``str``.
    """
    if isinstance(value, GoCodeFormattable):
        return value.go_code(imports)
    return str(value)


class _Placeholder:
    """Template function that prints a fixed token, called or bare."""

    def __init__(self, token: str) -> None:
        self.token = token

    def __call__(self) -> _Placeholder:
        return self

    def __str__(self) -> str:
        return self.token


def create_jinja_env(config: TemplateConfig) -> Environment:
    """
    Create the Jinja2 environment templates are compiled with.

    Autoescaping is off (this is Go, not HTML) and undefined variables
    raise instead of printing as empty strings. ``finalize`` is set so the
    compiled code routes every printed value through the environment's
    hook; each render binds the real hook in an overlay.
    """
    return Environment(
        autoescape=False,
        undefined=StrictUndefined,
        trim_blocks=config.trim_blocks,
        lstrip_blocks=config.lstrip_blocks,
        keep_trailing_newline=config.keep_trailing_newline,
        finalize=str,
    )


# =============================================================================
# Template
# =============================================================================

class Template:
    """
    A parsed Go code template. Build one with :func:`parse`.

    A Template holds no per-render state and can be rendered any number
    of times, from several threads, against different registries.
    """

    def __init__(
        self,
        text: str,
        config: TemplateConfig,
        funcs: Mapping[str, Callable[..., Any]] | None = None,
        formatter: Formatter | None = None,
        value_formatter: ValueFormatter | None = None,
    ) -> None:
        digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
        self.imports_placeholder = f"<PLACEHOLDER FOR IMPORTS {digest}>"
        self.header_placeholder = f"<PLACEHOLDER FOR PACKAGE STATEMENT AND IMPORTS {digest}>"

        self.config = config
        self._formatter = formatter
        self._value_formatter = value_formatter or format_value

        self._globals: dict[str, Any] = dict(funcs or {})
        self._globals["imports"] = _Placeholder(self.imports_placeholder)
        self._globals["header"] = _Placeholder(self.header_placeholder)

        self._env = create_jinja_env(config)
        # Raises TemplateSyntaxError; the compiled code is shared by all renders.
        self._code = self._env.compile(text, name=config.name)

    @property
    def name(self) -> str:
        return self.config.name

    def _finalize(self, imports: FileImports, value: Any) -> str:
        # Placeholder tokens must reach the output unchanged.
        if isinstance(value, _Placeholder):
            return value.token
        return self._value_formatter(imports, value)

    def _bind(self, imports: FileImports) -> JinjaTemplate:
        env = self._env.overlay(finalize=partial(self._finalize, imports))
        return env.template_class.from_code(env, self._code, env.make_globals(self._globals))

    def render(
        self,
        imports: FileImports,
        data: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> str:
        """
        Render the template into Go source.

        Parameters
        ----------
        imports : FileImports
            Import registry of the output file. Symbols printed by the
            template are added to it.

        data : Mapping[str, Any] | None
            Template variables. Keyword arguments are merged on top.

        Returns
        -------
        str
            The complete file contents.

        Raises
        ------
        jinja2.UndefinedError
            If the template refers to a variable that was not supplied.
        GoSyntaxError
            If unused-import pruning is on and the output is not valid Go.
        """
        context = dict(data or {}, **kwargs)
        body = self._bind(imports).render(context)

        if self.imports_placeholder in body:
            body = body.replace(self.imports_placeholder, imports.format(include_header=False))
        if self.header_placeholder in body:
            body = body.replace(self.header_placeholder, imports.format(include_header=True))

        logger.debug("rendered %s with %d imports", self.name, len(imports))
        if self._formatter is None:
            return body
        return self._formatter(self.name, body)

    def execute(
        self,
        imports: FileImports,
        stream: TextIO,
        data: Mapping[str, Any] | None = None,
    ) -> None:
        """Render the template and write the result to ``stream``; nothing is written on error."""
        stream.write(self.render(imports, data))

    def __repr__(self) -> str:
        return f"<Template {self.name!r}>"


def parse(
    text: str,
    *,
    name: str | None = None,
    funcs: Mapping[str, Callable[..., Any]] | None = None,
    keep_unused_imports: bool | None = None,
    formatter: Formatter | None = None,
    value_formatter: ValueFormatter | None = None,
    config: TemplateConfig | None = None,
) -> Template:
    """
    Parse a Go code template.

    Parameters
    ----------
    text : str
        Jinja2 template source.

    name : str | None
        Template name for error messages. Overrides ``config.name``.

    funcs : Mapping[str, Callable] | None
        Extra functions available to the template. ``header`` and
        ``imports`` are reserved.

    keep_unused_imports : bool | None
        If True, skip the pruning phase. Overrides
        ``config.prune_unused_imports``.

    formatter : Formatter | None
        Replacement for the pruning phase, called as
        ``formatter(name, code)``. Ignored when unused imports are kept.

    value_formatter : ValueFormatter | None
        Replacement for :func:`format_value`.

    config : TemplateConfig | None
        Base configuration; defaults to ``TemplateConfig()``.

    Returns
    -------
    Template
        The parsed template.

    Raises
    ------
    jinja2.TemplateSyntaxError
        If ``text`` is not a valid template.

    Examples
    --------
    >>> parse("{{ header() }}", name="a.go").name
    'a.go'
    """
    config = config or TemplateConfig()
    overrides: dict[str, Any] = {}
    if name is not None:
        overrides["name"] = name
    if keep_unused_imports is not None:
        overrides["prune_unused_imports"] = not keep_unused_imports
    if overrides:
        config = config.model_validate({**config.model_dump(), **overrides})

    if not config.prune_unused_imports:
        formatter = None
    elif formatter is None:
        formatter = prune_unparsed

    return Template(
        text,
        config,
        funcs=funcs,
        formatter=formatter,
        value_formatter=value_formatter,
    )
