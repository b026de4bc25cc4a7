"""
Tests for gocodegen.codetemplate
================================

Test Organization
-----------------
- TestRender: rendering, header generation and symbol formatting
- TestPruning: unused-import removal after rendering
- TestCustomization: funcs, formatters and configuration
- TestErrors: template and Go syntax errors
- TestConcurrency: one template rendered from many threads
"""

import io
from concurrent.futures import ThreadPoolExecutor

import jinja2
import pytest

from gocodegen.codetemplate import Template, format_value, parse
from gocodegen.config import TemplateConfig
from gocodegen.errors import GoSyntaxError
from gocodegen.imports import FileImports
from gocodegen.models import (
    GoCodeFormattable,
    Package,
    assumed_package_name,
    explicit_package_name,
    sym,
)


EXAMPLE_TEMPLATE = """\
// docs
{{ header() }}

// Doesn't do anything special, really.
var myThing = {{ mysym }}
var myThing2 = {{ mysym2 }}

const myNum {{ numType }} = 42
"""

EXAMPLE_OUTPUT = """\
// docs
package mypkg

import (
\t"math"

\tmath1 "alternative/math"
)

// Doesn't do anything special, really.
var myThing = math.Max
var myThing2 = math1.Max

const myNum int64 = 42
"""

PRUNING_TEMPLATE = """\
// Package mypkg does neat things.
{{ header() }}

import (
\t// Log isn't used in the output, so the import declaration is deleted.
\t"log"
)

var result1 = {{ maxFn1 }}(1, 2)
var result2 = {{ maxFn2 }}(1, 2)

func main() {
\tfmt.Println(result1, result2)
\tfmt.Println({{ peoplesChoice }})
\t{% if neverTrueCondition %}
\t\tlog.Println("this doesn't appear in the output, and the import is pruned")
\t{% endif %}
}
"""

PRUNING_OUTPUT = """\
// Package mypkg does neat things.
package mypkg

import (
\t"math"

\tmath1 "alternative/math"
)

// Log isn't used in the output, so the import declaration is deleted.

var result1 = math.Max(1, 2)
var result2 = math1.Max(1, 2)

func main() {
\tfmt.Println(result1, result2)
\tfmt.Println(result2)
}
"""

CONDITIONAL_TEMPLATE = """\
{{ header() }}

func f() {
{% if use_os %}
\t{{ exit }}(1)
{% endif %}
}
"""


class Constant(GoCodeFormattable):
    """An exported constant printed through the registry."""

    def __init__(self, package: Package, name: str) -> None:
        self.package = package
        self.name = name

    def go_code(self, imports: FileImports) -> str:
        return f"{imports.add(self.package).alias}.{self.name}"


# =============================================================================
# Render Tests
# =============================================================================

class TestRender:
    """Tests for Template.render and Template.execute."""

    def test_example(self, imports: FileImports) -> None:
        """Symbols are qualified and the header lists their imports."""
        tmpl = parse(EXAMPLE_TEMPLATE)
        code = tmpl.render(imports, {
            "mysym": assumed_package_name("math").symbol("Max"),
            "mysym2": assumed_package_name("alternative/math").symbol("Max"),
            "numType": sym("", "int64"),
        })
        assert code == EXAMPLE_OUTPUT

    def test_execute_writes_stream(self, imports: FileImports) -> None:
        tmpl = parse(EXAMPLE_TEMPLATE)
        out = io.StringIO()
        tmpl.execute(imports, out, {
            "mysym": sym("math", "Max"),
            "mysym2": sym("alternative/math", "Max"),
            "numType": sym("", "int64"),
        })
        assert out.getvalue() == EXAMPLE_OUTPUT

    def test_header_follows_body(self, file_package: Package) -> None:
        """The import block reflects only what the body actually printed."""
        tmpl = parse(CONDITIONAL_TEMPLATE)
        exit_fn = sym("os", "Exit")

        used = tmpl.render(FileImports(file_package), use_os=True, exit=exit_fn)
        assert used == (
            'package mypkg\n\nimport (\n\t"os"\n)\n\nfunc f() {\n\tos.Exit(1)\n}\n'
        )

        unused = tmpl.render(FileImports(file_package), use_os=False, exit=exit_fn)
        assert unused == "package mypkg\n\nfunc f() {\n}\n"

    def test_same_package_symbol(self, imports: FileImports, file_package: Package) -> None:
        tmpl = parse("{{ header() }}\n\nvar y = {{ x }}\n")
        code = tmpl.render(imports, x=file_package.symbol("result2"))
        assert code == "package mypkg\n\nvar y = result2\n"

    def test_fresh_registry(self) -> None:
        """Without a conflict, a package is imported under its own name."""
        imports = FileImports(assumed_package_name("abc/mypkg"))
        tmpl = parse("{{ header() }}\n\nvar x = {{ Fn }}(1,2)\n")
        code = tmpl.render(imports, Fn=explicit_package_name("alt/math", "math").symbol("Max"))
        assert code == 'package mypkg\n\nimport (\n\t"alt/math"\n)\n\nvar x = math.Max(1,2)\n'

    def test_conflicting_registry(self) -> None:
        """A seeded conflict forces an alias; the unused seed is pruned."""
        imports = FileImports(
            assumed_package_name("abc/mypkg"),
            imports=[assumed_package_name("math")],
        )
        tmpl = parse("{{ header() }}\n\nvar x = {{ Fn }}(1,2)\n")
        code = tmpl.render(imports, Fn=explicit_package_name("alt/math", "math").symbol("Max"))
        assert code == (
            'package mypkg\n\nimport (\n\tmath1 "alt/math"\n)\n\nvar x = math1.Max(1,2)\n'
        )

    def test_imports_function(self, imports: FileImports) -> None:
        """imports() prints the block without the package clause."""
        tmpl = parse("package mypkg\n\n{{ imports() }}\n\nvar x = {{ fn }}\n")
        assert tmpl.render(imports, fn=sym("math", "Max")) == (
            'package mypkg\n\nimport (\n\t"math"\n)\n\nvar x = math.Max\n'
        )

    def test_bare_header(self, imports: FileImports) -> None:
        """``{{ header }}`` without parentheses works too."""
        tmpl = parse("{{ header }}\n\nvar x = {{ fn }}\n")
        assert tmpl.render(imports, fn=sym("math", "Max")) == (
            'package mypkg\n\nimport (\n\t"math"\n)\n\nvar x = math.Max\n'
        )

    def test_custom_formattable(self, imports: FileImports) -> None:
        """Any GoCodeFormattable value is printed against the registry."""
        tmpl = parse("{{ header() }}\n\nvar x = {{ c }}\n")
        code = tmpl.render(imports, c=Constant(assumed_package_name("math"), "Pi"))
        assert code == 'package mypkg\n\nimport (\n\t"math"\n)\n\nvar x = math.Pi\n'

    def test_symbols_printed_in_loop(self, imports: FileImports) -> None:
        """Each symbol printed by a loop registers its import."""
        tmpl = parse(
            "{{ header() }}\n\nvar fs = []func(float64, float64) float64{"
            "{% for fn in fns %}{{ fn }}{% if not loop.last %}, {% endif %}{% endfor %}}\n"
        )
        code = tmpl.render(imports, fns=[sym("math", "Max"), sym("alt/math", "Min")])
        assert code == (
            'package mypkg\n\nimport (\n\t"math"\n\n\tmath1 "alt/math"\n)\n\n'
            "var fs = []func(float64, float64) float64{math.Max, math1.Min}\n"
        )

    def test_plain_values(self, imports: FileImports) -> None:
        tmpl = parse("{{ header() }}\n\nconst n = {{ n }}\n")
        assert tmpl.render(imports, n=42) == "package mypkg\n\nconst n = 42\n"

    def test_shared_registry(self, imports: FileImports) -> None:
        """Renders into one registry accumulate imports."""
        parse("var a = {{ f }}\n", keep_unused_imports=True).render(imports, f=sym("math", "Max"))
        tmpl = parse("{{ header() }}\n\nvar b = {{ f }}\n", keep_unused_imports=True)
        code = tmpl.render(imports, f=explicit_package_name("alt/math", "math").symbol("Max"))
        assert code == (
            'package mypkg\n\nimport (\n\t"math"\n\n\tmath1 "alt/math"\n)\n\n'
            "var b = math1.Max\n"
        )

    def test_data_and_kwargs_merge(self, imports: FileImports) -> None:
        tmpl = parse("{{ a }}{{ b }}", keep_unused_imports=True)
        assert tmpl.render(imports, {"a": 1, "b": 2}, b=3) == "13"

    def test_placeholders_are_unique_per_text(self) -> None:
        first = parse("a")
        second = parse("b")
        assert first.header_placeholder != second.header_placeholder
        assert first.imports_placeholder != first.header_placeholder
        assert parse("a").header_placeholder == first.header_placeholder

    def test_format_value(self, imports: FileImports) -> None:
        assert format_value(imports, sym("math", "Max")) == "math.Max"
        assert format_value(imports, 1.5) == "1.5"


# =============================================================================
# Pruning Tests
# =============================================================================

class TestPruning:
    """Tests for the pruning phase."""

    def test_unused_import_removed(self, imports: FileImports, file_package: Package) -> None:
        """Imports written into the template vanish when not referenced."""
        tmpl = parse(PRUNING_TEMPLATE)
        code = tmpl.render(imports, {
            "maxFn1": sym("math", "Max"),
            "maxFn2": sym("alternative/math", "Max"),
            "peoplesChoice": file_package.symbol("result2"),
            "neverTrueCondition": False,
        })
        assert code == PRUNING_OUTPUT

    def test_keep_unused_imports(self, imports: FileImports) -> None:
        """With pruning off the rendered text is returned as is."""
        text = '{{ header() }}\n\nimport "log"\n'
        code = parse(text, keep_unused_imports=True).render(imports)
        assert code == 'package mypkg\n\nimport "log"\n'

    def test_config_disables_pruning(self, imports: FileImports) -> None:
        config = TemplateConfig(prune_unused_imports=False)
        code = parse('{{ header() }}\n\nimport "log"\n', config=config).render(imports)
        assert code == 'package mypkg\n\nimport "log"\n'

    def test_keyword_overrides_config(self, imports: FileImports) -> None:
        config = TemplateConfig(prune_unused_imports=False)
        tmpl = parse('{{ header() }}\n\nimport "log"\n', config=config, keep_unused_imports=False)
        assert tmpl.render(imports) == "package mypkg\n"


# =============================================================================
# Customization Tests
# =============================================================================

class TestCustomization:
    """Tests for template functions and formatter hooks."""

    def test_funcs(self, imports: FileImports) -> None:
        tmpl = parse(
            "{{ header() }}\n\nvar s = {{ quote('hi') }}\n",
            funcs={"quote": lambda s: f'"{s}"'},
        )
        assert tmpl.render(imports) == 'package mypkg\n\nvar s = "hi"\n'

    def test_custom_formatter_receives_name(self, imports: FileImports) -> None:
        calls = []

        def formatter(name: str, code: str) -> str:
            calls.append((name, code))
            return code.upper()

        tmpl = parse("{{ header() }}\n", name="out.go", formatter=formatter)
        assert tmpl.render(imports) == "PACKAGE MYPKG\n"
        assert calls == [("out.go", "package mypkg\n")]

    def test_formatter_ignored_when_keeping_imports(self, imports: FileImports) -> None:
        tmpl = parse("x", formatter=lambda name, code: "replaced", keep_unused_imports=True)
        assert tmpl.render(imports) == "x"

    def test_value_formatter(self, imports: FileImports) -> None:
        """A custom value formatter replaces go_code but not the header."""
        tmpl = parse(
            "{{ header() }}\n\nvar x = {{ v }}\n",
            keep_unused_imports=True,
            value_formatter=lambda imports, value: repr(value),
        )
        assert tmpl.render(imports, v="a") == "package mypkg\n\nvar x = 'a'\n"

    def test_name(self) -> None:
        assert parse("x").name == "generated.go"
        assert parse("x", name="a.go").name == "a.go"
        assert parse("x", config=TemplateConfig(name="b.go")).name == "b.go"

    def test_template_type(self) -> None:
        tmpl = parse("x", name="a.go")
        assert isinstance(tmpl, Template)
        assert repr(tmpl) == "<Template 'a.go'>"


# =============================================================================
# Error Tests
# =============================================================================

class TestErrors:
    """Tests for error propagation."""

    def test_template_syntax_error(self) -> None:
        with pytest.raises(jinja2.TemplateSyntaxError) as exc_info:
            parse("{% if %}", name="bad.tmpl")
        assert exc_info.value.name == "bad.tmpl"

    def test_missing_variable(self, imports: FileImports) -> None:
        tmpl = parse("{{ missing }}")
        with pytest.raises(jinja2.UndefinedError):
            tmpl.render(imports)

    def test_execute_writes_nothing_on_error(self, imports: FileImports) -> None:
        tmpl = parse("partial output {{ missing }}")
        out = io.StringIO()
        with pytest.raises(jinja2.UndefinedError):
            tmpl.execute(imports, out)
        assert out.getvalue() == ""

    def test_invalid_go(self, imports: FileImports) -> None:
        """Rendered code that does not parse is reported against the template name."""
        tmpl = parse("{{ header() }}\n\nfunc (\n", name="broken.go")
        with pytest.raises(GoSyntaxError) as exc_info:
            tmpl.render(imports)
        assert exc_info.value.filename == "broken.go"

    def test_invalid_go_kept_without_pruning(self, imports: FileImports) -> None:
        tmpl = parse("{{ header() }}\n\nfunc (\n", keep_unused_imports=True)
        assert tmpl.render(imports) == "package mypkg\n\nfunc (\n"


# =============================================================================
# Concurrency Tests
# =============================================================================

class TestConcurrency:
    """Tests for rendering one template from several threads."""

    @pytest.mark.slow
    def test_concurrent_renders(self, file_package: Package) -> None:
        tmpl = parse("{{ header() }}\n\nvar x = {{ fn }}\n")

        def render(i: int) -> str:
            fn = explicit_package_name(f"example.com/p{i}", f"p{i}").symbol("X")
            return tmpl.render(FileImports(file_package), fn=fn)

        with ThreadPoolExecutor(max_workers=8) as pool:
            outputs = list(pool.map(render, range(32)))

        for i, code in enumerate(outputs):
            assert code == (
                f'package mypkg\n\nimport (\n\t"example.com/p{i}"\n)\n\nvar x = p{i}.X\n'
            )
