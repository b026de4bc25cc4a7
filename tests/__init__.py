"""
gocodegen test suite
====================

Test Modules
------------
- test_models.py: Package, Symbol and ImportSpec value types
- test_imports.py: FileImports alias selection and formatting
- test_goast.py: tree-sitter parsing, import deletion and printing
- test_unusedimports.py: unused import pruning
- test_codetemplate.py: two-phase template rendering
- test_config.py: TemplateConfig validation and TOML loading
- test_debugutil.py: output comparison helpers

Running Tests
-------------
    # Run all tests
    pytest

    # Run specific module
    pytest tests/test_imports.py

    # Run specific test class
    pytest tests/test_imports.py::TestAliasSelection
"""
