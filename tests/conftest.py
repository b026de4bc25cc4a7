"""
pytest configuration and shared fixtures for gocodegen tests.

Fixtures
--------
file_package : Package
    The package of the generated file, ``abc.xyz/mypkg``.

imports : FileImports
    An empty import registry for ``file_package``.

math_package / alt_math_package : Package
    Two distinct packages that are both declared as ``math``.
"""

import pytest

from gocodegen.imports import FileImports
from gocodegen.models import Package, assumed_package_name, explicit_package_name


@pytest.fixture
def file_package() -> Package:
    """Package of the file being generated."""
    return assumed_package_name("abc.xyz/mypkg")


@pytest.fixture
def imports(file_package: Package) -> FileImports:
    """
    Provide a fresh import registry.

    Returns
    -------
    FileImports
        Registry with no imports for ``abc.xyz/mypkg``.
    """
    return FileImports(file_package)


@pytest.fixture
def math_package() -> Package:
    """The standard library math package."""
    return assumed_package_name("math")


@pytest.fixture
def alt_math_package() -> Package:
    """A second package that also declares itself as ``math``."""
    return explicit_package_name("alternative/math", "math")


# =============================================================================
# pytest Configuration
# =============================================================================

def pytest_configure(config: pytest.Config) -> None:
    """
    Configure pytest with custom markers.

    This function is called by pytest during startup to register
    custom markers used in our test suite.
    """
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
