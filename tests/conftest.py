"""
Global test configuration and fixtures
"""

import time
from collections.abc import Callable
from pathlib import Path
from textwrap import dedent

import pytest

from codegraph_naming.config import NamingSettings, RunMode

SLOW_TEST_THRESHOLD = 5.0


@pytest.fixture(autouse=True)
def track_test_duration(request):
    """Warn about slow tests"""
    start_time = time.time()

    yield

    duration = time.time() - start_time
    if duration > SLOW_TEST_THRESHOLD:
        print(f"\nSLOW TEST ({duration:.2f}s): {request.node.nodeid}")


@pytest.fixture
def php_project(tmp_path) -> Callable[[dict[str, str]], Path]:
    """
    Write a PHP tree under a temporary root.

    Usage:
        root = php_project({"src/Domain/Entity.php": "<?php ..."})
    """

    def write(files: dict[str, str]) -> Path:
        root = tmp_path / "project"
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(dedent(content).lstrip("\n"), encoding="utf-8")
        return root.resolve()

    return write


@pytest.fixture
def apply_settings() -> NamingSettings:
    """Apply mode, argument passes off (tests opt in explicitly)"""
    return NamingSettings(
        mode=RunMode.APPLY,
        arguments={"enforce_named": False, "format_multiline": False},
    )


@pytest.fixture
def dry_run_settings() -> NamingSettings:
    return NamingSettings(
        mode=RunMode.DRY_RUN,
        arguments={"enforce_named": False, "format_multiline": False},
    )


# Pytest hooks
def pytest_configure(config):
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (parse real PHP sources)")


def pytest_collection_modifyitems(config, items):
    for item in items:
        path = str(item.fspath)
        if "unit" in path:
            item.add_marker(pytest.mark.unit)
        elif "integration" in path:
            item.add_marker(pytest.mark.integration)
