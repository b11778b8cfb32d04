"""
Pytest configuration and shared fixtures for all esmify tests.

The driver and parser are stateless between files (every run builds a fresh
TransformContext), so one instance is shared across the whole session.
"""

import pytest
from pathlib import Path
from typing import Dict, Optional

from esmify.compiler.driver import TransformDriver, TransformResult
from esmify.frontend.parser import Parser
from tests.test_utils import js, write_project


# =============================================================================
# Session-scoped fixtures (shared across all tests)
# =============================================================================

@pytest.fixture(scope="session")
def session_driver():
    """
    Session-scoped driver shared across ALL tests.

    - Pass classes are instantiated per file, the context per run
    - tree-sitter Language and compiled shapes are module-level already
    """
    return TransformDriver()


@pytest.fixture(scope="session")
def session_parser():
    return Parser()


@pytest.fixture(scope="class")
def driver(session_driver):
    """Class-scoped driver - returns the session driver (stateless, safe to share)."""
    return session_driver


@pytest.fixture(scope="class")
def parser(session_parser):
    return session_parser


# =============================================================================
# Helper fixtures
# =============================================================================

@pytest.fixture
def run_transform(session_driver, tmp_path):
    """
    Factory fixture: write sibling files into a temporary project, then run the
    driver on `source` as if it lived at `<tmp>/<filename>`.

        result = run_transform("const a = require('./a');", files={"a.js": ""})
        result.output  # "import a from './a.js';\\n"
    """
    def _run(source: str, files: Optional[Dict[str, str]] = None,
             filename: str = "app.js") -> TransformResult:
        write_project(tmp_path, files or {})
        path = tmp_path / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        text = js(source)
        path.write_text(text, encoding="utf-8")
        return session_driver.run(text, str(path))

    return _run


@pytest.fixture
def transform(run_transform):
    """Like run_transform but returns only the output text (None when skipped)."""
    def _transform(source: str, files: Optional[Dict[str, str]] = None,
                   filename: str = "app.js") -> Optional[str]:
        return run_transform(source, files=files, filename=filename).output

    return _transform


@pytest.fixture
def project(tmp_path) -> Path:
    """Empty project root for batch and CLI tests."""
    root = tmp_path / "project"
    root.mkdir()
    return root


# =============================================================================
# Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers for test organization."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
