"""
Shared fixtures for contractfix tests.
"""

import os
import textwrap

import libcst as cst
import pytest

from contractfix.config import ContractFixConfig
from contractfix.symbols import ProjectIndex


@pytest.fixture
def config():
    """Default configuration."""
    return ContractFixConfig.default()


@pytest.fixture
def make_index(config):
    """Build a ProjectIndex from ``{path: source}``; sources are dedented."""

    def _make(sources, cfg=None):
        return ProjectIndex.from_sources(
            {path: textwrap.dedent(source) for path, source in sources.items()},
            cfg or config,
        )

    return _make


@pytest.fixture
def parse_function():
    """Parse a single function definition."""

    def _parse(source):
        module = cst.parse_module(textwrap.dedent(source))
        return module.body[0]

    return _parse


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep CONTRACTFIX_* variables from the environment out of the tests."""
    for name in list(os.environ):
        if name.startswith("CONTRACTFIX_"):
            monkeypatch.delenv(name, raising=False)
