"""Shared fixtures for the gomsort test suite."""

import pytest

from gomsort.parsing import GoParser
from gomsort.sorter import MethodSorter


@pytest.fixture(scope="session")
def go_parser() -> GoParser:
    """One tree-sitter Go parser for the whole session."""
    return GoParser()


@pytest.fixture
def sorter(go_parser: GoParser) -> MethodSorter:
    """A sorter with the default configuration."""
    return MethodSorter(parser=go_parser)
