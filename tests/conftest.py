"""Shared test fixtures for javacheck."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from javacheck.tree.java_parser import clear_cache

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture(autouse=True)
def _fresh_grammar_cache() -> Iterator[None]:
    """Drop the cached Java grammar after every test."""
    yield
    clear_cache()
