"""Pytest configuration and shared fixtures for the docodec test suite.

This module provides shared fixtures, test configuration, and utilities
that are used across the entire test suite.
"""

from pathlib import Path
from typing import Generator

import pytest
from utils import FakeFetcher, cleanup_test_dir, create_test_temp_dir


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "slow: Slow tests that may take several seconds")
    config.addinivalue_line("markers", "cli: Tests related to command-line interface")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for test files.

    Yields
    ------
    Path
        Temporary directory path that will be cleaned up after test.

    """
    temp_path = create_test_temp_dir()
    try:
        yield temp_path
    finally:
        cleanup_test_dir(temp_path)


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    """Provide an empty fake fetcher; tests add responses to ``responses``."""
    return FakeFetcher()


@pytest.fixture(autouse=True)
def _no_network(monkeypatch):
    """Make sure no test reaches the real network."""
    monkeypatch.setenv("DOCODEC_DISABLE_NETWORK", "1")


@pytest.fixture
def sample_markdown() -> str:
    """Provide sample Markdown content for testing.

    Returns
    -------
    str
        Standard sample document used across multiple tests.

    """
    return """---
title: Sample Document
authors:
  - Jane Smith
---

# Introduction

This is a **sample document** with _italic text_ and some `inline code`.

- Item 1
- Item 2

1. First item
2. Second item

```python
def hello_world():
    print("Hello, World!")
```

| Header 1 | Header 2 |
|----------|----------|
| Row 1    | Data 1   |
"""
