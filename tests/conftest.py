"""Pytest configuration and shared fixtures for cut optimizer tests."""

from __future__ import annotations

from typing import Any

import pytest

from cutoptimizer.domain import Piece


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: tests that exercise the CLI or REST API end to end"
    )
    config.addinivalue_line("markers", "slow: tests that take a long time to run")


# =============================================================================
# Shared fixtures
# =============================================================================


@pytest.fixture
def raw_pieces() -> list[dict[str, Any]]:
    """Raw piece records as a form or job file would send them."""
    return [
        {"id": "side", "width": 720, "height": 560, "quantity": 2, "color": "#ff0000"},
        {"id": "shelf", "width": "600", "height": "300", "quantity": "3"},
        {"id": "back", "width": 1200, "height": 800, "color": "#abc"},
    ]


@pytest.fixture
def unit_piece() -> Piece:
    """A single 500x300 piece with quantity 1."""
    return Piece(id="p_0", width=500, height=300)
