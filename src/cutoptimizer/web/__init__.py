"""FastAPI REST API for sheet cut optimization.

This module provides a REST API for optimizing piece layouts, computing
sheet statistics and storing projects.

Usage:
    uvicorn cutoptimizer.web:app --reload
"""

from cutoptimizer.web.app import app, create_app

__all__ = ["app", "create_app"]
