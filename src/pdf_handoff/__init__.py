"""
PDF Handoff Service package.

This module provides a FastAPI application that renders HTML documents to
PDF and hands each result out through a single-use download link.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
