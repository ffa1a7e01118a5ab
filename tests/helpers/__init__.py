"""Test helper utilities for jobwatch tests."""

from .factories import StaticAdapter, make_job, make_response

__all__ = ["StaticAdapter", "make_job", "make_response"]
