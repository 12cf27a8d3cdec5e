"""
Test support utilities for tablemap tests.

Helpers that are not pytest fixtures but are shared across test modules.
"""
