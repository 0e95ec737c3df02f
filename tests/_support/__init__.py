"""
Test support utilities for modelspine tests.

Models and executor doubles shared across test modules that are plain
helpers rather than pytest fixtures.
"""
