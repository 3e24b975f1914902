# bundler/__init__.py
"""Validates SpiraApp manifests and packages them, with every referenced file inlined, into a .spiraapp bundle."""

__version__ = "1.0.0"
