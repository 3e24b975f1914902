# bundler/resolve/__init__.py
from .minify import minifyScript
from .resolver import FILE_PREFIX, ReferenceResolver, extensionOf, isEncodeCheck

__all__ = [
    "FILE_PREFIX",
    "ReferenceResolver",
    "extensionOf",
    "isEncodeCheck",
    "minifyScript",
]
