# bundler/resolve/minify.py
from __future__ import annotations

import rjsmin

from bundler.core.errors import MinifyError

__all__ = ["minifyScript"]



def minifyScript(text: str) -> str:
    """
    Minifies JavaScript source by dropping comments and any whitespace the
    script doesn't need. Works on the token level, so modern syntax (const/let,
    arrow functions, classes) goes through unchanged.

    Raises MinifyError when the minifier fails.
    """
    try:
        return rjsmin.jsmin(text)
    except Exception as err:
        raise MinifyError(f"Could not minify script: {err}") from err
