# bundler/resolve/resolver.py
from __future__ import annotations
import base64
import copy
import functools
import logging
import re
from pathlib import Path
from typing import Any, Callable
from collections.abc import Mapping, MutableMapping

from bundler.core.errors import MinifyError, PathTraversalRejected, ReferenceCycleError, ReferenceDecodeError
from bundler.core.logging import dropLogContext, getLogContext, setLogContext
from bundler.core.paths import readReferencedFile
from bundler.resolve.minify import minifyScript

logger = logging.getLogger(__name__)

__all__ = [
    "FILE_PREFIX",
    "REFERENCE_PATTERN_RE",
    "SCRIPT_EXTENSIONS",
    "STYLESHEET_EXTENSIONS",
    "LITERAL_IN_SCRIPT_EXTENSIONS",
    "SVG_DATA_URI_PREFIX",
    "ReferenceResolver",
    "extensionOf",
    "isEncodeCheck",
]

FILE_PREFIX = "file://"

# A name runs until whitespace, a quote or a delimiter of the JSON/JS/CSS around it.
# Separators are captured too, so "file://../x.js" reaches _checkFileName and is rejected.
# The name is greedy, so "file://app.min.js" ends at ".js".
REFERENCE_PATTERN_RE = re.compile(r"file://(?P<name>[^\s\"'`()<>,;:]*\.[A-Za-z0-9]+)")

SCRIPT_EXTENSIONS = frozenset({"js"})
STYLESHEET_EXTENSIONS = frozenset({"css"})
# Text that can sit as-is inside script source (e.g. as a template string)
LITERAL_IN_SCRIPT_EXTENSIONS = frozenset({"js", "json", "html", "txt", "md"})

SVG_DATA_URI_PREFIX = "data:image/svg+xml;base64,"

# svg references in this key become data URIs instead of plain base64
_ICON_KEY = "icon"

ReadFileFn = Callable[[Path, str], bytes]
MinifyFn = Callable[[str], str]



def extensionOf(fileName: str) -> str:
    return fileName.rsplit(".", 1)[-1].lower() if "." in fileName else ""



def isEncodeCheck(extension: str, parentExtension: str | None) -> bool:
    """
    Decides whether a referenced file is base64 encoded when it's inlined.

    - Directly in the manifest (no parent): always encode
    - Same type as the parent (js in js, css in css): never encode
    - Inside a script: literal for script-friendly text types, encoded otherwise
    - Anything else: encode
    """
    if not parentExtension:
        return True
    if parentExtension == extension:
        return False
    if parentExtension in SCRIPT_EXTENSIONS:
        return extension not in LITERAL_IN_SCRIPT_EXTENSIONS
    return True



def _checkFileName(fileName: str) -> None:
    if "/" in fileName or "\\" in fileName:
        raise PathTraversalRejected(fileName)



def _decode(fileName: str, raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as err:
        raise ReferenceDecodeError(fileName, err) from err



class ReferenceResolver:
    """
    Replaces every `file://name.ext` token in a text with the referenced file's content.

    Scripts and stylesheets are scanned for their own references before they are
    inlined (to any depth), scripts are minified unless `noMinify` is set, and
    whether the result is base64 encoded depends on the file type of the text
    the token was found in (see isEncodeCheck).

    Any missing file, escaping path or reference cycle aborts the whole run.
    A minifier failure never does: the unminified text is used instead.
    """
    def __init__(
            self,
            inputRoot: str | Path,
            *,
            noMinify: bool = False,
            minifier: MinifyFn | None = minifyScript,
            readFile: ReadFileFn | None = None,
            allowSymlinks: bool = False,
    ):
        self.inputRoot = Path(inputRoot)
        self.noMinify = noMinify
        self._minifier = minifier
        self._readFile: ReadFileFn = readFile or functools.partial(readReferencedFile, allowSymlinks=allowSymlinks)

    # ----- Public API -----

    def resolveAll(self, text: str, parentExtension: str | None = None) -> str:
        """Resolves every reference in `text`. `parentExtension` is None for the manifest itself."""
        return self._resolveText(text, parentExtension, ())

    def resolveOne(self, fileName: str, parentExtension: str | None = None) -> str:
        """Returns the content that replaces a single `file://<fileName>` token."""
        return self._resolveOne(fileName, parentExtension, ())

    def findReferences(self, text: str) -> list[str]:
        """File names referenced directly in `text` (not recursive), in order of appearance."""
        return [match.group("name") for match in REFERENCE_PATTERN_RE.finditer(text)]

    def resolveIconFields(self, document: Mapping[str, Any]) -> dict[str, Any]:
        """
        Returns a copy of `document` where `icon` values that reference an svg file
        (root, menus and menu entries) become `data:image/svg+xml;base64,...` URIs.
        Other icon references are left for resolveAll.
        """
        out = copy.deepcopy(dict(document))
        self._inlineIcon(out)
        for menu in _mappingItems(out.get("menus")):
            self._inlineIcon(menu)
            for entry in _mappingItems(menu.get("entries")):
                self._inlineIcon(entry)
        return out

    # ----- Internals -----

    def _resolveText(self, text: str, parentExtension: str | None, chain: tuple[str, ...]) -> str:
        # Replacements are computed per match and never rescanned in this pass
        return REFERENCE_PATTERN_RE.sub(
            lambda match: self._resolveOne(match.group("name"), parentExtension, chain),
            text,
        )

    def _resolveOne(self, fileName: str, parentExtension: str | None, chain: tuple[str, ...]) -> str:
        _checkFileName(fileName)
        if fileName in chain:
            raise ReferenceCycleError(fileName, chain)

        previous = (getLogContext() or {}).get("reference")
        setLogContext(reference=fileName)
        try:
            extension = extensionOf(fileName)
            raw = self._readFile(self.inputRoot, fileName)
            content: str | bytes = raw

            # References inside scripts/stylesheets are resolved before minify/encode
            if extension in SCRIPT_EXTENSIONS or extension in STYLESHEET_EXTENSIONS:
                text = self._resolveText(_decode(fileName, raw), extension, chain + (fileName,))
                if not self.noMinify and extension in SCRIPT_EXTENSIONS:
                    text = self._minify(fileName, text)
                content = text

            shouldEncode = isEncodeCheck(extension, parentExtension)
            logger.debug(
                "Inlining '%s' into %s (%s)",
                fileName,
                f"'{parentExtension}' file" if parentExtension else "manifest",
                "base64" if shouldEncode else "literal",
            )
            if shouldEncode:
                data = content.encode("utf-8") if isinstance(content, str) else content
                return base64.b64encode(data).decode("ascii")
            return content if isinstance(content, str) else _decode(fileName, content)
        finally:
            if previous is not None:
                setLogContext(reference=previous)
            else:
                dropLogContext("reference")

    def _minify(self, fileName: str, text: str) -> str:
        if self._minifier is None:
            return text
        try:
            return self._minifier(text)
        except MinifyError as err:
            logger.warning("Could not minify '%s', bundling it unminified: %s", fileName, err)
            return text

    def _inlineIcon(self, obj: MutableMapping[str, Any]) -> None:
        value = obj.get(_ICON_KEY)
        if not isinstance(value, str):
            return
        match = REFERENCE_PATTERN_RE.fullmatch(value)
        if match is None:
            return
        fileName = match.group("name")
        _checkFileName(fileName)
        if extensionOf(fileName) != "svg":
            return
        raw = self._readFile(self.inputRoot, fileName)
        obj[_ICON_KEY] = SVG_DATA_URI_PREFIX + base64.b64encode(raw).decode("ascii")
        logger.debug("Inlined icon '%s' as data URI", fileName)



def _mappingItems(value: Any) -> list[MutableMapping[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, MutableMapping)]
