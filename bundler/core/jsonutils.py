# bundler/core/jsonutils.py
from __future__ import annotations
import base64
import json
import math
from collections.abc import Mapping
from datetime import date, datetime, time
from typing import Any

__all__ = ["safeJsonDumps", "tryJSONify"]

_SEPARATORS = (",", ":")



def safeJsonDumps(obj: object) -> str:
    """
    Compact JSON (no spaces after separators), non-ASCII kept as-is, NaN/infinity refused.
    Manifests loaded from YAML can hold values JSON has no type for (dates, sets,
    binary); those go through tryJSONify and the dump is retried.
    """
    try:
        return json.dumps(obj, ensure_ascii=False, allow_nan=False, separators=_SEPARATORS)
    except (TypeError, ValueError):
        return json.dumps(tryJSONify(obj), ensure_ascii=False, allow_nan=False, separators=_SEPARATORS)



def tryJSONify(obj: Any, *, _ancestors: frozenset[int] = frozenset(), _maxDepth: int | None = None) -> Any:
    """
    Returns a JSON-compatible copy of `obj`.

      date / datetime / time   → ISO 8601 string
      bytes-like               → {"__b64__": "<base64>"}
      set / frozenset / tuple  → list
      non-finite float         → "nan" / "inf" / "-inf"
      mapping keys             → str
      anything else unknown    → repr()

    A container that contains itself becomes "<circular_ref TYPE>"; with `_maxDepth`
    set, anything nested deeper becomes "<max_depth_exceeded TYPE>".
    """
    if obj is None or isinstance(obj, (bool, int, str)):
        return obj
    if isinstance(obj, float):
        return obj if math.isfinite(obj) else str(obj)
    if isinstance(obj, (datetime, date, time)):
        return obj.isoformat()
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return {"__b64__": base64.b64encode(bytes(obj)).decode("ascii")}

    if not isinstance(obj, (Mapping, list, tuple, set, frozenset)):
        return repr(obj)

    typeName = type(obj).__name__
    if id(obj) in _ancestors:
        return f"<circular_ref {typeName}>"
    if _maxDepth is not None and len(_ancestors) > _maxDepth:
        return f"<max_depth_exceeded {typeName}>"

    # Only the current branch counts, a subtree shared by two keys is fine
    inner = _ancestors | {id(obj)}
    if isinstance(obj, Mapping):
        return {str(key): tryJSONify(value, _ancestors=inner, _maxDepth=_maxDepth) for key, value in obj.items()}
    return [tryJSONify(value, _ancestors=inner, _maxDepth=_maxDepth) for value in obj]
