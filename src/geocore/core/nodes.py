import json
from typing import Any, List, Optional, Union

Key = Union[str, int]


def parse_json(data: Optional[bytes]) -> Any:
    """
    Parses raw bytes into a JSON tree (dicts, lists, scalars).
    Returns None for missing or unparseable data instead of raising.
    """
    if data is None:
        return None
    try:
        return json.loads(data)
    except (ValueError, UnicodeDecodeError):
        return None


def get_node(node: Any, *path: Key) -> Any:
    """
    Walks a JSON tree by keys (for objects) and indexes (for arrays).
    Example: get_node(payload, 'result', 'items', 0) -> {...} or None
    """
    current = node
    for key in path:
        if isinstance(key, str):
            if not isinstance(current, dict):
                return None
            current = current.get(key)
        else:
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return None
            current = current[key]
        if current is None:
            return None
    return current


def get_str(node: Any, *path: Key) -> Optional[str]:
    value = get_node(node, *path)
    return value if isinstance(value, str) else None


def get_int(node: Any, *path: Key) -> Optional[int]:
    value = get_node(node, *path)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def get_float(node: Any, *path: Key) -> Optional[float]:
    value = get_node(node, *path)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def get_list(node: Any, *path: Key) -> Optional[List[Any]]:
    """
    Returns the array at path, or None when the node is absent or not an array.
    """
    value = get_node(node, *path)
    return value if isinstance(value, list) else None
