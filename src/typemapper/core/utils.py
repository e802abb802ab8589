from typing import Any


def type_name(value: Any) -> str:
    """Readable name of a type (or of any other registry key component)."""
    return getattr(value, "__qualname__", None) or repr(value)
