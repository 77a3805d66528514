"""
Context lookup for fm.* and file.* references.

The evaluator only ever asks one question of its context: "what is at
this dotted path?". Anything that answers it can be a context; the host
decides where the data comes from (usually a note's frontmatter).
"""

from collections.abc import Mapping
from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class ExpressionContext(Protocol):
    """Read-only dotted-path lookup. Returns None for anything missing."""

    def resolve(self, path: str) -> Any:
        ...


class FrontmatterContext:
    """
    Context backed by a (possibly nested) mapping.

    Resolution rules, one dot-separated segment at a time:
        - mapping: look the segment up as a key
        - list/tuple: a canonical non-negative integer segment ("0", "12",
          not "01") is an index
        - string/list/tuple: "length" is its length
        - anything else, or a missing key/index: None

    Examples:
        >>> ctx = FrontmatterContext({"user": {"name": "Bob"}, "tags": ["a", "b"]})
        >>> ctx.resolve("user.name")
        'Bob'
        >>> ctx.resolve("tags.1")
        'b'
        >>> ctx.resolve("user.email") is None
        True
    """

    def __init__(self, frontmatter: Optional[Mapping] = None):
        self.frontmatter = frontmatter if frontmatter is not None else {}

    def resolve(self, path: str) -> Any:
        current: Any = self.frontmatter
        for part in path.split("."):
            if current is None:
                return None
            current = _lookup(current, part)
        return current

    def __repr__(self) -> str:
        return f"FrontmatterContext({self.frontmatter!r})"


def _is_index(part: str) -> bool:
    # Canonical array index only: "0", "12"; never "01" or "+1"
    return part.isascii() and part.isdigit() and (part == "0" or not part.startswith("0"))


def _lookup(container: Any, part: str) -> Any:
    if isinstance(container, Mapping):
        return container.get(part)
    if isinstance(container, (list, tuple)):
        if _is_index(part):
            index = int(part)
            return container[index] if index < len(container) else None
        if part == "length":
            return len(container)
        return None
    if isinstance(container, str) and part == "length":
        return len(container)
    return None


def as_context(source: Any) -> ExpressionContext:
    """
    Normalize what callers pass as a context.

    Accepts an ExpressionContext, a plain mapping or None (empty context).
    A mapping is the frontmatter itself, not a wrapper holding it under a
    "frontmatter" key.

    Raises:
        TypeError: For anything else
    """
    if source is None:
        return FrontmatterContext({})
    if isinstance(source, Mapping):
        return FrontmatterContext(source)
    if isinstance(source, ExpressionContext):
        return source
    raise TypeError(f"Unsupported context type: {type(source).__name__}")


__all__ = [
    "ExpressionContext",
    "FrontmatterContext",
    "as_context",
]
