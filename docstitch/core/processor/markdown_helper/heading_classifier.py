# docstitch/core/processor/markdown_helper/heading_classifier.py
"""
Heading Classifier

Decides whether a node of the prose event stream is a heading, from its tag
(h1..h9) or from its paragraph style class ("Heading_2", "标题_2").
"""
import re
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Pattern, Tuple

DEFAULT_TAG_LEVELS: Mapping[str, int] = MappingProxyType({
    f"h{level}": level for level in range(1, 10)
})

DEFAULT_CLASS_PATTERNS: Tuple[Pattern, ...] = (
    re.compile(r"标题_(\d)", re.IGNORECASE),
    re.compile(r"Heading_(\d)", re.IGNORECASE),
)


class HeadingClassifier:
    """
    Stateless tag/class to heading-level lookup.

    The lookup tables are fixed at construction.

    Example:
        >>> classifier = HeadingClassifier()
        >>> classifier.prefix("p", "Heading_2")
        '##'
    """

    def __init__(
        self,
        tag_levels: Optional[Mapping[str, int]] = None,
        class_patterns: Optional[Iterable[Pattern]] = None,
    ):
        self._tag_levels = MappingProxyType(dict(tag_levels or DEFAULT_TAG_LEVELS))
        self._class_patterns = tuple(
            DEFAULT_CLASS_PATTERNS if class_patterns is None else class_patterns
        )

    @property
    def tag_levels(self) -> Mapping[str, int]:
        return self._tag_levels

    def level(self, tag: Optional[str], css_class: Optional[str] = None) -> int:
        """
        Heading level of a node, 0 when it is not a heading.

        The tag wins over the class.
        """
        if tag:
            level = self._tag_levels.get(tag.lower(), 0)
            if level:
                return level

        if css_class:
            for pattern in self._class_patterns:
                match = pattern.fullmatch(css_class)
                if match:
                    return int(match.group(1))

        return 0

    def prefix(self, tag: Optional[str], css_class: Optional[str] = None) -> Optional[str]:
        """Markdown prefix ("#" repeated) of a heading node, None otherwise."""
        level = self.level(tag, css_class)
        return "#" * level if level > 0 else None


__all__ = [
    "HeadingClassifier",
    "DEFAULT_TAG_LEVELS",
    "DEFAULT_CLASS_PATTERNS",
]
