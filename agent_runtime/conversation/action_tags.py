"""Inline action markup in replies: ``[smile]`` becomes an emoji."""

import re
from dataclasses import dataclass, field
from typing import Optional

ACTION_TAG_PATTERN = re.compile(r"\[([a-zA-Z_]+)\]")

DEFAULT_ACTION_TAGS = {
    "[smile]": "\U0001F60A",
    "[wave]": "\U0001F44B",
    "[thumbs_up]": "\U0001F44D",
    "[thinking]": "\U0001F914",
    "[excited]": "\U0001F389",
    "[welcome]": "\U0001F91D",
    "[phone]": "\U0001F4DE",
    "[email]": "\U0001F4E7",
    "[gym]": "\U0001F4AA",
    "[fitness]": "\U0001F3CB️‍♂️",
    "[heart]": "❤️",
    "[fire]": "\U0001F525",
    "[star]": "⭐",
    "[check]": "✅",
    "[point_right]": "\U0001F449",
    "[muscle]": "\U0001F4AA",
    "[trophy]": "\U0001F3C6",
    "[calendar]": "\U0001F4C5",
    "[location]": "\U0001F4CD",
    "[money]": "\U0001F4B0",
}


@dataclass
class ActionTagProcessor:
    """Replaces ``[tag]`` markup with mapped text.

    Unknown tags are replaced with ``fallback`` when set, otherwise removed.
    """
    enabled: bool = True
    mappings: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ACTION_TAGS))
    fallback: Optional[str] = None

    def process(self, text: str) -> str:
        if not self.enabled or not self.mappings:
            return text

        def _replace(match: re.Match) -> str:
            tag = f"[{match.group(1)}]"
            if tag in self.mappings:
                return self.mappings[tag]
            return self.fallback or ""

        return ACTION_TAG_PATTERN.sub(_replace, text)

    def __call__(self, text: str) -> str:
        return self.process(text)

    @property
    def available_tags(self) -> list[str]:
        return list(self.mappings)

    def add_mapping(self, tag: str, replacement: str) -> None:
        self.mappings[tag] = replacement

    def remove_mapping(self, tag: str) -> None:
        self.mappings.pop(tag, None)
