"""Ordered keyword rule tables used by the mock generators.

Each table is a sequence of ``KeywordRule`` entries pairing a keyword
predicate with the artifact fragment it contributes. Adding a feature family
means appending a rule; the generators never branch on keywords themselves.

Example usage:
    >>> rules = [KeywordRule(("shop", "store"), "commerce")]
    >>> first_match(rules, "an online shop")
    'commerce'
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class KeywordRule:
    """A keyword predicate paired with the fragment it selects.

    Attributes:
        keywords: Lower-case keywords; the rule matches if any keyword matches
        fragment: Value contributed when the rule matches
        substring: Match keywords anywhere in the text instead of only at the
            start of a word
    """

    keywords: tuple[str, ...]
    fragment: Any
    substring: bool = False

    def matches(self, text: str) -> bool:
        """Check whether any keyword occurs in ``text`` (case-insensitive)."""
        lowered = text.lower()
        if self.substring:
            return any(keyword in lowered for keyword in self.keywords)
        return any(
            re.search(rf"\b{re.escape(keyword)}", lowered) for keyword in self.keywords
        )


def first_match(rules: Iterable[KeywordRule], text: str, default: Any = None) -> Any:
    """Return the fragment of the first matching rule, or ``default``."""
    for rule in rules:
        if rule.matches(text):
            return rule.fragment
    return default


def all_matches(rules: Iterable[KeywordRule], text: str) -> list[Any]:
    """Return the fragments of every matching rule, in table order."""
    return [rule.fragment for rule in rules if rule.matches(text)]
