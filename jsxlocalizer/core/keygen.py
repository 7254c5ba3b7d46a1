"""
Key Generator
=============

Derives stable lookup keys from raw UI text.

Two policies are available and selected through configuration:

- ``camel``: global camelCase keys. Identical prose in different components
  shares one key (deduplication).
- ``component``: ``<Component>_<slug>`` keys. Identical prose in different
  components gets independent keys (disambiguation).
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional

# Unicode-aware "anything that is not a letter or digit"
_NON_ALNUM_RE = re.compile(r'[\W_]+')


class KeyPolicy(Enum):
    """Key generation policies."""
    CAMEL = "camel"
    COMPONENT = "component"

    @classmethod
    def from_value(cls, value) -> "KeyPolicy":
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower()
        for policy in cls:
            if policy.value == normalized:
                return policy
        raise ValueError(f"Unknown key policy: {value!r}")


def camel_case_key(text: str) -> str:
    """Convert text to a camelCase key.

    ``"Hello, World!"`` -> ``"helloWorld"``
    ``"Welcome, {{name}} !"`` -> ``"welcomeName"``
    """
    words = _NON_ALNUM_RE.sub(' ', text.lower()).split()
    if not words:
        return ""
    head, rest = words[0], words[1:]
    return head + "".join(word[:1].upper() + word[1:] for word in rest)


def component_slug_key(component_name: str, text: str) -> str:
    """Build a ``<Component>_<slug>`` key; empty when the slug is empty."""
    slug = _NON_ALNUM_RE.sub('_', text.lower()).strip('_')
    if not slug:
        return ""
    return f"{component_name}_{slug}"


def generate_key(text: str, component_name: Optional[str] = None,
                 policy: KeyPolicy = KeyPolicy.CAMEL) -> str:
    """Generate a key for ``text`` under ``policy``.

    Returns an empty string when nothing extractable is left after
    normalization.
    """
    policy = KeyPolicy.from_value(policy)
    text = (text or "").strip()
    if not text:
        return ""
    if policy is KeyPolicy.COMPONENT:
        if not component_name:
            raise ValueError("component policy requires a component name")
        return component_slug_key(component_name, text)
    return camel_case_key(text)


class KeyGenerator:
    """Key generator bound to one policy and one component."""

    def __init__(self, policy: KeyPolicy = KeyPolicy.CAMEL, component_name: str = ""):
        self.policy = KeyPolicy.from_value(policy)
        self.component_name = component_name

    def generate(self, text: str) -> str:
        return generate_key(text, self.component_name or None, self.policy)

    def __repr__(self) -> str:
        return f"KeyGenerator(policy={self.policy.value!r}, component={self.component_name!r})"
