from __future__ import annotations

import re
from dataclasses import dataclass, field
from re import Pattern

MASK_TOKEN = "[MASKED]"

BEARER_PATTERN = r"(?i)bearer\s+[A-Za-z0-9._~+/=-]+"


@dataclass(frozen=True)
class RegexMasker:
    patterns: tuple[Pattern[str], ...] = field(default_factory=tuple)
    secrets: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_patterns(cls, patterns: list[str], secrets: list[str] | None = None) -> RegexMasker:
        compiled: list[Pattern[str]] = []
        for idx, pattern in enumerate(patterns):
            try:
                compiled.append(re.compile(pattern))
            except re.error as exc:
                raise ValueError(f"invalid masking regex at index {idx}: {pattern}") from exc
        literal = tuple(secret for secret in (secrets or []) if secret)
        return cls(patterns=tuple(compiled), secrets=literal)

    def mask_text(self, text: str) -> str:
        if not text:
            return text
        masked = text
        for secret in self.secrets:
            masked = masked.replace(secret, MASK_TOKEN)
        for pattern in self.patterns:
            masked = pattern.sub(MASK_TOKEN, masked)
        return masked


def build_masker(patterns: list[str], secrets: list[str] | None = None) -> RegexMasker:
    """Build a masker that always scrubs bearer headers plus ``patterns``.

    ``secrets`` are literal values (the configured API token) replaced verbatim.
    """
    return RegexMasker.from_patterns([BEARER_PATTERN, *patterns], secrets)
