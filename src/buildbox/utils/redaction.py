"""Secret redaction for logged command lines."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Pattern, Tuple

__all__ = ["REDACTED", "SecretRedactor"]

REDACTED = "[REDACTED]"

_VALUE = r"""("[^"]*"|'[^']*'|[^\s'"]+)"""
_PATTERNS: List[Tuple[Pattern, str]] = [
    (re.compile(r"(GIT_PRIVATE_TOKEN=)" + _VALUE), rf"\1{REDACTED}"),
    (
        re.compile(r"(?i)(authorization\s*:\s*Bearer)\s+[A-Za-z0-9._\-]+"),
        rf"\1 {REDACTED}",
    ),
    (re.compile(r"gh[opsu]_[A-Za-z0-9]{20,}"), REDACTED),
    (re.compile(r"github_pat_[A-Za-z0-9_]{20,}"), REDACTED),
    (
        re.compile(r"(?i)((?:api[_-]?key|token|password|secret)=)" + _VALUE),
        rf"\1{REDACTED}",
    ),
]


class SecretRedactor:
    """Scrub known secret shapes plus explicitly registered values."""

    def __init__(self, secrets: Optional[Iterable[Optional[str]]] = None) -> None:
        self._secrets = sorted(
            {s for s in (secrets or ()) if s}, key=len, reverse=True
        )

    def scrub(self, value: str) -> str:
        out = value
        for secret in self._secrets:
            out = out.replace(secret, REDACTED)
        for pat, replacement in _PATTERNS:
            out = pat.sub(replacement, out)
        return out
