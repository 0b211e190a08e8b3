"""
Credential text normalization.

CMS credential strings are free text ("M.D.", "m d", "MD, PHD", "D. O.").
Normalization applies an ordered list of regex rules that fold the
spacing and punctuation variants of MD and DO into canonical tokens, then
uppercases, strips periods and collapses whitespace.
"""

import re
from typing import Optional

from .text import normalize_whitespace

# (pattern, replacement), applied in order, case-insensitive
CREDENTIAL_RULES = [
    (r"\bM[\s.,]*D\b", "MD"),
    (r"\bD[\s.,]*O\b", "DO"),
]

MD_TOKEN_PATTERN = re.compile(r"\bMD\b")
DO_TOKEN_PATTERN = re.compile(r"\bDO\b")


class CredentialNormalizer:
    """
    Normalizes credential strings with an ordered rule list.

    The MD test deliberately looks only for the MD token: a credential that
    normalizes to DO alone does not pass.
    """

    def __init__(self, config: Optional[dict] = None):
        """
        Initialize the normalizer.

        Args:
            config: Optional report config. Its ``credential_rules`` list
                (dicts with ``pattern`` and ``replacement``) replaces the
                default rules when present.
        """
        self.config = config or {}
        self._compile_rules()

    def _compile_rules(self) -> None:
        """Compile substitution rules from configuration."""
        rules = self.config.get("credential_rules")
        if rules:
            pairs = [(r["pattern"], r["replacement"]) for r in rules]
        else:
            pairs = CREDENTIAL_RULES

        self.rules: list[tuple[re.Pattern, str]] = []
        for pattern, replacement in pairs:
            try:
                self.rules.append((re.compile(pattern, re.IGNORECASE), replacement))
            except re.error as e:
                raise ValueError(f"Invalid credential rule pattern '{pattern}': {e}") from e

    def apply_rules(self, text: str) -> str:
        """Apply the substitution rules in order."""
        for pattern, replacement in self.rules:
            text = pattern.sub(replacement, text)
        return text

    def normalize(self, text: Optional[str]) -> str:
        """
        Normalize a credential string.

        Steps:
        1. Fold MD/DO spacing and punctuation variants
        2. Uppercase
        3. Strip periods
        4. Collapse whitespace

        Args:
            text: Raw credential string (may be None or NaN)

        Returns:
            Normalized credential string ("" for missing input)
        """
        if not text or not isinstance(text, str):
            return ""

        result = self.apply_rules(text)
        result = result.upper()
        result = result.replace(".", "")
        return normalize_whitespace(result)

    def has_md(self, text: Optional[str]) -> bool:
        """Check whether a raw credential normalizes to include the MD token."""
        return has_md_token(self.normalize(text))


def has_md_token(normalized: str) -> bool:
    """True if MD appears as a whole word in a normalized credential."""
    if not normalized:
        return False
    return bool(MD_TOKEN_PATTERN.search(normalized))


def is_do_only(normalized: str) -> bool:
    """True if a normalized credential carries DO but not MD."""
    if not normalized:
        return False
    return bool(DO_TOKEN_PATTERN.search(normalized)) and not has_md_token(normalized)


_default_normalizer: Optional[CredentialNormalizer] = None


def get_credential_normalizer() -> CredentialNormalizer:
    """Get the shared default CredentialNormalizer instance."""
    global _default_normalizer
    if _default_normalizer is None:
        _default_normalizer = CredentialNormalizer()
    return _default_normalizer


def normalize_credential(text: Optional[str]) -> str:
    """Normalize a credential string with the default rules."""
    return get_credential_normalizer().normalize(text)
