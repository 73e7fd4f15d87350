"""
SWIFT code identity rules.

A SWIFT/BIC code is an 8-character prefix (bank, country, location) with an
optional 3-character branch suffix. Codes ending in ``XXX`` denote the
headquarters of the hierarchy grouped under their prefix; every other code is
a branch of that hierarchy.
"""

from typing import NamedTuple

from core.exceptions import InvalidCodeError

PREFIX_LENGTH = 8
HEADQUARTER_SUFFIX = "XXX"


class CodeIdentity(NamedTuple):
    code: str
    prefix: str
    is_headquarter: bool


def normalize_code(raw_code: str) -> str:
    """Trim and upper-case a raw SWIFT code."""
    return raw_code.strip().upper()


def is_headquarter_code(code: str) -> bool:
    return code.endswith(HEADQUARTER_SUFFIX)


def code_prefix(code: str) -> str:
    """
    Return the hierarchy grouping key of a code.

    Raises:
        InvalidCodeError: if the code is shorter than the prefix itself, since
            a truncated prefix would join unrelated hierarchies.
    """
    if len(code) < PREFIX_LENGTH:
        raise InvalidCodeError(
            f"SWIFT code {code} is too short, expected at least {PREFIX_LENGTH} characters"
        )
    return code[:PREFIX_LENGTH]


def classify(raw_code: str) -> CodeIdentity:
    """
    Classify a SWIFT code as headquarters or branch.

    Args:
        raw_code: SWIFT code, normalized here as well so classification never
            depends on casing or surrounding whitespace.

    Returns:
        CodeIdentity with the normalized code, its prefix and its role.
    """
    code = normalize_code(raw_code)
    return CodeIdentity(code=code, prefix=code_prefix(code), is_headquarter=is_headquarter_code(code))
