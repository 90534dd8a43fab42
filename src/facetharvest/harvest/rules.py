"""Id extraction rules.

Each rule maps the raw identifier source of a list item (a label ``for``
attribute or a checkbox ``data-option`` value) to the canonical option id.
Rules are pure and chosen by name once per facet harvest.
"""

import re
from typing import Callable, Dict, Optional

IdRule = Callable[[Optional[str]], Optional[str]]

_TRAILING_DIGITS_RE = re.compile(r"(\d+)$")
_TRAILING_ALPHA_CODE_RE = re.compile(r"(?<![A-Z])([A-Z]{2})$")


def numeric_id(source: Optional[str]) -> Optional[str]:
    """``search_destination_ids_482`` -> ``"482"``."""
    if not source:
        return None
    m = _TRAILING_DIGITS_RE.search(source)
    return m.group(1) if m else None


def alpha_code_id(source: Optional[str]) -> Optional[str]:
    """``search_country_codes_FR`` -> ``"FR"``; three-letter tails yield nothing."""
    if not source:
        return None
    m = _TRAILING_ALPHA_CODE_RE.search(source)
    return m.group(1) if m else None


def pass_through_id(source: Optional[str]) -> Optional[str]:
    return source if source else None


ID_RULES: Dict[str, IdRule] = {
    "numeric": numeric_id,
    "alpha_code": alpha_code_id,
    "pass_through": pass_through_id,
}


def get_rule(name: str) -> IdRule:
    try:
        return ID_RULES[name]
    except KeyError:
        known = ", ".join(sorted(ID_RULES))
        raise ValueError(f"Unknown id rule {name!r} (known: {known})") from None
