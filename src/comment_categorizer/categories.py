"""Fixed category labels and the policy constants built on them."""

ADD = 'Add'
UPDATE = 'Update'
TERM = 'Term'
OTHER = 'Other'

# Canonical output order; also the order output workbooks are written in.
CATEGORIES = (ADD, UPDATE, TERM, OTHER)

DEFAULT_CATEGORY = ADD

# Keyword groups are checked in this order and the first group with a hit wins.
PRECEDENCE = (TERM, UPDATE, ADD, OTHER)

PREDICTED_COLUMN = 'Predicted Category'

_BY_LOWER = {c.lower(): c for c in CATEGORIES}


def normalize_category(value) -> str:
    key = str(value).strip().lower()
    if key not in _BY_LOWER:
        raise ValueError(f"Unknown category '{value}' (expected one of {', '.join(CATEGORIES)})")
    return _BY_LOWER[key]


def is_blank(text) -> bool:
    if text is None:
        return True
    return not str(text).strip()
