"""
Rule-based comment classification.

Keywords are matched as lower-case substrings. Groups are checked in
PRECEDENCE order (Term, Update, Add, Other); the first group with any hit
decides the category. Text with no hit falls through to DEFAULT_CATEGORY.
"""

from pathlib import Path

import yaml

from comment_categorizer.categories import ADD, DEFAULT_CATEGORY, OTHER, PRECEDENCE, TERM, UPDATE, normalize_category
from comment_categorizer.errors import ConfigError

DEFAULT_KEYWORDS = {
    TERM: (
        'leaving', 'termination', 'terminated', 'end of contract',
        'resignation', 'resigned', 'layoff', 'conclusion',
    ),
    UPDATE: (
        'update', 'updating', 'change', 'modify',
        'correction', 'adjust', 'revise', 'revised',
    ),
    ADD: (
        'new employee', 'new hire', 'starting', 'hiring', 'onboard',
        'additional resource', 'new team member', 'recruit', 'joining',
        'fresh', 'expand team', 'adding',
    ),
    OTHER: (
        'inquiry', 'review', 'investigation', 'miscellaneous',
        'administrative', 'special case', 'pending', 'follow-up',
        'exception', 'non-standard',
    ),
}


def load_keyword_rules(path: Path) -> dict[str, tuple[str, ...]]:
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    groups = data.get('keywords')
    if not isinstance(groups, dict):
        raise ConfigError(f"{path}: missing 'keywords' mapping")

    merged = dict(DEFAULT_KEYWORDS)
    for label, keywords in groups.items():
        try:
            category = normalize_category(label)
        except ValueError as e:
            raise ConfigError(f"{path}: {e}")
        if not isinstance(keywords, list) or not keywords:
            raise ConfigError(f"{path}: keywords.{label} must be a non-empty list")
        for i, kw in enumerate(keywords):
            if not isinstance(kw, str) or not kw.strip():
                raise ConfigError(f"{path}: keywords.{label}[{i}] must be a non-empty string")
        merged[category] = tuple(kw.strip().lower() for kw in keywords)
    return merged


class RuleBasedClassifier:

    strategy = 'rules'

    def __init__(self, keyword_groups: dict = None):
        groups = keyword_groups or DEFAULT_KEYWORDS
        self._groups = tuple(
            (category, tuple(kw.lower() for kw in groups.get(category, ())))
            for category in PRECEDENCE
        )

    @property
    def keyword_groups(self) -> dict[str, tuple[str, ...]]:
        return dict(self._groups)

    def explain(self, text: str) -> tuple[str, str | None]:
        lowered = str(text).lower()
        for category, keywords in self._groups:
            for kw in keywords:
                if kw in lowered:
                    return category, kw
        return DEFAULT_CATEGORY, None

    def classify(self, text: str) -> str:
        return self.explain(text)[0]
