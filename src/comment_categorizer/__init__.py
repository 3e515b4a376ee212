"""
Comment Categorizer

Classifies free-text delegate comments in multi-sheet workbooks into
Add / Update / Term / Other and splits the rows into per-category workbooks.
"""

from comment_categorizer.categories import CATEGORIES, DEFAULT_CATEGORY, PRECEDENCE, PREDICTED_COLUMN
from comment_categorizer.errors import (
    CategorizerError,
    ClassifierUnavailable,
    ConfigError,
    EmptyText,
    IOFailure,
    MissingColumn,
)

__version__ = '0.3.0'

__all__ = [
    'CATEGORIES',
    'DEFAULT_CATEGORY',
    'PRECEDENCE',
    'PREDICTED_COLUMN',
    'CategorizerError',
    'ClassifierUnavailable',
    'ConfigError',
    'EmptyText',
    'IOFailure',
    'MissingColumn',
]
