"""
Per-run classifier context.

The strategy is chosen from configuration only ('rules' or 'model') and is
never switched behind the caller's back. The context is built once per run
and handed to the Pipeline; nothing here is module-level state.
"""

import logging
import threading
from dataclasses import dataclass, field

from comment_categorizer.categories import DEFAULT_CATEGORY, is_blank, normalize_category
from comment_categorizer.errors import ClassifierUnavailable, ConfigError
from comment_categorizer.model import TrainableClassifier, evaluate, load_model, load_training_data, save_model, train
from comment_categorizer.rules import RuleBasedClassifier, load_keyword_rules

logger = logging.getLogger(__name__)

STRATEGIES = ('rules', 'model')

REASON_CLASSIFIED = 'classified'
REASON_EMPTY = 'empty_text'
REASON_UNAVAILABLE = 'unavailable'


@dataclass
class ClassifierContext:
    strategy: str
    classifier: object
    default_category: str = DEFAULT_CATEGORY
    warnings: list[str] = field(default_factory=list)
    metrics: dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        if self.strategy not in STRATEGIES:
            raise ConfigError(f"Unknown classification strategy '{self.strategy}' (expected rules or model)")
        self.default_category = normalize_category(self.default_category)
        self._unavailable_warned = False
        self._lock = threading.Lock()

    @classmethod
    def rules(cls, keyword_groups: dict = None, **kwargs) -> 'ClassifierContext':
        return cls('rules', RuleBasedClassifier(keyword_groups), **kwargs)

    @classmethod
    def trained(cls, model, **kwargs) -> 'ClassifierContext':
        return cls('model', TrainableClassifier(model), **kwargs)

    @classmethod
    def from_config(cls, config: dict) -> 'ClassifierContext':
        paths = config['_resolved_paths']
        classif = config['classification']
        strategy = classif['strategy']
        default = classif['default_category']

        if strategy == 'rules':
            groups = None
            if paths.get('keyword_rules'):
                groups = load_keyword_rules(paths['keyword_rules'])
            return cls.rules(groups, default_category=default)

        warnings = []
        metrics = {}
        model = None
        model_path = paths.get('model')
        training_path = paths.get('training_data')
        if model_path is not None and model_path.exists():
            model = load_model(model_path)
        elif training_path is not None and training_path.exists():
            examples = load_training_data(training_path)
            model = train(examples)
            metrics = evaluate(model, examples)
            if model_path is not None:
                save_model(model, model_path)
        else:
            warnings.append(
                'No model file or training data available; every row will take '
                f"the default category '{normalize_category(default)}'"
            )
        return cls('model', TrainableClassifier(model), default_category=default,
                   warnings=warnings, metrics=metrics)

    def classify_text(self, text) -> tuple[str, str]:
        if is_blank(text):
            return self.default_category, REASON_EMPTY
        try:
            return normalize_category(self.classifier.classify(str(text).strip())), REASON_CLASSIFIED
        except ClassifierUnavailable as e:
            self._warn_unavailable(e)
            return self.default_category, REASON_UNAVAILABLE

    def _warn_unavailable(self, error: ClassifierUnavailable):
        # One run-level warning, not one per row.
        with self._lock:
            if self._unavailable_warned:
                return
            self._unavailable_warned = True
        message = f"Classifier unavailable ({error}); rows defaulted to '{self.default_category}'"
        self.warnings.append(message)
        logger.warning(message)
