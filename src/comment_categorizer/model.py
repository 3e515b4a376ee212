"""
Trainable comment classifier.

Bag-of-ngrams counts feed a multinomial logistic regression. The fitted
scikit-learn Pipeline (vectorizer + weights) is the model artifact; it is
persisted with joblib and treated as read-only once loaded, so a single
instance can serve concurrent predictions.
"""

import logging
from pathlib import Path

import joblib
import numpy as np
import pandas as pd
from sklearn.feature_extraction.text import CountVectorizer
from sklearn.linear_model import LogisticRegression
from sklearn.metrics import accuracy_score, balanced_accuracy_score, log_loss
from sklearn.pipeline import Pipeline

from comment_categorizer.categories import is_blank, normalize_category
from comment_categorizer.errors import ClassifierUnavailable, ConfigError, IOFailure

logger = logging.getLogger(__name__)

TRAINING_COLUMNS = ('text', 'label')


def load_training_data(path: Path) -> list[tuple[str, str]]:
    path = Path(path)
    if not path.exists():
        raise IOFailure(f"Training data not found: {path}")
    try:
        if path.suffix.lower() in ('.xlsx', '.xls', '.xlsm'):
            df = pd.read_excel(path, dtype=str, keep_default_na=False)
        else:
            df = pd.read_csv(path, dtype=str, keep_default_na=False)
    except (OSError, ValueError) as e:
        raise IOFailure(f"Could not read training data {path}: {e}") from e

    df.columns = [str(c).strip().lower() for c in df.columns]
    missing = [c for c in TRAINING_COLUMNS if c not in df.columns]
    if missing:
        raise ConfigError(f"Training data {path} missing column(s): {', '.join(missing)}")

    examples = []
    for i, (text, label) in enumerate(zip(df['text'], df['label']), start=2):
        if is_blank(text):
            continue
        try:
            examples.append((str(text).strip(), normalize_category(label)))
        except ValueError as e:
            raise ConfigError(f"Training data {path} line {i}: {e}")
    logger.info("Loaded %d training examples from %s", len(examples), path)
    return examples


def build_pipeline(ngram_range=(1, 2), max_iter: int = 1000, c: float = 1.0) -> Pipeline:
    return Pipeline([
        ('vectorizer', CountVectorizer(lowercase=True, ngram_range=ngram_range)),
        ('clf', LogisticRegression(C=c, max_iter=max_iter, random_state=0)),
    ])


def train(examples, **params) -> Pipeline:
    texts, labels = [], []
    for text, label in examples:
        if is_blank(text):
            continue
        try:
            labels.append(normalize_category(label))
        except ValueError as e:
            raise ConfigError(f"Training example {text!r}: {e}")
        texts.append(str(text))

    if len(set(labels)) < 2:
        raise ConfigError(
            f"Training needs at least two distinct labels, got {sorted(set(labels)) or 'none'}"
        )

    model = build_pipeline(**params)
    model.fit(texts, labels)
    logger.info("Trained model on %d examples, classes: %s", len(texts), ', '.join(model.classes_))
    return model


def evaluate(model: Pipeline, examples) -> dict[str, float]:
    texts = [str(t) for t, _ in examples]
    labels = [normalize_category(l) for _, l in examples]
    proba = model.predict_proba(texts)
    predicted = model.classes_[np.argmax(proba, axis=1)]
    return {
        'micro_accuracy': float(accuracy_score(labels, predicted)),
        'macro_accuracy': float(balanced_accuracy_score(labels, predicted)),
        'log_loss': float(log_loss(labels, proba, labels=list(model.classes_))),
    }


def save_model(model: Pipeline, path: Path) -> Path:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(model, path)
    except OSError as e:
        raise IOFailure(f"Could not save model to {path}: {e}") from e
    logger.info("Model saved to %s", path)
    return path


def load_model(path: Path) -> Pipeline:
    path = Path(path)
    if not path.exists():
        raise IOFailure(f"Model file not found: {path}")
    try:
        model = joblib.load(path)
    except Exception as e:
        raise IOFailure(f"Could not load model from {path}: {e}") from e
    if not hasattr(model, 'predict_proba') or not hasattr(model, 'classes_'):
        raise IOFailure(f"{path} does not contain a fitted text classifier")
    logger.info("Model loaded from %s", path)
    return model


class TrainableClassifier:

    strategy = 'model'

    def __init__(self, model: Pipeline = None):
        self.model = model

    @property
    def available(self) -> bool:
        return self.model is not None

    def predict(self, text: str) -> tuple[str, dict[str, float]]:
        if self.model is None:
            raise ClassifierUnavailable('No trained or loaded model')
        proba = self.model.predict_proba([str(text)])[0]
        classes = [str(c) for c in self.model.classes_]
        scores = dict(zip(classes, (float(p) for p in proba)))
        return classes[int(np.argmax(proba))], scores

    def classify(self, text: str) -> str:
        return self.predict(text)[0]
