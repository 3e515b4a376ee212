"""
Comment Categorizer CLI

Classifies the delegate comment on every row of every sheet into
Add / Update / Term / Other and writes one workbook per category.

Usage:
    comment-categorizer --config clients/example/config.yaml
    comment-categorizer --config clients/example/config.yaml --input other.xlsx --output-dir /tmp
    comment-categorizer --config clients/example/config.yaml --strategy model
    comment-categorizer --config clients/example/config.yaml --train
    comment-categorizer --generate-sample sample_input.xlsx
"""

import argparse
import logging
import sys
import time

from comment_categorizer.categories import CATEGORIES
from comment_categorizer.config import load_config
from comment_categorizer.context import ClassifierContext
from comment_categorizer.errors import ConfigError, IOFailure
from comment_categorizer.model import evaluate, load_training_data, save_model, train
from comment_categorizer.pipeline import Pipeline
from comment_categorizer.workbook import ExcelSink, read_table, write_sample_workbook


def _print_metrics(metrics: dict):
    print("  Model evaluation (training set):")
    print(f"    MicroAccuracy: {metrics['micro_accuracy']:.4f}")
    print(f"    MacroAccuracy: {metrics['macro_accuracy']:.4f}")
    print(f"    LogLoss:       {metrics['log_loss']:.4f}")


def train_model(config: dict) -> int:
    paths = config['_resolved_paths']
    if paths['training_data'] is None or paths['model'] is None:
        raise ConfigError("Training needs both 'paths.training_data' and 'paths.model'")

    print("=" * 70)
    print(f"{config['client']['name']} MODEL TRAINING")
    print("=" * 70)

    examples = load_training_data(paths['training_data'])
    print(f"  Training examples: {len(examples):,}")
    t_start = time.perf_counter()
    model = train(examples)
    _print_metrics(evaluate(model, examples))
    save_model(model, paths['model'])
    print(f"\nTraining completed in {time.perf_counter() - t_start:.1f}s")
    print(f"Model saved to: {paths['model']}")
    return 0


def main(config: dict) -> int:
    paths = config['_resolved_paths']
    classif = config['classification']
    client_name = config['client']['name']

    t_start = time.perf_counter()

    print("=" * 70)
    print(f"{client_name} COMMENT CATEGORIZATION")
    print("=" * 70)

    print("\nPreparing classifier...")
    context = ClassifierContext.from_config(config)
    print(f"  Strategy: {context.strategy}")
    print(f"  Default category: {context.default_category}")
    if context.metrics:
        _print_metrics(context.metrics)
        print(f"  Model saved to: {paths['model']}")

    print(f"\nLoading {paths['input'].name}...")
    sheets = read_table(paths['input'])
    total_rows = sum(len(s.rows) for s in sheets)
    print(f"  Loaded {len(sheets)} sheets, {total_rows:,} rows")
    if total_rows == 0:
        raise ConfigError(f"Input file has 0 data rows: {paths['input']}")

    sink = ExcelSink(paths['output_dir'], paths['output_prefix'])
    pipeline = Pipeline(
        context,
        free_text_column=config['columns']['free_text'],
        sink=sink,
        workers=classif['workers'],
        batch_size=classif['batch_size'],
    )

    print(f"\nClassifying '{pipeline.free_text_column}' ({classif['workers']} worker(s))...")
    t_classify = time.perf_counter()
    result = pipeline.run(sheets)
    t_classify_end = time.perf_counter()

    for missing in result.missing_columns:
        print(f"  WARNING: {missing}; all rows defaulted to '{context.default_category}'", file=sys.stderr)
    for w in result.warnings:
        print(f"  WARNING: {w}", file=sys.stderr)

    counts = result.counts()
    classified = len(result.rows)

    print(f"\n{'='*70}")
    print("CATEGORIZATION COMPLETE")
    print(f"{'='*70}")
    print(f"Total rows:   {classified:,}")
    print("\nCategories:")
    for category in CATEGORIES:
        count = counts[category]
        share = count / classified * 100 if classified else 0.0
        print(f"  {category:30s} {count:>8,} ({share:.1f}%)")
    print("\nDecisions:")
    for reason, count in result.reasons.most_common():
        print(f"  {reason:30s} {count:>8,}")
    print("\nOutput tables:")
    for (category, sheet_name), table in result.tables.items():
        print(f"  {category:8s} {sheet_name:30s} {len(table):>8,}")
    print(f"\nTiming: classification {t_classify_end - t_classify:.1f}s, total {time.perf_counter() - t_start:.1f}s")
    for path in result.written:
        print(f"Output saved to: {path}")

    if result.failures:
        for failure in result.failures:
            print(f"ERROR: {failure}", file=sys.stderr)
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='comment-categorizer',
        description='Comment Categorizer CLI: split workbook rows into Add / Update / Term / Other workbooks',
    )
    parser.add_argument('--config', default=None, help='Path to client config YAML')
    parser.add_argument('--input', default=None, help='Override input workbook path (XLSX or CSV) from config')
    parser.add_argument('--output-dir', default=None, help='Override output directory from config')
    parser.add_argument('--strategy', choices=['rules', 'model'], default=None,
                        help='Override classification.strategy from config')
    parser.add_argument('--workers', type=int, default=None, help='Override classification.workers from config')
    parser.add_argument('--train', action='store_true', help='Train the model from paths.training_data and exit')
    parser.add_argument('--generate-sample', metavar='PATH', default=None,
                        help='Write a demo input workbook to PATH and exit')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    return parser


def run(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        if args.generate_sample:
            path = write_sample_workbook(args.generate_sample)
            print(f"Sample workbook saved to: {path}")
            return 0
        if not args.config:
            parser.error('--config is required')
        config = load_config(
            args.config, args.input, args.output_dir,
            strategy_override=args.strategy,
            workers_override=args.workers,
            require_input=not args.train,
        )
        if args.train:
            return train_model(config)
        return main(config)
    except (ConfigError, IOFailure) as e:
        print(f"ERROR: {e}")
        return 1


def entrypoint():
    sys.exit(run())


if __name__ == "__main__":
    entrypoint()
