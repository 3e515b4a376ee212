"""
Classification-and-partition pipeline.

read sheets -> resolve the free-text column per sheet -> classify each row
-> partition by (category, sheet) -> hand each table to the sink.

Rows are classified in batches, optionally across a thread pool; the
context's classifier is only read during a run. Cancellation is checked
between sheets and between batches. A sheet either finishes classification
or is dropped whole, so a cancelled sheet never reaches the sink.
"""

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from comment_categorizer.categories import CATEGORIES, is_blank
from comment_categorizer.columns import ColumnMap
from comment_categorizer.context import REASON_EMPTY, ClassifierContext
from comment_categorizer.errors import EmptyText, IOFailure, MissingColumn
from comment_categorizer.models import OutputTable, Row, Sheet
from comment_categorizer.partition import partition

logger = logging.getLogger(__name__)

DEFAULT_FREE_TEXT_COLUMN = 'Delegate Comments'
REASON_MISSING_COLUMN = 'missing_column'


@dataclass
class RunResult:
    rows: list[Row] = field(default_factory=list)
    tables: dict[tuple[str, str], OutputTable] = field(default_factory=dict)
    written: list[Path] = field(default_factory=list)
    failures: list[IOFailure] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    missing_columns: list[MissingColumn] = field(default_factory=list)
    cancelled_sheets: list[str] = field(default_factory=list)
    reasons: Counter = field(default_factory=Counter)

    def counts(self) -> dict[str, int]:
        counter = Counter(row.category for row in self.rows)
        return {category: counter.get(category, 0) for category in CATEGORIES}

    @property
    def ok(self) -> bool:
        return not self.failures


class Pipeline:

    def __init__(self, context: ClassifierContext, free_text_column: str = DEFAULT_FREE_TEXT_COLUMN,
                 sink=None, workers: int = 1, batch_size: int = 500):
        if workers < 1:
            raise ValueError('workers must be >= 1')
        if batch_size < 1:
            raise ValueError('batch_size must be >= 1')
        self.context = context
        self.free_text_column = free_text_column
        self.sink = sink
        self.workers = workers
        self.batch_size = batch_size
        self._executor = None

    @contextmanager
    def _pool(self):
        if self.workers == 1 or self._executor is not None:
            yield
            return
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix='classify') as executor:
            self._executor = executor
            try:
                yield
            finally:
                self._executor = None

    def build_rows(self, sheet: Sheet) -> tuple[list[Row], int | None]:
        col = ColumnMap(sheet.header).index_of(self.free_text_column)
        rows = []
        for i, values in enumerate(sheet.rows, start=1):
            text = None if col is None else values[col]
            free_text = '' if is_blank(text) else str(text).strip()
            rows.append(Row(sheet.name, i, list(zip(sheet.header, values)), free_text))
        return rows, col

    def _classify_batch(self, texts: list[str]) -> list[tuple[str, str]]:
        if self._executor is None:
            return [self.context.classify_text(t) for t in texts]
        return list(self._executor.map(self.context.classify_text, texts))

    def _classify_sheet(self, sheet: Sheet, cancel=None):
        rows, col = self.build_rows(sheet)

        if col is None:
            missing = MissingColumn(sheet.name, self.free_text_column)
            logger.info("%s; all %d rows take '%s'", missing, len(rows), self.context.default_category)
            decisions = [(self.context.default_category, REASON_MISSING_COLUMN)] * len(rows)
        else:
            missing = None
            decisions = []
            for start in range(0, len(rows), self.batch_size):
                if cancel is not None and cancel.is_set():
                    logger.warning("Sheet '%s' cancelled after %d of %d rows", sheet.name, start, len(rows))
                    return None
                batch = rows[start:start + self.batch_size]
                decisions.extend(self._classify_batch([row.free_text for row in batch]))

        reasons = Counter()
        for row, (category, reason) in zip(rows, decisions):
            row.assign(category)
            reasons[reason] += 1
            if reason == REASON_EMPTY:
                logger.debug("%s -> %s", EmptyText(sheet.name, row.index), category)
        return rows, reasons, missing

    def classify_sheet(self, sheet: Sheet, cancel=None) -> list[Row] | None:
        with self._pool():
            outcome = self._classify_sheet(sheet, cancel)
        return None if outcome is None else outcome[0]

    def run(self, sheets: list[Sheet], cancel=None) -> RunResult:
        result = RunResult()

        with self._pool():
            for sheet in sheets:
                if cancel is not None and cancel.is_set():
                    result.cancelled_sheets.append(sheet.name)
                    continue
                outcome = self._classify_sheet(sheet, cancel)
                if outcome is None:
                    result.cancelled_sheets.append(sheet.name)
                    continue
                rows, reasons, missing = outcome
                result.rows.extend(rows)
                result.reasons.update(reasons)
                if missing is not None:
                    result.missing_columns.append(missing)
                logger.info("Sheet '%s': %d rows classified", sheet.name, len(rows))

        result.tables = partition(result.rows)

        if self.sink is not None:
            for (category, sheet_name), table in result.tables.items():
                try:
                    path = self.sink.write_table(category, sheet_name, table.header, table.rows)
                except IOFailure as e:
                    result.failures.append(e)
                    logger.error("%s", e)
                    continue
                except OSError as e:
                    failure = IOFailure(f"Sink write failed: {e}", sheet=sheet_name, category=category)
                    result.failures.append(failure)
                    logger.error("%s", failure)
                    continue
                if path is not None and path not in result.written:
                    result.written.append(path)

        result.warnings = list(self.context.warnings)
        if result.cancelled_sheets:
            result.warnings.append(f"Cancelled sheets (no output written): {', '.join(result.cancelled_sheets)}")
        return result
