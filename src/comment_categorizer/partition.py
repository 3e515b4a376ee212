"""
Regroup classified rows into per-(category, sheet) output tables.

Tables come out in canonical category order, then in the order sheets were
first seen. Only combinations with at least one row are emitted and every
input row lands in exactly one table.
"""

from comment_categorizer.categories import CATEGORIES
from comment_categorizer.models import OutputTable, Row


def partition(rows: list[Row]) -> dict[tuple[str, str], OutputTable]:
    sheet_order = {}
    grouped = {category: {} for category in CATEGORIES}
    for row in rows:
        if row.category is None:
            raise ValueError(f"Row {row.index} of sheet '{row.sheet}' has no category")
        sheet_order.setdefault(row.sheet, len(sheet_order))
        by_sheet = grouped[row.category]
        table = by_sheet.get(row.sheet)
        if table is None:
            header = [name for name, _ in row.cells]
            table = by_sheet[row.sheet] = OutputTable.for_sheet(row.category, row.sheet, header)
        table.append(row)

    tables = {}
    for category in CATEGORIES:
        for sheet_name in sorted(grouped[category], key=sheet_order.get):
            tables[(category, sheet_name)] = grouped[category][sheet_name]
    return tables
