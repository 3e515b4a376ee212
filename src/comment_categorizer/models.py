from dataclasses import dataclass, field

from comment_categorizer.categories import PREDICTED_COLUMN, normalize_category


@dataclass
class Sheet:
    name: str
    header: list[str]
    rows: list[list] = field(default_factory=list)

    def __post_init__(self):
        # Names are kept as written; only empty header cells get a placeholder.
        self.header = [
            str(h) if h is not None and str(h).strip() else f'Column{i + 1}'
            for i, h in enumerate(self.header)
        ]
        width = len(self.header)
        padded = []
        for i, r in enumerate(self.rows, start=1):
            r = list(r)
            if len(r) > width:
                raise ValueError(
                    f"Row {i} of sheet '{self.name}' has {len(r)} cells but the header has {width} columns"
                )
            padded.append(r + [None] * (width - len(r)))
        self.rows = padded


@dataclass
class Row:
    sheet: str
    index: int
    cells: list[tuple[str, object]]
    free_text: str = ''
    category: str | None = None

    def assign(self, category: str):
        if self.category is not None:
            raise ValueError(
                f"Row {self.index} of sheet '{self.sheet}' already assigned '{self.category}'"
            )
        self.category = normalize_category(category)

    @property
    def values(self) -> list:
        return [value for _, value in self.cells]


@dataclass
class OutputTable:
    category: str
    sheet_name: str
    header: list[str]
    rows: list[list] = field(default_factory=list)

    @classmethod
    def for_sheet(cls, category: str, sheet_name: str, source_header: list[str]) -> 'OutputTable':
        return cls(category, sheet_name, list(source_header) + [PREDICTED_COLUMN])

    def append(self, row: Row):
        self.rows.append(row.values + [row.category])

    def __len__(self):
        return len(self.rows)
