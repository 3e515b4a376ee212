"""
Workbook source and sink.

read_table() turns an .xlsx/.xls workbook (every sheet) or a .csv file (one
sheet named after the file) into Sheet objects. ExcelSink writes one
workbook per category, one worksheet per source sheet.
"""

import logging
import re
from pathlib import Path
from zipfile import BadZipFile

import pandas as pd
from openpyxl.styles import Font
from openpyxl.utils.exceptions import InvalidFileException

from comment_categorizer.categories import normalize_category
from comment_categorizer.errors import IOFailure
from comment_categorizer.models import Sheet

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = ('.xlsx', '.xlsm', '.xls')
IO_ERRORS = (OSError, ValueError, BadZipFile, InvalidFileException)

_INVALID_TITLE_CHARS = re.compile(r'[\[\]:*?/\\]')


def _frame_to_sheet(name: str, df: pd.DataFrame) -> Sheet:
    if df.empty:
        return Sheet(name, [], [])
    df = df.astype(object).where(pd.notna(df), None)
    records = df.values.tolist()
    header, rows = records[0], records[1:]
    return Sheet(name, header, rows)


def read_table(source) -> list[Sheet]:
    path = Path(source)
    if not path.exists():
        raise IOFailure(f"Input file not found: {path}")

    try:
        if path.suffix.lower() in EXCEL_SUFFIXES:
            frames = pd.read_excel(path, sheet_name=None, header=None, dtype=object)
        else:
            frames = {path.stem: pd.read_csv(path, header=None, dtype=object, skip_blank_lines=False)}
    except pd.errors.EmptyDataError:
        frames = {path.stem: pd.DataFrame()}
    except IO_ERRORS as e:
        raise IOFailure(f"Could not read {path}: {e}") from e

    sheets = [_frame_to_sheet(str(name), df) for name, df in frames.items()]
    for sheet in sheets:
        logger.info("Read sheet '%s': %d columns, %d rows", sheet.name, len(sheet.header), len(sheet.rows))
    return sheets


def sheet_title(name: str) -> str:
    title = _INVALID_TITLE_CHARS.sub('_', str(name)).strip("'")[:31]
    return title or 'Sheet'


class ExcelSink:

    def __init__(self, output_dir: Path, prefix: str):
        self.output_dir = Path(output_dir)
        self.prefix = prefix
        self.written = {}

    def path_for(self, category: str) -> Path:
        return self.output_dir / f"{self.prefix}_{normalize_category(category)}.xlsx"

    def write_table(self, category: str, sheet_name: str, header: list, rows: list) -> Path:
        category = normalize_category(category)
        path = self.path_for(category)
        title = sheet_title(sheet_name)
        df = pd.DataFrame([list(header)] + [list(r) for r in rows])

        try:
            if category in self.written:
                writer = pd.ExcelWriter(path, engine='openpyxl', mode='a', if_sheet_exists='replace')
            else:
                self.output_dir.mkdir(parents=True, exist_ok=True)
                writer = pd.ExcelWriter(path, engine='openpyxl', mode='w')
            with writer:
                df.to_excel(writer, sheet_name=title, index=False, header=False)
                for cell in writer.sheets[title][1]:
                    cell.font = Font(bold=True)
        except IO_ERRORS as e:
            raise IOFailure(f"Could not write {path.name}: {e}", sheet=sheet_name, category=category) from e

        self.written[category] = path
        logger.info("Wrote %d %s rows from '%s' to %s", len(rows), category, sheet_name, path)
        return path


SAMPLE_SHEETS = {
    'Employees': (
        ['Employee ID', 'Employee Name', 'Department', 'Delegate Comments', 'Manager'],
        [
            ['EMP001', 'John Smith', 'IT', 'New employee starting next month', 'Jane Doe'],
            ['EMP002', 'Mary Johnson', 'HR', 'Employee information needs updating', 'Bob Wilson'],
            ['EMP003', 'David Brown', 'Finance', 'Employee is leaving the company', 'Alice Cooper'],
            ['EMP004', 'Sarah Davis', 'Marketing', 'General inquiry about employee', 'Tom Jones'],
            ['EMP005', 'Mike Wilson', 'IT', 'Hiring new team member for the project', 'Jane Doe'],
            ['EMP006', 'Lisa Anderson', 'HR', 'Termination effective immediately', 'Bob Wilson'],
            ['EMP007', 'Robert Taylor', 'Sales', '', 'Carol White'],
            ['EMP008', 'Emily Clark', 'Finance', 'Change in employee status', 'Alice Cooper'],
            ['EMP009', 'James Lewis', 'Marketing', 'End of contract', 'Tom Jones'],
            ['EMP010', 'Jennifer Miller', 'IT', 'Review pending for employee', 'Jane Doe'],
        ],
    ),
    'Contractors': (
        ['Contractor ID', 'Contractor Name', 'Project', 'Delegate Comments', 'Start Date'],
        [
            ['CON001', 'Alex Rodriguez', 'Project Alpha', 'Adding additional resource to the team', '2024-01-15'],
            ['CON002', 'Maria Garcia', 'Project Beta', 'Update contact information', '2024-02-01'],
            ['CON003', 'Thomas Kim', 'Project Gamma', 'Contract conclusion', '2024-03-10'],
            ['CON004', 'Sophie Turner', 'Project Delta', '', '2024-01-20'],
            ['CON005', 'Chris Evans', 'Project Echo', 'Fresh recruit for the position', '2024-02-15'],
        ],
    ),
    'Interns': (
        ['Intern ID', 'Intern Name', 'University', 'Mentor'],
        [
            ['INT001', 'Sam Parker', 'MIT', 'John Smith'],
            ['INT002', 'Rachel Green', 'Stanford', 'Mary Johnson'],
            ['INT003', 'Kevin Scott', 'Harvard', 'David Brown'],
        ],
    ),
}


def write_sample_workbook(path) -> Path:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with pd.ExcelWriter(path, engine='openpyxl') as writer:
            for name, (header, rows) in SAMPLE_SHEETS.items():
                pd.DataFrame(rows, columns=header).to_excel(writer, sheet_name=name, index=False)
    except OSError as e:
        raise IOFailure(f"Could not write sample workbook {path}: {e}") from e
    return path
