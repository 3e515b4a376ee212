import pandas as pd
import pytest

from comment_categorizer.categories import PREDICTED_COLUMN
from comment_categorizer.context import ClassifierContext
from comment_categorizer.errors import IOFailure
from comment_categorizer.pipeline import Pipeline
from comment_categorizer.workbook import ExcelSink, read_table, sheet_title, write_sample_workbook


@pytest.fixture
def sample_workbook(tmp_path):
    return write_sample_workbook(tmp_path / "sample_input.xlsx")


def _read_output(path):
    return pd.read_excel(path, sheet_name=None, header=None, dtype=object)


class TestReadTable:

    def test_reads_every_sheet(self, sample_workbook):
        sheets = read_table(sample_workbook)
        assert [s.name for s in sheets] == ["Employees", "Contractors", "Interns"]
        assert sheets[0].header[3] == "Delegate Comments"
        assert len(sheets[0].rows) == 10
        assert sheets[2].header == ["Intern ID", "Intern Name", "University", "Mentor"]

    def test_empty_cells_become_none(self, sample_workbook):
        employees = read_table(sample_workbook)[0]
        assert not employees.rows[6][3]

    def test_csv_single_sheet(self, tmp_path):
        path = tmp_path / "comments.csv"
        path.write_text("Id,Note,note\n1,leaving,x\n2,,y\n", encoding="utf-8")
        (sheet,) = read_table(path)
        assert sheet.name == "comments"
        assert sheet.header == ["Id", "Note", "note"]
        assert sheet.rows == [["1", "leaving", "x"], ["2", None, "y"]]

    def test_empty_csv(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")
        (sheet,) = read_table(path)
        assert sheet.header == [] and sheet.rows == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(IOFailure, match="not found"):
            read_table(tmp_path / "nope.xlsx")

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "broken.xlsx"
        path.write_bytes(b"not a workbook")
        with pytest.raises(IOFailure, match="Could not read"):
            read_table(path)


class TestExcelSink:

    def test_one_workbook_per_category(self, tmp_path):
        sink = ExcelSink(tmp_path / "out", "batch")
        sink.write_table("Add", "Employees", ["Id", PREDICTED_COLUMN], [["E1", "Add"]])
        sink.write_table("add", "Contractors", ["Id", PREDICTED_COLUMN], [["C1", "Add"], ["C2", "Add"]])
        sink.write_table("Term", "Employees", ["Id", PREDICTED_COLUMN], [["E2", "Term"]])

        add = _read_output(tmp_path / "out" / "batch_Add.xlsx")
        assert list(add) == ["Employees", "Contractors"]
        assert add["Contractors"].values.tolist() == [["Id", PREDICTED_COLUMN], ["C1", "Add"], ["C2", "Add"]]
        term = _read_output(tmp_path / "out" / "batch_Term.xlsx")
        assert list(term) == ["Employees"]

    def test_first_write_replaces_stale_file(self, tmp_path):
        stale = ExcelSink(tmp_path, "run")
        stale.write_table("Add", "Old", ["Id"], [["x"]])
        fresh = ExcelSink(tmp_path, "run")
        fresh.write_table("Add", "New", ["Id"], [["y"]])
        assert list(_read_output(tmp_path / "run_Add.xlsx")) == ["New"]

    def test_write_failure_has_context(self, tmp_path):
        blocker = tmp_path / "blocked"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        sink = ExcelSink(blocker, "run")
        with pytest.raises(IOFailure) as excinfo:
            sink.write_table("Update", "Employees", ["Id"], [["x"]])
        assert excinfo.value.category == "Update"
        assert excinfo.value.sheet == "Employees"

    def test_sheet_title(self):
        assert sheet_title("a/b:c") == "a_b_c"
        assert len(sheet_title("x" * 40)) == 31
        assert sheet_title("") == "Sheet"


class TestEndToEnd:

    def test_sample_workbook_split(self, sample_workbook, tmp_path):
        sheets = read_table(sample_workbook)
        sink = ExcelSink(tmp_path / "out", "sample")
        result = Pipeline(ClassifierContext.rules(), sink=sink).run(sheets)

        assert result.ok
        assert sorted(p.name for p in result.written) == [
            "sample_Add.xlsx", "sample_Other.xlsx", "sample_Term.xlsx", "sample_Update.xlsx",
        ]
        assert result.counts() == {"Add": 9, "Update": 3, "Term": 4, "Other": 2}

        add = _read_output(tmp_path / "out" / "sample_Add.xlsx")
        assert list(add) == ["Employees", "Contractors", "Interns"]
        interns = add["Interns"].values.tolist()
        assert interns[0] == ["Intern ID", "Intern Name", "University", "Mentor", PREDICTED_COLUMN]
        assert [row[0] for row in interns[1:]] == ["INT001", "INT002", "INT003"]
        assert all(row[-1] == "Add" for row in interns[1:])

        other = _read_output(tmp_path / "out" / "sample_Other.xlsx")
        assert list(other) == ["Employees"]
        assert [row[0] for row in other["Employees"].values.tolist()[1:]] == ["EMP004", "EMP010"]


class TestHeaderPassThrough:

    def test_whitespace_header_reaches_sink_unchanged(self, tmp_path):
        path = tmp_path / "padded.csv"
        path.write_text(" Id ,Delegate Comments\n1,leaving\n", encoding="utf-8")
        (sheet,) = read_table(path)
        assert sheet.header == [" Id ", "Delegate Comments"]

        sink = ExcelSink(tmp_path / "out", "padded")
        result = Pipeline(ClassifierContext.rules(), sink=sink).run([sheet])
        assert result.tables[("Term", "padded")].header == [" Id ", "Delegate Comments", PREDICTED_COLUMN]

        written = _read_output(tmp_path / "out" / "padded_Term.xlsx")["padded"].values.tolist()
        assert written[0] == [" Id ", "Delegate Comments", PREDICTED_COLUMN]
        assert written[1] == ["1", "leaving", "Term"]
