from pathlib import Path
import pytest
import yaml

from comment_categorizer.context import ClassifierContext
from comment_categorizer.models import Sheet
from comment_categorizer.model import load_training_data


ROOT = Path(__file__).parent.parent

COLUMN_ALIASES = {"delegate_comments": "free_text"}


def _apply_test_aliases(config):
    if "columns" in config:
        for old, new in COLUMN_ALIASES.items():
            if old in config["columns"] and new not in config["columns"]:
                config["columns"][new] = config["columns"].pop(old)
    return config


def pytest_addoption(parser):
    parser.addoption(
        "--client-dir",
        default=str(ROOT / "clients" / "example"),
        help="Path to client directory containing config.yaml and its rule files",
    )


@pytest.fixture(scope="session")
def client_dir(request):
    return Path(request.config.getoption("--client-dir")).resolve()


@pytest.fixture(scope="session")
def client_config(client_dir):
    config_path = client_dir / "config.yaml"
    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)
    return _apply_test_aliases(config)


@pytest.fixture(scope="session")
def keyword_rules(client_dir, client_config):
    rel = client_config["paths"].get("keyword_rules")
    if not rel:
        pytest.skip("Client has no keyword_rules file")
    with open(client_dir / rel, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


@pytest.fixture(scope="session")
def training_examples(client_dir, client_config):
    rel = client_config["paths"].get("training_data")
    if not rel:
        pytest.skip("Client has no training data")
    return load_training_data(client_dir / rel)


@pytest.fixture(scope="session")
def test_assertions(client_dir):
    path = client_dir / "test_assertions.yaml"
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


@pytest.fixture
def rules_context():
    return ClassifierContext.rules()


@pytest.fixture
def employees_sheet():
    return Sheet(
        "Employees",
        ["Employee ID", "Employee Name", "Delegate Comments", "Manager"],
        [
            ["EMP001", "John Smith", "New employee starting next month", "Jane Doe"],
            ["EMP002", "Mary Johnson", "Employee information needs updating", "Bob Wilson"],
            ["EMP003", "David Brown", "Employee is leaving the company", "Alice Cooper"],
            ["EMP004", "Sarah Davis", "General inquiry about employee", "Tom Jones"],
            ["EMP005", "Robert Taylor", "", "Carol White"],
            ["EMP006", "Emily Clark", "Change in employee status", "Alice Cooper"],
        ],
    )


@pytest.fixture
def interns_sheet():
    return Sheet(
        "Interns",
        ["Intern ID", "Intern Name", "University", "Mentor"],
        [
            ["INT001", "Sam Parker", "MIT", "John Smith"],
            ["INT002", "Rachel Green", "Stanford", "Mary Johnson"],
            ["INT003", "Kevin Scott", "Harvard", "David Brown"],
        ],
    )


@pytest.fixture
def split_sheet():
    """Ten rows split 4/2/2/2 across Add/Update/Term/Other."""
    comments = [
        "New hire for the data team",
        "Onboard next week",
        "",
        "Joining from the graduate program",
        "Update bank details",
        "Correction to job title",
        "Resigned last Friday",
        "Layoff notice issued",
        "Pending approval",
        "Administrative hold",
    ]
    return Sheet(
        "Split",
        ["Id", "Delegate Comments", "Notes"],
        [[f"ID{i:02d}", text, f"note {i}"] for i, text in enumerate(comments, start=1)],
    )
