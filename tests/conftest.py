import sys
from pathlib import Path

import pytest

# Ensure the project src directory is on sys.path for test imports
PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_PATH = PROJECT_ROOT / "src"
if SRC_PATH not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

DATA_DIR = Path(__file__).resolve().parent / "data"

from family_xref.config import reset_config  # noqa: E402
from family_xref.normalization.name_equivalence import NameEquivalenceIndex  # noqa: E402
from family_xref.sources.record_store import RecordStore  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def records_path() -> Path:
    return DATA_DIR / "records.json"


@pytest.fixture
def record_store(records_path) -> RecordStore:
    return RecordStore.from_file(records_path)


@pytest.fixture
def equivalences() -> NameEquivalenceIndex:
    # In-memory index seeded with the default pairs
    return NameEquivalenceIndex()
