import random
import sys
from pathlib import Path

import pytest

# Make 'src' importable when the package is not installed
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

DELVE_ENV_VARS = (
    "DELVE_WIDTH",
    "DELVE_HEIGHT",
    "DELVE_CARVER",
    "DELVE_SEED",
    "DELVE_MAX_ATTEMPTS",
    "DELVE_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_delve_env(monkeypatch):
    """Keep a developer's DELVE_* shell settings out of the tests."""
    for key in DELVE_ENV_VARS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def seeded_rng():
    """Factory for independent, seeded random sources."""
    return lambda seed=1234: random.Random(seed)
