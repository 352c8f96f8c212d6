from __future__ import annotations

import sys
from collections import Counter
from pathlib import Path
from typing import List

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

for entry in (BASE_DIR, SRC_DIR):
    if str(entry) not in sys.path:
        sys.path.append(str(entry))

_ENV_KEYS = ("JSWALK_LOG_LEVEL", "JSWALK_DEBUG_PY_TRACE")


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Tests start without the jswalk environment switches set."""
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def pytest_collection_modifyitems(
    session: pytest.Session,
    config: pytest.Config,
    items: List[pytest.Item],
) -> None:
    """Scenario tables are keyed by id; a repeated id would hide a case."""
    del session, config

    counts = Counter(item.nodeid for item in items)
    duplicates = sorted(nodeid for nodeid, n in counts.items() if n > 1)
    if duplicates:
        lines = "\n".join(f"- {nodeid}" for nodeid in duplicates)
        raise pytest.UsageError(f"Duplicate pytest nodeids detected during collection:\n{lines}")
