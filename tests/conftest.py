import sys
from pathlib import Path

import pytest

# Ensure the repository root is importable so `models.*` and `recommender.*` resolve
_ROOT_DIR = Path(__file__).resolve().parents[1]
if str(_ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(_ROOT_DIR))

from recommender.settings import Settings  # noqa: E402
from tests.utils.factories import (  # noqa: E402
    DATES_SPEC,
    MONTHLY_SPEC,
    RANGE_SPEC,
    WEEKLY_SPEC,
    make_catalog,
)


@pytest.fixture()
def dates_spec() -> dict:
    return DATES_SPEC


@pytest.fixture()
def range_spec() -> dict:
    return RANGE_SPEC


@pytest.fixture()
def weekly_spec() -> dict:
    return WEEKLY_SPEC


@pytest.fixture()
def monthly_spec() -> dict:
    return MONTHLY_SPEC


@pytest.fixture()
def settings(monkeypatch) -> Settings:
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.setenv("RECOMMENDER_WINDOW_DAYS", "7")
    monkeypatch.setenv("RECOMMENDER_MIN_PARTICIPANTS", "2")
    monkeypatch.setenv("RECOMMENDER_DEFAULT_PAGE_SIZE", "10")
    return Settings()


@pytest.fixture()
def catalog():
    return make_catalog()
