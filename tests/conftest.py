from datetime import datetime, timezone

import pytest

from compass_quiz.catalog import CatalogStore
from compass_quiz.interfaces import LeadSink

# Every session test runs "today" = 2026-10-19 (UTC).
FIXED_NOW = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


class RecordingSink(LeadSink):
    """LeadSink that keeps every payload it is given."""

    def __init__(self) -> None:
        self.payloads = []

    async def save(self, payload) -> None:
        self.payloads.append(payload)


@pytest.fixture(scope="session")
def catalog():
    """Load the real v1 catalog once for the whole test session."""
    return CatalogStore().load()


@pytest.fixture
def sink():
    return RecordingSink()
