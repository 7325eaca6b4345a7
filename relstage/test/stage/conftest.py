from __future__ import annotations

import pytest

from relstage.test.stage.fakes import FakeStageImpl


@pytest.fixture
def impl() -> FakeStageImpl:
    return FakeStageImpl()
