from datetime import datetime
from pathlib import Path

import pytest

from execwrap.domain.value_objects.wrapper_config import WrapperConfig
from tests.helpers import StepClock


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    path = tmp_path / "logs"
    path.mkdir()
    return path


@pytest.fixture
def config(log_dir: Path) -> WrapperConfig:
    return WrapperConfig(log_dir=log_dir, silent=True)


@pytest.fixture
def fixed_clock() -> StepClock:
    return StepClock(datetime(2025, 1, 6, 12, 30, 45))
