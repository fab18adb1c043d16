from __future__ import annotations

import numpy as np
import pytest


@pytest.fixture
def blank_image() -> np.ndarray:
    return np.zeros((100, 100, 3), dtype=np.uint8)
