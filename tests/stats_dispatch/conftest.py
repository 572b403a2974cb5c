from __future__ import annotations

import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def three_group_frame() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "group": ["g1"] * 5 + ["g2"] * 5 + ["g3"] * 5,
            "score": [19, 22, 21, 25, 20, 18, 27, 28, 22, 20, 23, 26, 18, 24, 19],
        }
    )


@pytest.fixture
def two_group_frame() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "arm": ["A"] * 6 + ["B"] * 6,
            "score": [10.1, 11.4, 9.8, 12.0, 10.7, 11.1, 13.2, 14.8, 12.9, 15.1, 13.7, 14.3],
        }
    )


@pytest.fixture
def normal_frame() -> pd.DataFrame:
    rng = np.random.default_rng(11)
    return pd.DataFrame({"height": rng.normal(170.0, 8.0, size=200)})
