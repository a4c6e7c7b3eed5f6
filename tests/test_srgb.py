from __future__ import annotations

import numpy as np
import pytest

from percept_srgb import SRGB_LOOKUP, gamma_encode, linearize, linearize_channel


def test_table_matches_formula_for_every_byte() -> None:
    expected = np.array([linearize_channel(c) for c in range(256)])
    np.testing.assert_array_equal(SRGB_LOOKUP, expected)


def test_table_endpoints() -> None:
    assert SRGB_LOOKUP.shape == (256,)
    assert SRGB_LOOKUP[0] == 0.0
    assert SRGB_LOOKUP[255] == pytest.approx(1.0, abs=1e-15)


def test_linear_segment_below_threshold() -> None:
    # 10 / 255 is below the 0.04045 breakpoint
    assert linearize(10) == pytest.approx((10 / 255.0) / 12.92, abs=1e-15)


def test_table_is_monotonic() -> None:
    assert np.all(np.diff(SRGB_LOOKUP) > 0)


def test_table_is_read_only() -> None:
    with pytest.raises(ValueError):
        SRGB_LOOKUP[0] = 1.0


def test_gamma_encode_round_trip_all_bytes() -> None:
    for c in range(256):
        assert gamma_encode(linearize(c)) == c


def test_gamma_encode_clamps() -> None:
    assert gamma_encode(-0.5) == 0
    assert gamma_encode(2.0) == 255
