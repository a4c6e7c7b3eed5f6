import math

import numpy as np
import pytest

hypothesis = pytest.importorskip("hypothesis", reason="hypothesis is a test optional dependency")
from hypothesis import given, settings, strategies as st  # type: ignore

from percept_batch import AppearanceEngine
from percept_constants import JabSpace
from percept_engine import Jab, JCh
from percept_metrics import squared_difference
from percept_srgb import gamma_encode, linearize

byte = st.integers(0, 255)
rgb = st.tuples(byte, byte, byte)
space = st.sampled_from(list(JabSpace))


@given(c=byte)
def test_gamma_round_trip(c):
    assert abs(gamma_encode(linearize(c)) - c) <= 1


@given(rgb=rgb, space=space)
def test_jab_is_finite_and_self_distance_zero(rgb, space):
    jab = Jab.from_rgb(rgb, space)
    assert all(math.isfinite(v) for v in jab.as_tuple())
    assert squared_difference(jab, jab) == 0.0


@given(rgb=rgb)
def test_correlate_ranges(rgb):
    jch = JCh.from_rgb(rgb)
    assert 0.0 <= jch.h < 360.0
    assert 0.0 <= jch.H < 400.0
    assert jch.J >= 0.0 and jch.C >= 0.0 and jch.s >= 0.0


@given(a=rgb, b=rgb)
def test_distance_symmetric_and_non_negative(a, b):
    x, y = Jab.from_rgb(a), Jab.from_rgb(b)
    d = squared_difference(x, y)
    assert d >= 0.0
    assert d == squared_difference(y, x)


@settings(max_examples=25, deadline=None)
@given(rgb=rgb)
def test_batch_single_pixel_matches_scalar(rgb):
    got = AppearanceEngine.srgb_to_jab(np.array(rgb))
    np.testing.assert_allclose(got, Jab.from_rgb(rgb).as_tuple(), rtol=1e-7, atol=1e-7)
