"""Shared fixtures.

- fixed NumPy seed
- backend and kernel toggles restored after every test
"""

from __future__ import annotations

from typing import Iterator

import numpy as np
import pytest

import percept_batch
import percept_dispatch
import percept_vector


@pytest.fixture(scope="session", autouse=True)
def np_seed() -> None:
    """Fix NumPy's global random state."""
    np.random.seed(12345)


@pytest.fixture()
def rng() -> np.random.Generator:
    return np.random.default_rng(12345)


@pytest.fixture(autouse=True)
def restore_toggles() -> Iterator[None]:
    yield
    percept_vector.simd_available.cache_clear()
    percept_dispatch.set_backend("auto")
    percept_batch.set_strict_ieee(False)


@pytest.fixture()
def force_simd(monkeypatch: pytest.MonkeyPatch) -> None:
    """Pretend the host has 4-lane SIMD so the vector path is taken."""
    monkeypatch.setattr(percept_vector, "simd_available", lambda: True)


@pytest.fixture()
def no_simd(monkeypatch: pytest.MonkeyPatch) -> None:
    """Pretend the host has no 4-lane SIMD."""
    monkeypatch.setattr(percept_vector, "simd_available", lambda: False)


@pytest.fixture()
def rgb_samples(rng: np.random.Generator) -> np.ndarray:
    """10,000 random 8-bit triples."""
    return rng.integers(0, 256, size=(10_000, 3), dtype=np.uint8)
