import numpy as np
import pytest

from sparseodom.accumulator9 import Accumulator9


@pytest.fixture
def rng():
    return np.random.default_rng(7)


def test_update_sse_gives_outer_sum(rng):
    jac = rng.standard_normal((9, 4)).astype(np.float32)
    acc = Accumulator9()
    acc.update_sse(jac)
    h = acc.finish()
    np.testing.assert_allclose(h, jac @ jac.T, rtol=1e-5, atol=1e-5)
    assert acc.num == 4


def test_result_is_symmetric(rng):
    acc = Accumulator9()
    for _ in range(5):
        acc.update_sse(rng.standard_normal((9, 4)))
    h = acc.finish()
    np.testing.assert_array_equal(h, h.T)


def test_update_sse_weighted(rng):
    jac = rng.standard_normal((9, 4)).astype(np.float32)
    w = np.array([1.0, 0.5, 2.0, 0.0], dtype=np.float32)
    acc = Accumulator9()
    acc.update_sse_weighted(jac, w)
    h = acc.finish()
    np.testing.assert_allclose(h, (jac * w) @ jac.T, rtol=1e-5, atol=1e-5)


def test_update_single_matches_outer_product(rng):
    vec = rng.standard_normal(9).astype(np.float32)
    acc = Accumulator9()
    acc.update_single(vec, lane=2)
    h = acc.finish()
    np.testing.assert_allclose(h, np.outer(vec, vec), rtol=1e-5, atol=1e-6)
    assert acc.num == 1


def test_update_single_weighted(rng):
    vec = rng.standard_normal(9).astype(np.float32)
    acc = Accumulator9()
    acc.update_single_weighted(vec, 3.0, lane=1)
    h = acc.finish()
    np.testing.assert_allclose(h, 3.0 * np.outer(vec, vec), rtol=1e-5, atol=1e-5)


def test_single_and_sse_agree(rng):
    jac = rng.standard_normal((9, 4)).astype(np.float32)
    a = Accumulator9()
    a.update_sse(jac)
    b = Accumulator9()
    for lane in range(4):
        b.update_single(jac[:, lane], lane=lane)
    np.testing.assert_allclose(a.finish(), b.finish(), rtol=1e-5, atol=1e-5)


def test_many_updates_cross_shift_tiers():
    vec = np.arange(1, 10, dtype=np.float32) / 10
    acc = Accumulator9()
    for _ in range(2500):
        acc.update_single(vec)
    h = acc.finish()
    np.testing.assert_allclose(h, 2500 * np.outer(vec, vec), rtol=1e-4)
    assert acc.num == 2500


def test_initialize_resets(rng):
    acc = Accumulator9()
    acc.update_sse(rng.standard_normal((9, 4)))
    acc.initialize()
    h = acc.finish()
    assert not h.any()
    assert acc.num == 0


def test_bad_shapes_rejected():
    acc = Accumulator9()
    with pytest.raises(ValueError):
        acc.update_sse(np.zeros((8, 4)))
    with pytest.raises(ValueError):
        acc.update_sse_weighted(np.zeros((9, 4)), [1.0, 2.0])
    with pytest.raises(ValueError):
        acc.update_single(np.zeros(10))


def test_bad_lane_rejected():
    acc = Accumulator9()
    with pytest.raises(ValueError):
        acc.update_single(np.zeros(9), lane=4)
    with pytest.raises(ValueError):
        acc.update_single_weighted(np.zeros(9), 1.0, lane=-1)