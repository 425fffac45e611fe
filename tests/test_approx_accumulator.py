import numpy as np
import pytest

from sparseodom.approx_accumulator import AccumulatorApprox


X = np.arange(10, dtype=np.float32) - 3
Y = np.arange(10, dtype=np.float32)[::-1] - 5


def test_update_sse_matches_weighted_quadratic_form():
    acc = AccumulatorApprox()
    acc.update_sse(X, Y, 2.0, 1.0, 3.0)
    h = acc.finish()
    stacked = np.column_stack([X, Y])
    weight = np.array([[2.0, 1.0], [1.0, 3.0]])
    np.testing.assert_allclose(h[:10, :10], stacked @ weight @ stacked.T)
    assert not h[10:, :].any()


def test_update_equals_update_sse_on_split_vectors():
    a = AccumulatorApprox()
    b = AccumulatorApprox()
    a.update(X[:4], X[4:], Y[:4], Y[4:], 1.5, -0.5, 2.0)
    b.update_sse(X, Y, 1.5, -0.5, 2.0)
    np.testing.assert_array_equal(a.finish(), b.finish())
    assert a.num == b.num == 1


def test_top_right_block_placement():
    acc = AccumulatorApprox()
    x4 = [1, 0, 0, 0]
    zeros4 = [0, 0, 0, 0]
    zeros6 = [0] * 6
    acc.update_top_right(x4, zeros6, zeros4, zeros6, 5, 0, 7, 0, 9, 0)
    h = acc.finish()
    assert h[0, 10] == 5 and h[0, 11] == 7 and h[0, 12] == 9
    np.testing.assert_array_equal(h[10:, :10], h[:10, 10:].T)
    assert not h[1:10, 10:].any()


def test_bottom_right_block_is_symmetric_copy():
    acc = AccumulatorApprox()
    acc.update_bot_right(1, 2, 3, 4, 5, 6)
    acc.update_bot_right(1, 2, 3, 4, 5, 6)
    h = acc.finish()
    expected = 2 * np.array([[1, 2, 3], [2, 4, 5], [3, 5, 6]], dtype=np.float32)
    np.testing.assert_array_equal(h[10:, 10:], expected)
    assert acc.num == 0


def test_result_is_symmetric():
    acc = AccumulatorApprox()
    acc.update_sse(X, Y, 1, 2, 3)
    acc.update_top_right(X[:4], X[4:], Y[:4], Y[4:], 1, 2, 3, 4, 5, 6)
    acc.update_bot_right(1, 2, 3, 4, 5, 6)
    h = acc.finish()
    np.testing.assert_array_equal(h, h.T)


def test_many_updates_shift_correctly():
    acc = AccumulatorApprox()
    ones = np.ones(10)
    zeros = np.zeros(10)
    count = 2300
    for _ in range(count):
        acc.update_sse(ones, zeros, 1, 0, 0)
        acc.update_bot_right(1, 0, 0, 0, 0, 0)
    h = acc.finish()
    assert np.all(h[:10, :10] == count)
    assert h[10, 10] == count
    assert acc.num == count


def test_initialize_clears_state():
    acc = AccumulatorApprox()
    acc.update_sse(X, Y, 1, 1, 1)
    acc.update_bot_right(1, 1, 1, 1, 1, 1)
    acc.initialize()
    assert not acc.finish().any()
    assert acc.num == 0


def test_wrong_lengths_raise():
    acc = AccumulatorApprox()
    with pytest.raises(ValueError):
        acc.update_sse(np.ones(9), np.ones(10), 1, 1, 1)
    with pytest.raises(ValueError):
        acc.update([1, 2, 3], np.ones(6), np.ones(4), np.ones(6), 1, 1, 1)
    with pytest.raises(ValueError):
        acc.update_top_right(np.ones(4), np.ones(5), np.ones(4), np.ones(6), 1, 1, 1, 1, 1, 1)