import numpy as np
import pytest

from reelmatch.similarity import cosine_similarity


def test_identical_and_opposite_vectors():
    v = [0.3, 1.0, 2.5, 0.0]

    assert cosine_similarity(v, v) == pytest.approx(1.0)
    assert cosine_similarity(v, [-x for x in v]) == pytest.approx(-1.0)


def test_orthogonal_vectors_score_zero():
    assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.0)


def test_zero_vector_and_length_mismatch_degrade_to_zero():
    assert cosine_similarity([0, 0, 0], [1, 2, 3]) == 0.0
    assert cosine_similarity([1, 2, 3], [0, 0, 0]) == 0.0
    assert cosine_similarity([1, 2], [1, 2, 3]) == 0.0
    assert cosine_similarity([], []) == 0.0


def test_accepts_numpy_arrays_and_returns_python_float():
    result = cosine_similarity(np.array([1.0, 1.0]), np.array([1.0, 0.0]))

    assert isinstance(result, float)
    assert result == pytest.approx(1 / np.sqrt(2))
