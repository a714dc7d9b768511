"""Vector similarity primitive shared by the content and collaborative scorers."""

from typing import Sequence

import numpy as np


def cosine_similarity(vec_a: Sequence[float] | np.ndarray, vec_b: Sequence[float] | np.ndarray) -> float:
    """
    Cosine of the angle between two vectors.

    Returns 0.0 instead of raising when the vectors differ in length or
    either one has zero magnitude.
    """
    a = np.asarray(vec_a, dtype=np.float64)
    b = np.asarray(vec_b, dtype=np.float64)
    if a.shape != b.shape:
        return 0.0

    mag_a = np.sqrt(np.dot(a, a))
    mag_b = np.sqrt(np.dot(b, b))
    if mag_a == 0 or mag_b == 0:
        return 0.0
    return float(np.dot(a, b) / (mag_a * mag_b))
