"""Vector helpers for the RavenDB store."""

import math


def cosine_similarity(vec_a: list[float], vec_b: list[float]) -> float:
    """Compute cosine similarity between two vectors.

    Returns 0.0 for empty, mismatched or zero-magnitude vectors.
    """
    if not vec_a or not vec_b or len(vec_a) != len(vec_b):
        return 0.0

    dot_product = sum(a * b for a, b in zip(vec_a, vec_b))
    magnitude_a = math.sqrt(sum(a * a for a in vec_a))
    magnitude_b = math.sqrt(sum(b * b for b in vec_b))

    if magnitude_a == 0 or magnitude_b == 0:
        return 0.0

    return dot_product / (magnitude_a * magnitude_b)


def check_dimensions(vector: list[float], expected: int) -> None:
    """Reject a vector whose length differs from the collection's dimension.

    Raises:
        ValueError: If len(vector) != expected
    """
    if len(vector) != expected:
        raise ValueError(
            f"Embedding has {len(vector)} dimensions, collection expects {expected}"
        )
