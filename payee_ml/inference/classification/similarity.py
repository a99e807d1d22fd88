"""Jaro-Winkler string similarity."""

_PREFIX_SCALE = 0.1
_MAX_PREFIX = 4


def jaro(a: str, b: str) -> float:
    """Jaro similarity in [0, 1]."""
    if a == b:
        return 1.0
    len_a, len_b = len(a), len(b)
    if len_a == 0 or len_b == 0:
        return 0.0

    window = max(0, max(len_a, len_b) // 2 - 1)
    matched_a = [False] * len_a
    matched_b = [False] * len_b

    matches = 0
    for i, ch in enumerate(a):
        lo = max(0, i - window)
        hi = min(i + window + 1, len_b)
        for j in range(lo, hi):
            if not matched_b[j] and b[j] == ch:
                matched_a[i] = matched_b[j] = True
                matches += 1
                break

    if matches == 0:
        return 0.0

    # Matched characters appearing in a different order
    out_of_order = 0
    j = 0
    for i in range(len_a):
        if not matched_a[i]:
            continue
        while not matched_b[j]:
            j += 1
        if a[i] != b[j]:
            out_of_order += 1
        j += 1

    return (
        matches / len_a
        + matches / len_b
        + (matches - out_of_order / 2) / matches
    ) / 3


def jaro_winkler(a: str, b: str) -> float:
    """Jaro-Winkler similarity in [0, 1].

    The pair is put in a fixed order first so the score is exactly symmetric.
    The prefix boost applies at every Jaro level.
    """
    if a == b:
        return 1.0
    if b < a:
        a, b = b, a

    score = jaro(a, b)
    prefix = 0
    for ca, cb in zip(a[:_MAX_PREFIX], b[:_MAX_PREFIX]):
        if ca != cb:
            break
        prefix += 1

    return min(1.0, score + prefix * _PREFIX_SCALE * (1 - score))


similarity = jaro_winkler
