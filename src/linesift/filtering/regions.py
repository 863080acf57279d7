"""Match region algebra.

Pure functions on half-open ``(start, end)`` spans. Regex terms are
matched independently, so the raw spans of one line can repeat or
overlap; ``dedupe_matches`` folds them into the sorted, disjoint list
the renderer highlights.
"""


from collections.abc import Iterable

from linesift.pipeline.line import Span


def match_contains(a: Span, b: Span) -> bool:
    """True if ``a`` covers all of ``b``."""
    return a[0] <= b[0] and a[1] >= b[1]


def match_overlaps(a: Span, b: Span) -> bool:
    """True if either end of ``b`` lies within ``a`` (touching counts)."""
    return a[0] <= b[0] <= a[1] or a[0] <= b[1] <= a[1]


def merge_matches(a: Span, b: Span) -> Span:
    """Smallest span covering both."""
    return min(a[0], b[0]), max(a[1], b[1])


def sort_matches(matches: Iterable[Span]) -> list[Span]:
    """Order by start, longer span first on equal starts."""
    return sorted(matches, key=lambda m: (m[0], -(m[1] - m[0])))


def dedupe_matches(matches: Iterable[Span]) -> list[Span]:
    """Sort and merge spans so none of them overlap.

    Example:
        >>> dedupe_matches([(3, 8), (0, 5), (10, 12), (10, 11)])
        [(0, 8), (10, 12)]
    """
    deduped: list[Span] = []
    for m in sort_matches(matches):
        if not deduped:
            deduped.append(m)
            continue

        prev = deduped[-1]
        if match_contains(prev, m):
            continue
        if match_overlaps(prev, m):
            deduped[-1] = merge_matches(prev, m)
        else:
            deduped.append(m)
    return deduped
