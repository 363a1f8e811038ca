"""
Pure utility functions for canvas logic.

These functions have no side effects and can be tested in isolation.
"""

import math
import re
import unicodedata
from typing import List, Optional, Sequence, Tuple

import numpy as np

_LABEL_INVALID = re.compile(r"[^A-Z0-9]")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def format_label(raw: str, max_length: int = 4) -> str:
    """
    Normalize a point label.

    Full-width characters are folded to ASCII, the result is upper-cased,
    anything that is not a letter or digit is dropped and the label is
    truncated to ``max_length``.

    Args:
        raw: Text as typed by the user
        max_length: Maximum label length

    Returns:
        Formatted label (may be empty)
    """
    if raw is None:
        return ""
    text = unicodedata.normalize("NFKC", raw).strip().upper()
    text = _LABEL_INVALID.sub("", text)
    return text[:max_length]


def find_duplicate_labels(labels: Sequence[str]) -> List[str]:
    """
    Find labels used more than once.

    Empty labels are ignored. Each duplicate is reported once, in the
    order in which its second occurrence appears.
    """
    counts = {}
    duplicates = []
    for label in labels:
        if not label or not label.strip():
            continue
        key = label.strip()
        counts[key] = counts.get(key, 0) + 1
        if counts[key] == 2:
            duplicates.append(key)
    return duplicates


def has_duplicate_label(labels: Sequence[str], label: str, own_index: int) -> bool:
    """Check whether ``label`` is used by any entry other than ``own_index``."""
    if not label:
        return False
    return any(other == label and i != own_index for i, other in enumerate(labels))


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    """Euclidean distance between two positions."""
    return math.hypot(x1 - x2, y1 - y2)


def find_first_within(
    coords: Sequence[Tuple[float, float]], x: float, y: float, radius: float
) -> int:
    """
    Find the first coordinate within ``radius`` of ``(x, y)``.

    The earliest entry wins, not the nearest one.

    Args:
        coords: Candidate (x, y) positions in insertion order
        x: Query X
        y: Query Y
        radius: Inclusive hit radius

    Returns:
        Index of the first hit, or -1
    """
    if len(coords) == 0:
        return -1
    arr = np.asarray(coords, dtype=np.float64)
    dists = np.hypot(arr[:, 0] - x, arr[:, 1] - y)
    hits = np.flatnonzero(dists <= radius)
    if len(hits) == 0:
        return -1
    return int(hits[0])


def polygon_centroid(coords: Sequence[Tuple[float, float]]) -> Optional[Tuple[float, float]]:
    """Mean of the vertex positions, or None for an empty polygon."""
    if len(coords) == 0:
        return None
    arr = np.asarray(coords, dtype=np.float64)
    cx, cy = arr.mean(axis=0)
    return float(cx), float(cy)


def angular_order(coords: Sequence[Tuple[float, float]]) -> List[int]:
    """
    Order vertices by angle around their centroid.

    Uses ascending ``atan2(y - cy, x - cx)``, which walks the polygon
    without self-intersections for any star-shaped outline. Ties keep
    their original order. Fewer than three vertices are returned as-is.

    Returns:
        Permutation of ``range(len(coords))``
    """
    n = len(coords)
    if n < 3:
        return list(range(n))
    arr = np.asarray(coords, dtype=np.float64)
    cx, cy = polygon_centroid(coords)
    angles = np.arctan2(arr[:, 1] - cy, arr[:, 0] - cx)
    return [int(i) for i in np.argsort(angles, kind="stable")]

