# pointlabel/core/spatial_index.py
"""
Incremental R-tree over placed labels (padded rectangles).
Owned by one placement pass; built fresh for every pass.
"""

from __future__ import annotations

from rtree import index as rtree_index

from pointlabel.core.config import LABEL_PADDING_PX
from pointlabel.core.geometry import Bounds, padded_bounds
from pointlabel.core.types import IndexEntry, LabelBox


def to_index_entry(label: LabelBox, pad: float = LABEL_PADDING_PX) -> IndexEntry:
    """Padded rectangle keyed back to its label."""
    min_x, min_y, max_x, max_y = padded_bounds(label.x, label.y, label.width, label.height, pad)
    return IndexEntry(min_x=min_x, min_y=min_y, max_x=max_x, max_y=max_y, label=label)


class LabelIndex:
    """Placed-label index answering 'which padded boxes touch this rectangle'."""

    def __init__(self, pad: float = LABEL_PADDING_PX) -> None:
        self._pad = pad
        self._tree = rtree_index.Index()
        self._entries: list[IndexEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def insert(self, label: LabelBox) -> IndexEntry:
        entry = to_index_entry(label, self._pad)
        self._tree.insert(len(self._entries), entry.bounds)
        self._entries.append(entry)
        return entry

    def query(self, bounds: Bounds) -> list[IndexEntry]:
        """Entries whose padded rectangle intersects bounds (touching counts), in insertion order."""
        if not self._entries:
            return []
        ids = sorted(self._tree.intersection(bounds))
        return [self._entries[i] for i in ids]

    def count(self, bounds: Bounds) -> int:
        if not self._entries:
            return 0
        return self._tree.count(bounds)
