# graph_layout_data.py

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Hashable, Iterator, Mapping

# Any hashable value works as an id: change ids, commit shas, test labels.
ChangeId = Hashable


@dataclass(frozen=True)
class GraphEntry:
    """One row of input: a change and its parents, first parent first."""

    current: ChangeId
    parents: tuple = ()

    def __post_init__(self):
        # Accept lists from callers but keep the record immutable
        if not isinstance(self.parents, tuple):
            object.__setattr__(self, "parents", tuple(self.parents))


@dataclass(frozen=True)
class RowLayout:
    change_id: ChangeId
    lane: int
    # Lanes of connections from earlier rows that end at this row
    child_lanes: tuple = ()
    # One lane per parent, in parent order
    parent_lanes: tuple = ()
    # Connections started here that skip at least one row (parent id -> lane)
    passthrough_lanes: Mapping = field(default_factory=dict)
    # Connections from earlier rows crossing this row (lane -> target id)
    crossing_lanes: Mapping = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "child_lanes", tuple(self.child_lanes))
        object.__setattr__(self, "parent_lanes", tuple(self.parent_lanes))
        # Read-only views over private copies
        object.__setattr__(self, "passthrough_lanes", MappingProxyType(dict(self.passthrough_lanes)))
        object.__setattr__(self, "crossing_lanes", MappingProxyType(dict(self.crossing_lanes)))

    def __hash__(self) -> int:
        return hash(
            (
                self.change_id,
                self.lane,
                self.child_lanes,
                self.parent_lanes,
                frozenset(self.passthrough_lanes.items()),
                frozenset(self.crossing_lanes.items()),
            )
        )


@dataclass(frozen=True)
class GraphLayout:
    rows: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "rows", tuple(self.rows))

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[RowLayout]:
        return iter(self.rows)

    def __getitem__(self, index) -> RowLayout:
        return self.rows[index]

    @property
    def lane_count(self) -> int:
        """Number of columns needed to draw every row of the layout."""
        highest = -1
        for row in self.rows:
            highest = max(highest, row.lane, *row.parent_lanes, *row.crossing_lanes)
        return highest + 1
