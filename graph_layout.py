# graph_layout.py

import logging
from typing import Iterable

from graph_layout_data import ChangeId, GraphEntry, GraphLayout, RowLayout

# Marks "no next row" for the last entry; never equal to a real id
_NO_ROW = object()


def _first_free_lane(occupied) -> int:
    """Lowest non-negative integer not in `occupied`."""
    lane = 0
    while lane in occupied:
        lane += 1
    return lane


class LayoutCalculator:
    def calculate(self, entries: Iterable[GraphEntry]) -> GraphLayout:
        """
        Assigns a lane to every entry and to every connection between an entry and its parents.

        `entries` must already be in display order, children before their ancestors
        (newest first, as `git log --topo-order` prints them). Nothing is reordered or validated.

        A single top-down pass keeps the set of in-flight connections ("reservations"),
        lane -> target id. Each lane is held by at most one reservation at a time.
        For every row:
          1. reservations aimed elsewhere cross the row and stay in flight;
          2. reservations aimed at the row are consumed; the row lands in the lowest of
             their lanes, or in the lowest free lane when nothing points at it;
          3. the first parent continues in the row's own lane, every later parent gets
             the lowest lane free at that moment; all of them become reservations.
        Parents that never show up in `entries` keep their lane until the end of the pass.
        """
        entries = list(entries)
        reservations: dict[int, ChangeId] = {}
        rows: list[RowLayout] = []

        for index, entry in enumerate(entries):
            next_id = entries[index + 1].current if index + 1 < len(entries) else _NO_ROW

            crossing_lanes: dict[int, ChangeId] = {}
            child_lanes: list[int] = []
            for reserved_lane in sorted(reservations):
                target = reservations[reserved_lane]
                if target == entry.current:
                    child_lanes.append(reserved_lane)
                else:
                    crossing_lanes[reserved_lane] = target

            for reserved_lane in child_lanes:
                del reservations[reserved_lane]

            if child_lanes:
                lane = child_lanes[0]
            else:
                # Branch tip: nothing above points here
                lane = _first_free_lane(reservations)

            claimed = {lane}
            parent_lanes: list[int] = []
            passthrough_lanes: dict[ChangeId, int] = {}
            for parent_index, parent_id in enumerate(entry.parents):
                if parent_index == 0:
                    parent_lane = lane
                else:
                    parent_lane = _first_free_lane(claimed.union(reservations))
                    claimed.add(parent_lane)
                parent_lanes.append(parent_lane)
                # The next row consumes this right away when it is the parent
                reservations[parent_lane] = parent_id
                if parent_id != next_id:
                    passthrough_lanes.setdefault(parent_id, parent_lane)

            rows.append(
                RowLayout(
                    change_id=entry.current,
                    lane=lane,
                    child_lanes=child_lanes,
                    parent_lanes=parent_lanes,
                    passthrough_lanes=passthrough_lanes,
                    crossing_lanes=crossing_lanes,
                )
            )

        layout = GraphLayout(rows)
        logging.debug("Layout calculated: %d rows, %d lanes", len(rows), layout.lane_count)
        if reservations:
            logging.debug("%d connection(s) left without a target row: %s", len(reservations), sorted(reservations))
        return layout


def calculate_layout(entries: Iterable[GraphEntry]) -> GraphLayout:
    """Shortcut for `LayoutCalculator().calculate(entries)`."""
    return LayoutCalculator().calculate(entries)


def find_contract_violations(entries: Iterable[GraphEntry]) -> list[str]:
    """
    Lists input problems the calculator tolerates without complaint.

    Reports duplicate ids, parents listed at the same or an earlier position than their
    child, and parents repeated on one entry. Never raises.
    """
    entries = list(entries)
    problems: list[str] = []
    first_position: dict[ChangeId, int] = {}

    for index, entry in enumerate(entries):
        if entry.current in first_position:
            problems.append(
                f"row {index}: duplicate id {entry.current!r} (first seen at row {first_position[entry.current]})"
            )
        else:
            first_position[entry.current] = index

    for index, entry in enumerate(entries):
        seen_parents = set()
        for parent_id in entry.parents:
            if parent_id in seen_parents:
                problems.append(f"row {index}: parent {parent_id!r} of {entry.current!r} is listed more than once")
                continue
            seen_parents.add(parent_id)
            parent_position = first_position.get(parent_id)
            if parent_position is not None and parent_position <= index:
                problems.append(
                    f"row {index}: parent {parent_id!r} of {entry.current!r} appears at row {parent_position}, "
                    "not below its child"
                )

    return problems
