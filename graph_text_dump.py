# graph_text_dump.py

import json

from graph_layout_data import GraphLayout, RowLayout

NODE_CHAR = "*"
CROSSING_CHAR = "|"
LANE_WIDTH = 2  # characters per lane column


def _short(change_id, id_length: int) -> str:
    text = str(change_id)
    return text[:id_length] if id_length > 0 else text


def format_row(row: RowLayout, width: int, parents=None, id_length: int = 8) -> str:
    """
    Formats one row as lane columns followed by the id and its parent connections.
    Example: "| * abc12345 -> def67890@1"
    Without `parents` (the entry's parent ids) connections are shown as bare lanes: "-> @0 @1".
    """
    cells = []
    for lane in range(width):
        if lane == row.lane:
            cells.append(NODE_CHAR)
        elif lane in row.crossing_lanes:
            cells.append(CROSSING_CHAR)
        else:
            cells.append(" ")
    graph_part = "".join(cell.ljust(LANE_WIDTH) for cell in cells)

    line = f"{graph_part}{_short(row.change_id, id_length)}"
    if parents is None:
        connections = [f"@{lane}" for lane in row.parent_lanes]
    else:
        connections = [f"{_short(parent_id, id_length)}@{lane}" for parent_id, lane in zip(parents, row.parent_lanes)]
    if connections:
        line += " -> " + " ".join(connections)
    return line.rstrip()


def format_layout(layout: GraphLayout, entries=None, id_length: int = 8) -> str:
    """Text dump of the whole layout; pass the input entries to show parent ids."""
    width = layout.lane_count
    lines = []
    for index, row in enumerate(layout):
        parents = entries[index].parents if entries is not None else None
        lines.append(format_row(row, width, parents, id_length))
    return "\n".join(lines)


def layout_to_dicts(layout: GraphLayout) -> list[dict]:
    """JSON friendly view of the layout. Ids go through str(), map keys become strings."""
    return [
        {
            "id": str(row.change_id),
            "lane": row.lane,
            "child_lanes": list(row.child_lanes),
            "parent_lanes": list(row.parent_lanes),
            "passthrough_lanes": {str(target): lane for target, lane in row.passthrough_lanes.items()},
            "crossing_lanes": {str(lane): str(target) for lane, target in row.crossing_lanes.items()},
        }
        for row in layout
    ]


def dump_layout_json(layout: GraphLayout, indent: int = 2) -> str:
    return json.dumps(layout_to_dicts(layout), ensure_ascii=False, indent=indent)
