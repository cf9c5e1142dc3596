"""GraphViz renderings of a fact set and of the liveness computed over it."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from .dump import Output, flatten_rows
from .facts import AllFacts, Point, Variable
from .intern import InternerTables

PathLike = Union[str, "os.PathLike[str]"]

logger = logging.getLogger(__name__)

_DIGRAPH_OPEN = 'digraph g {\n  graph [\n  rankdir = "TD"\n];\n'

_COLOUR_PALETTE = (
    "#C6CDF7", "#899DA4", "#F98400", "#C7B19C", "#D67236", "#0F0D0E", "#FAEFD1", "#ECCBAE",
    "#E1AF00", "#74A089", "#DD8D29", "#85D4E3", "#1C1718", "#F8AFA8", "#CB2314", "#35274A",
    "#E1BD6D", "#FDDDA0", "#FD6467", "#ABDDDE", "#F2300F", "#D8B70A", "#EAD3BF", "#1E1E1E",
    "#273046", "#9C964A", "#046C9A", "#D9D0D3", "#FDD262", "#0B775E", "#4E2A1E", "#EABE94",
    "#D69C4E", "#E58601", "#F2AD00", "#CCC591", "#E1BD6D", "#35274A", "#FAD510", "#9B110E",
    "#81A88D", "#CEAB07", "#A42820", "#78B7C5", "#3F5151", "#B40F20", "#354823", "#F2300F",
    "#5B1A18", "#F3DF6C", "#DC863B", "#02401B", "#FAD77B", "#F1BB7B", "#7294D4", "#EABE94",
    "#39312F", "#550307", "#EBCC2A", "#972D15", "#A2A475", "#C27D38", "#24281A", "#0C1707",
    "#0B775E", "#D3DDDC", "#00A08A", "#F21A00", "#3B9AB2", "#E6A0C4", "#CDC08C", "#FF0000",
    "#9986A5", "#D5D5D3", "#79402E", "#D8A499", "#9A8822", "#46ACC8", "#CCBA72", "#E2D200",
    "#AA9486", "#F4B5BD", "#446455", "#8D8680", "#5BBCD6", "#798E87", "#5F5647", "#C93312",
    "#29211F", "#B6854D", "#e1f7d5", "#ffbdbd", "#c9c9ff", "#f1cbff",
)


def escape_for_graphviz(text: str) -> str:
    """Escape backslashes, quotes, parentheses and newlines for a record label."""
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("(", "\\(")
        .replace(")", "\\)")
        .replace("\n", "\\n")
    )


def _facts_by_point(
    entries: Iterable[tuple[Point, object]],
    name: str,
    point_pos: int,
    tables: InternerTables,
) -> dict[Point, str]:
    """Group values by point and render each group as left-aligned label lines."""
    by_point: dict[Point, list] = {}
    for point, value in entries:
        by_point.setdefault(point, []).append(value)

    rendered = {}
    for point, values in by_point.items():
        lines = []
        for row in flatten_rows(values, tables):
            row.insert(point_pos, "_")
            lines.append(escape_for_graphviz(f"{name}({', '.join(row)})"))
        # in graphviz, \l is a newline that left-aligns
        rendered[point] = "\\l".join(lines) + "\\l"
    return rendered


def _inputs_by_point(all_facts: AllFacts, tables: InternerTables) -> list[dict[Point, str]]:
    return [
        _facts_by_point(
            ((point, (origin, loan)) for origin, loan, point in all_facts.loan_issued_at),
            "loan_issued_at", 2, tables,
        ),
        _facts_by_point(
            ((point, (loan,)) for loan, point in all_facts.loan_killed_at),
            "loan_killed_at", 1, tables,
        ),
        _facts_by_point(
            ((point, (a, b)) for a, b, point in all_facts.subset_base),
            "subset_base", 2, tables,
        ),
        _facts_by_point(
            ((point, (loan,)) for point, loan in all_facts.loan_invalidated_at),
            "loan_invalidated_at", 0, tables,
        ),
        _facts_by_point(
            ((point, (var,)) for var, point in all_facts.var_used_at),
            "var_used_at", 1, tables,
        ),
        _facts_by_point(
            ((point, (var,)) for var, point in all_facts.var_defined_at),
            "var_defined_at", 1, tables,
        ),
        _facts_by_point(
            ((point, (var,)) for var, point in all_facts.var_dropped_at),
            "var_dropped_at", 1, tables,
        ),
        _facts_by_point(
            ((point, (path,)) for path, point in all_facts.path_assigned_at_base),
            "path_assigned_at_base", 1, tables,
        ),
        _facts_by_point(
            ((point, (path,)) for path, point in all_facts.path_moved_at_base),
            "moved_out_at_base", 1, tables,
        ),
        _facts_by_point(
            ((point, (path,)) for path, point in all_facts.path_accessed_at_base),
            "path_accessed_at_base", 1, tables,
        ),
    ]


def _outputs_by_point(output: Output, tables: InternerTables) -> list[dict[Point, str]]:
    relations = (
        ("loan_live_at", 0),
        ("origin_contains_loan_at", 0),
        ("loan_invalidated_at", 0),
        ("subset", 0),
        ("var_live_on_entry", 1),
        ("var_drop_live_on_entry", 1),
        ("origin_live_on_entry", 1),
        ("var_maybe_partly_initialized_on_exit", 1),
        ("path_maybe_initialized_on_exit", 1),
        ("move_errors", 1),
    )
    return [
        _facts_by_point(getattr(output, name).items(), name, point_pos, tables)
        for name, point_pos in relations
    ]


def _render_point(
    point: Point,
    seen: set[int],
    inputs_by_point: list[dict[Point, str]],
    outputs_by_point: list[dict[Point, str]],
    tables: InternerTables,
) -> list[str]:
    if point.index() in seen:
        return []
    seen.add(point.index())
    inputs = " | ".join(by_point[point] for by_point in inputs_by_point if point in by_point)
    outputs = " | ".join(by_point[point] for by_point in outputs_by_point if point in by_point)
    label = escape_for_graphviz(tables.points.untern(point))
    return [
        f'"node{point.index()}" [\n'
        f'  label = "{{ <f0> {label} | INPUTS | {inputs} | OUTPUTS | {outputs} }}"\n'
        f'  shape = "record"\n'
        f"];\n"
    ]


def graphviz(
    output: Output,
    all_facts: AllFacts,
    output_file: PathLike,
    tables: InternerTables,
) -> None:
    """Write the control-flow graph with each point's input and output facts."""
    with open(output_file, "w", encoding="utf-8", newline="") as handle:
        inputs_by_point = _inputs_by_point(all_facts, tables)
        outputs_by_point = _outputs_by_point(output, tables)
        seen: set[int] = set()
        fragments = [_DIGRAPH_OPEN]
        for edge_index, (point1, point2) in enumerate(all_facts.cfg_edge):
            for point in (point1, point2):
                fragments.extend(
                    _render_point(point, seen, inputs_by_point, outputs_by_point, tables)
                )
            fragments.append(
                f'"node{point1.index()}" -> "node{point2.index()}":f0 [\n'
                f"  id = {edge_index}\n"
                f"];\n"
            )
        fragments.append("}")
        handle.write("".join(fragments))


@dataclass
class _Liveness:
    use_live_vars: set = field(default_factory=set)
    drop_live_vars: set = field(default_factory=set)
    cfg_points: list = field(default_factory=list)
    point_facts: list = field(default_factory=list)

    def extend(self, other: "_Liveness") -> None:
        self.use_live_vars |= other.use_live_vars
        self.drop_live_vars |= other.drop_live_vars
        self.cfg_points.extend(other.cfg_points)
        self.point_facts.extend(other.point_facts)

    @classmethod
    def at(cls, output: Output, all_facts: AllFacts, location: Point) -> "_Liveness":
        point_facts = []
        for label, relation in (
            ("☠", all_facts.var_defined_at),
            ("💧", all_facts.var_dropped_at),
            ("🔧", all_facts.var_used_at),
        ):
            point_facts.extend(
                (label, var, point) for var, point in relation if point == location
            )
        return cls(
            use_live_vars=set(output.var_live_on_entry.get(location, ())),
            drop_live_vars=set(output.var_drop_live_on_entry.get(location, ())),
            cfg_points=[location],
            point_facts=point_facts,
        )


def _edge_live_vars(source: _Liveness, target: _Liveness) -> set[Variable]:
    return (source.use_live_vars & target.use_live_vars) | (
        source.drop_live_vars & target.drop_live_vars
    )


class _Graph:
    """A directed multigraph with stable indices; freed edge slots are reused."""

    def __init__(self) -> None:
        self.nodes: list[Optional[_Liveness]] = []
        self.edges: list[Optional[tuple[int, int]]] = []
        self.outgoing: list[list[int]] = []
        self.incoming: list[list[int]] = []
        self._free_edges: list[int] = []

    def add_node(self, data: _Liveness) -> int:
        self.nodes.append(data)
        self.outgoing.append([])
        self.incoming.append([])
        return len(self.nodes) - 1

    def add_edge(self, source: int, target: int) -> None:
        if self._free_edges:
            index = self._free_edges.pop()
            self.edges[index] = (source, target)
        else:
            index = len(self.edges)
            self.edges.append((source, target))
        self.outgoing[source].insert(0, index)
        self.incoming[target].insert(0, index)

    def _remove_edge(self, index: int) -> None:
        source, target = self.edges[index]
        self.outgoing[source].remove(index)
        self.incoming[target].remove(index)
        self.edges[index] = None
        self._free_edges.append(index)

    def remove_node(self, node: int) -> _Liveness:
        while self.outgoing[node]:
            self._remove_edge(self.outgoing[node][0])
        while self.incoming[node]:
            self._remove_edge(self.incoming[node][0])
        data = self.nodes[node]
        self.nodes[node] = None
        return data

    def successors(self, node: int) -> list[int]:
        return [self.edges[index][1] for index in self.outgoing[node]]

    def live_nodes(self):
        return ((index, data) for index, data in enumerate(self.nodes) if data is not None)

    def live_edges(self):
        return (edge for edge in self.edges if edge is not None)


def _reduce(graph: _Graph, first: int) -> None:
    """Merge every node with a single predecessor and successor into its successor
    when the live variables on both of its edges are the same."""
    stack = [first]
    discovered: set[int] = set()
    while stack:
        node = stack.pop()
        if node in discovered:
            continue
        discovered.add(node)
        stack.extend(succ for succ in graph.successors(node) if succ not in discovered)

        if len(graph.outgoing[node]) != 1 or len(graph.incoming[node]) != 1:
            continue
        previous = graph.edges[graph.incoming[node][0]][0]
        following = graph.edges[graph.outgoing[node][0]][1]
        if node in (previous, following):
            continue
        before = _edge_live_vars(graph.nodes[previous], graph.nodes[node])
        after = _edge_live_vars(graph.nodes[node], graph.nodes[following])
        if before == after:
            data = graph.remove_node(node)
            graph.nodes[following].extend(data)
            graph.add_edge(previous, following)


def _render_cfg_label(node: _Liveness, tables: InternerTables) -> str:
    def point_text(point: Point) -> str:
        return tables.points.untern(point).replace('"', "")

    if len(node.cfg_points) <= 3:
        heading = ", ".join(point_text(point) for point in node.cfg_points)
    else:
        ordered = sorted(node.cfg_points)
        heading = f"{point_text(ordered[0])}–{point_text(ordered[-1])}"
    fragments = [heading + "\\l"]
    fragments.extend(
        f"{label}({tables.variables.untern(var).replace(chr(34), '')}, {point_text(point)})."
        for label, var, point in node.point_facts
    )
    return "\\l".join(fragments)


def liveness_graph(
    output: Output,
    all_facts: AllFacts,
    output_file: PathLike,
    tables: InternerTables,
) -> None:
    """Write the control-flow graph annotated with live variables on each edge.

    Chains of points across which liveness does not change are merged
    into a single node.
    """
    logger.info("Generating liveness graph")
    with open(output_file, "w", encoding="utf-8", newline="") as handle:
        graph = _Graph()
        point_to_node: dict[Point, int] = {}

        def node_for(point: Point) -> int:
            if point not in point_to_node:
                point_to_node[point] = graph.add_node(_Liveness.at(output, all_facts, point))
            return point_to_node[point]

        for point1, point2 in all_facts.cfg_edge:
            node1 = node_for(point1)
            node2 = node_for(point2)
            graph.add_edge(node1, node2)

        logger.info("Reducing the liveness graph...")
        if all_facts.cfg_edge:
            _reduce(graph, point_to_node[all_facts.cfg_edge[0][0]])

        nodes = "\n".join(
            f'{index} [shape="record" label="{_render_cfg_label(data, tables)}"]'
            for index, data in graph.live_nodes()
        )

        edge_fragments = []
        for source, target in graph.live_edges():
            source_data = graph.nodes[source]
            target_data = graph.nodes[target]
            live = _edge_live_vars(source_data, target_data)
            for var in sorted(live):
                status = ("U" if var in source_data.use_live_vars else "") + (
                    "D" if var in source_data.drop_live_vars else ""
                )
                name = tables.variables.untern(var).replace('"', "")
                colour = _COLOUR_PALETTE[var.index() % len(_COLOUR_PALETTE)]
                edge_fragments.append(
                    f'{target} -> {source} [label=" {name} {status}", '
                    f'color="{colour}", penwidth = 2 arrowhead = none]'
                )
            edge_fragments.append(f"{source} -> {target} [penwidth = 2]")

        handle.write(
            _DIGRAPH_OPEN + nodes + "\n\n" + "\n".join(edge_fragments) + "\n}"
        )