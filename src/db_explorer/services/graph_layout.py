"""
Relationship graph and layered (Sugiyama-style) layout.

Tables become nodes sized by their column count; foreign keys become edges
pointing from the referenced table to the table holding the key, so arrows
flow downward from referenced to referencing tables.

Layout Steps (per weakly connected component):
1. Cycle removal: self-loops are ignored, DFS back edges are reversed
2. Ranking: longest path from the sources (sources on rank 0)
3. Virtual nodes: edges spanning several ranks get one placeholder per
   intermediate rank so crossing reduction sees them
4. Ordering: alternating down/up barycenter sweeps; ties keep the current
   order and an ordering is kept only if it strictly reduces crossings
5. Coordinates: nodes packed left to right per rank, ranks centred on the
   widest one, ranks stacked by their tallest node

Components are laid out independently and placed side by side, so tables
without any foreign-key path between them never overlap.

Everything here is pure: inputs are never mutated and each call builds its
own working structures, so concurrent requests can lay out safely.
"""

from collections import deque
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from ..config import LayoutConfig
from ..domain.graph import GraphEdge, GraphNode, SchemaGraph
from ..domain.schema import Column, ForeignKey
from ..utils.logging import get_module_logger

logger = get_module_logger()

# (upper vertex, lower vertex) between adjacent ranks
Segment = Tuple[int, int]


def node_height(column_count: int, config: LayoutConfig) -> float:
    """Rendered height of a table node listing ``column_count`` columns."""
    return column_count * config.column_row_height + config.header_height


def edge_id(foreign_key: ForeignKey) -> str:
    return f"{foreign_key.source_table}-{foreign_key.source_column}-{foreign_key.referenced_table}"


def build_graph(
    tables: Sequence[str],
    columns: Mapping[str, Sequence[Column]],
    foreign_keys: Iterable[ForeignKey],
    config: Optional[LayoutConfig] = None,
) -> SchemaGraph:
    """
    Build the unpositioned diagram.

    Args:
        tables: Table names in listing order (kept as node order)
        columns: Columns per table; tables missing here get an empty node
        foreign_keys: Introspected foreign keys
        config: Sizing constants (defaults when omitted)

    Returns:
        SchemaGraph with one node per table and one edge per distinct
        (holding table, fk column, referenced table)
    """
    config = config or LayoutConfig()

    nodes: List[GraphNode] = []
    for table_name in dict.fromkeys(tables):
        table_columns = list(columns.get(table_name, []))
        nodes.append(
            GraphNode(
                id=table_name,
                columns=table_columns,
                width=config.node_width,
                height=node_height(len(table_columns), config),
            )
        )

    known = {node.id for node in nodes}
    edges: Dict[str, GraphEdge] = {}
    for fk in foreign_keys:
        if fk.source_table not in known or fk.referenced_table not in known:
            logger.debug(
                "Skipping foreign key outside the listed tables",
                source_table=fk.source_table,
                referenced_table=fk.referenced_table,
            )
            continue
        key = edge_id(fk)
        if key not in edges:
            edges[key] = GraphEdge(
                id=key,
                source=fk.referenced_table,
                target=fk.source_table,
                label=fk.source_column,
            )

    return SchemaGraph(nodes=nodes, edges=list(edges.values()))


def _connected_components(node_count: int, links: Sequence[Tuple[int, int]]) -> List[List[int]]:
    """Weakly connected components, each sorted, ordered by their first node."""
    neighbours: List[Set[int]] = [set() for _ in range(node_count)]
    for u, v in links:
        neighbours[u].add(v)
        neighbours[v].add(u)

    seen: Set[int] = set()
    components: List[List[int]] = []
    for start in range(node_count):
        if start in seen:
            continue
        seen.add(start)
        queue = deque([start])
        members = []
        while queue:
            current = queue.popleft()
            members.append(current)
            for nxt in sorted(neighbours[current]):
                if nxt not in seen:
                    seen.add(nxt)
                    queue.append(nxt)
        components.append(sorted(members))
    return components


def _remove_cycles(members: Sequence[int], links: Sequence[Tuple[int, int]]) -> List[Tuple[int, int]]:
    """Reverse the back edges found by a DFS that visits in input order."""
    successors: Dict[int, List[int]] = {member: [] for member in members}
    for u, v in links:
        successors[u].append(v)
    for targets in successors.values():
        targets.sort()

    on_stack, done = set(), set()
    back_edges: Set[Tuple[int, int]] = set()
    for root in members:
        if root in done:
            continue
        on_stack.add(root)
        stack = [(root, iter(successors[root]))]
        while stack:
            current, remaining = stack[-1]
            for nxt in remaining:
                if nxt in on_stack:
                    back_edges.add((current, nxt))
                elif nxt not in done:
                    on_stack.add(nxt)
                    stack.append((nxt, iter(successors[nxt])))
                    break
            else:
                stack.pop()
                on_stack.discard(current)
                done.add(current)

    acyclic = [(v, u) if (u, v) in back_edges else (u, v) for u, v in links]
    return list(dict.fromkeys(acyclic))


def _longest_path_ranks(members: Sequence[int], links: Sequence[Tuple[int, int]]) -> Dict[int, int]:
    """Rank of each node: length of the longest path reaching it from a source."""
    successors: Dict[int, List[int]] = {member: [] for member in members}
    in_degree = {member: 0 for member in members}
    for u, v in links:
        successors[u].append(v)
        in_degree[v] += 1

    ranks = {member: 0 for member in members}
    ready = deque(member for member in members if in_degree[member] == 0)
    while ready:
        current = ready.popleft()
        for nxt in successors[current]:
            ranks[nxt] = max(ranks[nxt], ranks[current] + 1)
            in_degree[nxt] -= 1
            if in_degree[nxt] == 0:
                ready.append(nxt)
    return ranks


def _count_crossings(layers: Sequence[Sequence[int]], segments: Sequence[Segment], ranks: Mapping[int, int]) -> int:
    position = {vertex: index for layer in layers for index, vertex in enumerate(layer)}
    by_rank: Dict[int, List[Tuple[int, int]]] = {}
    for upper, lower in segments:
        by_rank.setdefault(ranks[upper], []).append((position[upper], position[lower]))

    crossings = 0
    for pairs in by_rank.values():
        for i, (a1, b1) in enumerate(pairs):
            for a2, b2 in pairs[i + 1:]:
                if (a1 - a2) * (b1 - b2) < 0:
                    crossings += 1
    return crossings


def _reorder(layer: Sequence[int], neighbours: Mapping[int, List[int]], fixed_position: Mapping[int, int]) -> List[int]:
    """Sort a layer by neighbour barycenter; ties and isolated nodes keep their place."""
    def key(item: Tuple[int, int]) -> Tuple[float, int]:
        index, vertex = item
        adjacent = neighbours.get(vertex)
        if not adjacent:
            return (float(index), index)
        return (sum(fixed_position[n] for n in adjacent) / len(adjacent), index)

    return [vertex for _, vertex in sorted(enumerate(layer), key=key)]


class LayeredLayout:
    """
    Assigns top-left (x, y) positions to diagram nodes.

    Usage:
        graph = build_graph(tables, columns, foreign_keys, config)
        positioned = LayeredLayout(config).layout(graph.nodes, graph.edges)
    """

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or LayoutConfig()

    def layout(self, nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> List[GraphNode]:
        """
        Position every node.

        Returns:
            Copies of ``nodes`` in the same order with x, y, rank and order set
        """
        if not nodes:
            return []

        index = {node.id: i for i, node in enumerate(nodes)}
        links = [
            (index[edge.source], index[edge.target])
            for edge in edges
            if edge.source in index and edge.target in index and edge.source != edge.target
        ]
        links = list(dict.fromkeys(links))

        placements: Dict[int, Tuple[float, float, int, int]] = {}
        offset_x = 0.0
        for members in _connected_components(len(nodes), links):
            member_set = set(members)
            component_links = [(u, v) for u, v in links if u in member_set]
            placed, width = self._layout_component(members, component_links, nodes)
            for vertex, (x, y, rank, order) in placed.items():
                placements[vertex] = (x + offset_x, y, rank, order)
            offset_x += width + self.config.component_separation

        positioned = []
        for i, node in enumerate(nodes):
            x, y, rank, order = placements[i]
            positioned.append(node.model_copy(update={"x": x, "y": y, "rank": rank, "order": order}))
        return positioned

    def _layout_component(
        self,
        members: Sequence[int],
        links: Sequence[Tuple[int, int]],
        nodes: Sequence[GraphNode],
    ) -> Tuple[Dict[int, Tuple[float, float, int, int]], float]:
        """Lay out one component; returns placements and the component width."""
        acyclic = _remove_cycles(members, links)
        ranks = _longest_path_ranks(members, acyclic)

        # Virtual vertices are numbered after the real ones
        widths: Dict[int, float] = {member: nodes[member].width for member in members}
        heights: Dict[int, float] = {member: nodes[member].height for member in members}
        next_vertex = len(nodes)
        rank_count = max(ranks.values()) + 1
        layers: List[List[int]] = [[] for _ in range(rank_count)]
        for member in members:
            layers[ranks[member]].append(member)

        segments: List[Segment] = []
        for u, v in acyclic:
            previous = u
            for rank in range(ranks[u] + 1, ranks[v]):
                virtual = next_vertex
                next_vertex += 1
                ranks[virtual] = rank
                widths[virtual] = self.config.edge_separation
                heights[virtual] = 0.0
                layers[rank].append(virtual)
                segments.append((previous, virtual))
                previous = virtual
            segments.append((previous, v))

        layers = self._order_layers(layers, segments, ranks)
        return self._assign_coordinates(layers, widths, heights, len(nodes))

    def _order_layers(
        self,
        layers: List[List[int]],
        segments: Sequence[Segment],
        ranks: Mapping[int, int],
    ) -> List[List[int]]:
        if len(layers) < 2:
            return layers

        up: Dict[int, List[int]] = {}
        down: Dict[int, List[int]] = {}
        for upper, lower in segments:
            down.setdefault(upper, []).append(lower)
            up.setdefault(lower, []).append(upper)

        best = [list(layer) for layer in layers]
        best_crossings = _count_crossings(best, segments, ranks)
        current = [list(layer) for layer in layers]

        for sweep in range(self.config.ordering_passes):
            if best_crossings == 0:
                break
            if sweep % 2 == 0:
                for rank in range(1, len(current)):
                    fixed = {vertex: i for i, vertex in enumerate(current[rank - 1])}
                    current[rank] = _reorder(current[rank], up, fixed)
            else:
                for rank in range(len(current) - 2, -1, -1):
                    fixed = {vertex: i for i, vertex in enumerate(current[rank + 1])}
                    current[rank] = _reorder(current[rank], down, fixed)

            crossings = _count_crossings(current, segments, ranks)
            if crossings < best_crossings:
                best = [list(layer) for layer in current]
                best_crossings = crossings

        return best

    def _assign_coordinates(
        self,
        layers: Sequence[Sequence[int]],
        widths: Mapping[int, float],
        heights: Mapping[int, float],
        real_count: int,
    ) -> Tuple[Dict[int, Tuple[float, float, int, int]], float]:
        separation = self.config.node_separation
        layer_widths = [
            sum(widths[vertex] for vertex in layer) + separation * (len(layer) - 1)
            for layer in layers
        ]
        component_width = max(layer_widths)

        placements: Dict[int, Tuple[float, float, int, int]] = {}
        y = 0.0
        for rank, layer in enumerate(layers):
            x = (component_width - layer_widths[rank]) / 2
            order = 0
            for vertex in layer:
                if vertex < real_count:
                    placements[vertex] = (x, y, rank, order)
                    order += 1
                x += widths[vertex] + separation
            y += max(heights[vertex] for vertex in layer) + self.config.rank_separation

        return placements, component_width


def layout_graph(graph: SchemaGraph, config: Optional[LayoutConfig] = None) -> SchemaGraph:
    """
    Position the nodes of ``graph`` and record the drawing's extent.

    An empty graph is returned as is; the layout is not run.
    """
    if not graph.nodes:
        return graph

    nodes = LayeredLayout(config).layout(graph.nodes, graph.edges)
    width = max(node.x + node.width for node in nodes)
    height = max(node.y + node.height for node in nodes)

    logger.info(
        "Schema graph laid out",
        node_count=len(nodes),
        edge_count=len(graph.edges),
        width=width,
        height=height,
    )
    return SchemaGraph(nodes=nodes, edges=list(graph.edges), width=width, height=height)
