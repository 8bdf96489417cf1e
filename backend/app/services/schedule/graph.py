import heapq
from typing import Iterable


class CycleDetected(Exception):
    def __init__(self, nodes: list[int]):
        super().__init__(f"dependency cycle through {nodes}")
        self.nodes = nodes


class DependencyGraph:
    """Precedence graph over activity ids.

    Edges are any objects with ``predecessor_id`` / ``successor_id``; edges touching
    a node outside ``nodes`` are ignored. Node order is kept and used to break ties
    in the topological sort, so the result is deterministic for a given storage order.
    """

    def __init__(self, nodes: Iterable[int], edges: Iterable = ()):
        self.nodes: list[int] = list(dict.fromkeys(nodes))
        self.incoming: dict[int, list] = {n: [] for n in self.nodes}
        self.outgoing: dict[int, list] = {n: [] for n in self.nodes}
        for e in edges:
            self.add_edge(e)

    def add_edge(self, edge) -> bool:
        if edge.predecessor_id not in self.incoming or edge.successor_id not in self.incoming:
            return False
        self.incoming[edge.successor_id].append(edge)
        self.outgoing[edge.predecessor_id].append(edge)
        return True

    def reaches(self, start: int, target: int) -> bool:
        """True if ``target`` is reachable from ``start`` over at least one edge."""
        stack = [e.successor_id for e in self.outgoing.get(start, [])]
        seen: set[int] = set()
        while stack:
            n = stack.pop()
            if n == target:
                return True
            if n in seen:
                continue
            seen.add(n)
            stack.extend(e.successor_id for e in self.outgoing.get(n, []))
        return False

    def topological_order(self) -> list[int]:
        position = {n: i for i, n in enumerate(self.nodes)}
        indeg = {n: len(self.incoming[n]) for n in self.nodes}
        ready = [(position[n], n) for n in self.nodes if indeg[n] == 0]
        heapq.heapify(ready)

        order: list[int] = []
        while ready:
            _, n = heapq.heappop(ready)
            order.append(n)
            for e in self.outgoing[n]:
                s = e.successor_id
                indeg[s] -= 1
                if indeg[s] == 0:
                    heapq.heappush(ready, (position[s], s))

        if len(order) != len(self.nodes):
            # nodes left over sit on a cycle or downstream of one
            stuck = [n for n in self.nodes if indeg[n] > 0]
            raise CycleDetected([n for n in stuck if self.reaches(n, n)] or stuck)
        return order
