"""
依赖关系图谱构建器

从 `brew deps --installed` 的输出构建不可变的双向依赖图，
并使用 NetworkX 提供路径、环等图算法。
"""

import json
from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterator, List, Mapping, NamedTuple, Optional, Sequence, Set, Tuple

import networkx as nx

from .parser import DepsOutputParser


@dataclass(frozen=True)
class DependencyNode:
    """依赖图中的单个软件包"""

    name: str
    dependencies: Tuple[str, ...] = ()  # 它直接依赖的包
    dependents: Tuple[str, ...] = ()  # 直接依赖它的包

    @property
    def is_leaf(self) -> bool:
        """叶子包：自身没有依赖"""
        return not self.dependencies

    @property
    def is_orphan(self) -> bool:
        """孤儿包：有自己的依赖，但没有任何包依赖它"""
        return not self.dependents and not self.is_leaf

    @property
    def connection_count(self) -> int:
        return len(self.dependencies) + len(self.dependents)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "dependencies": list(self.dependencies),
            "dependents": list(self.dependents),
            "is_leaf": self.is_leaf,
            "is_orphan": self.is_orphan,
        }


class Edge(NamedTuple):
    """依赖边：source 直接依赖 target"""

    source: str
    target: str


class DependencyGraph:
    """
    依赖关系图

    构建之后不可修改；刷新时应整体重新构建一个新的图。
    """

    def __init__(
        self,
        nodes: Sequence[DependencyNode] = (),
        edges: Sequence[Tuple[str, str]] = (),
    ):
        """
        初始化依赖图

        一般不直接调用，请使用 ``build`` / ``from_mapping``。

        Args:
            nodes: 节点列表
            edges: (source, target) 边列表
        """
        self._nodes: Tuple[DependencyNode, ...] = tuple(sorted(nodes, key=lambda n: n.name))
        self._edges: Tuple[Edge, ...] = tuple(sorted(Edge(*e) for e in edges))
        self._index: Dict[str, DependencyNode] = {n.name: n for n in self._nodes}

        graph = nx.DiGraph()
        graph.add_nodes_from(self._index)
        # 只保留两端都是已知节点的边
        graph.add_edges_from(
            e for e in self._edges if e.source in self._index and e.target in self._index
        )
        self._graph = nx.freeze(graph)

    # ------------------------------------------------------------------
    # 构建

    @classmethod
    def build(cls, content: str) -> "DependencyGraph":
        """
        从 `brew deps --installed` 的输出构建依赖图

        对任意字符串（包括空字符串）都会返回一个合法的图，畸形行会被跳过。
        """
        return cls.from_mapping(DepsOutputParser().parse_content(content).entries)

    @classmethod
    def from_file(cls, filepath: str) -> "DependencyGraph":
        """从保存的输出文件构建依赖图"""
        return cls.from_mapping(DepsOutputParser().parse_file(filepath).entries)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Sequence[str]]) -> "DependencyGraph":
        """
        从 包名 -> 直接依赖 映射构建依赖图

        Args:
            mapping: 依赖映射；只作为依赖出现的包会被补全为空依赖的节点

        Returns:
            依赖图
        """
        dependency_map: Dict[str, List[str]] = {}
        for name, deps in mapping.items():
            # 去重并丢弃自身引用
            dependency_map[name] = [d for d in dict.fromkeys(deps) if d != name]

        # 补全只作为依赖出现的包
        for deps in list(dependency_map.values()):
            for dep in deps:
                dependency_map.setdefault(dep, [])

        # 反向映射和边
        dependents_map: Dict[str, List[str]] = {}
        edges: List[Tuple[str, str]] = []
        for name, deps in dependency_map.items():
            for dep in deps:
                dependents_map.setdefault(dep, []).append(name)
                edges.append((name, dep))

        nodes = [
            DependencyNode(
                name=name,
                dependencies=tuple(sorted(dependency_map[name])),
                dependents=tuple(sorted(dependents_map.get(name, []))),
            )
            for name in dependency_map
        ]

        return cls(nodes, edges)

    # ------------------------------------------------------------------
    # 基本查询

    @property
    def nodes(self) -> Tuple[DependencyNode, ...]:
        """按名称排序的全部节点"""
        return self._nodes

    @property
    def edges(self) -> Tuple[Edge, ...]:
        return self._edges

    def node(self, name: str) -> Optional[DependencyNode]:
        """按名称精确查找节点，不存在时返回 None"""
        return self._index.get(name)

    @property
    def orphans(self) -> List[DependencyNode]:
        """孤儿包（有依赖但不被任何包依赖）"""
        return [n for n in self._nodes if n.is_orphan]

    @property
    def leaves(self) -> List[DependencyNode]:
        """叶子包（没有依赖）"""
        return [n for n in self._nodes if n.is_leaf]

    @property
    def most_depended(self) -> Optional[DependencyNode]:
        """被依赖最多的包；并列时取名称最小的"""
        if not self._nodes:
            return None
        return min(self._nodes, key=lambda n: (-len(n.dependents), n.name))

    @property
    def total_packages(self) -> int:
        return len(self._nodes)

    @property
    def total_edges(self) -> int:
        return len(self._edges)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[DependencyNode]:
        return iter(self._nodes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DependencyGraph):
            return NotImplemented
        return self._nodes == other._nodes and self._edges == other._edges

    def __hash__(self) -> int:
        return hash((self._nodes, self._edges))

    def __repr__(self) -> str:
        return f"DependencyGraph(packages={self.total_packages}, edges={self.total_edges})"

    # ------------------------------------------------------------------
    # 依赖遍历

    def get_dependencies(
        self,
        package: str,
        recursive: bool = False,
        max_depth: int = -1,
    ) -> List[str]:
        """
        获取软件包的依赖

        Args:
            package: 软件包名称
            recursive: 是否递归获取所有依赖
            max_depth: 最大深度，-1 表示无限制

        Returns:
            排序后的依赖列表，不包含包自身
        """
        node = self.node(package)
        if node is None:
            return []

        if recursive:
            return self._walk(package, lambda n: n.dependencies, max_depth)
        return list(node.dependencies)

    def get_reverse_dependencies(
        self,
        package: str,
        recursive: bool = False,
        max_depth: int = -1,
    ) -> List[str]:
        """
        获取反向依赖（哪些包依赖此包）

        Args:
            package: 软件包名称
            recursive: 是否递归
            max_depth: 最大深度

        Returns:
            依赖此包的包列表
        """
        node = self.node(package)
        if node is None:
            return []

        if recursive:
            return self._walk(package, lambda n: n.dependents, max_depth)
        return list(node.dependents)

    def _walk(self, package: str, neighbours, max_depth: int) -> List[str]:
        """广度优先遍历"""
        visited: Set[str] = set()
        queue = deque([(package, 0)])

        while queue:
            current, depth = queue.popleft()

            if current in visited:
                continue

            if max_depth >= 0 and depth > max_depth:
                continue

            node = self._index.get(current)
            if node is None:
                continue

            visited.add(current)

            for name in neighbours(node):
                if name not in visited:
                    queue.append((name, depth + 1))

        visited.discard(package)
        return sorted(visited)

    def get_dependency_tree(self, package: str, max_depth: int = 3) -> dict:
        """
        获取依赖树结构

        Args:
            package: 软件包名称
            max_depth: 最大深度

        Returns:
            树形结构字典
        """

        def build_tree(name: str, depth: int, ancestors: Set[str]) -> dict:
            if depth > max_depth or name in ancestors:
                return {"name": name, "children": [], "truncated": True}

            ancestors = ancestors | {name}
            children = [
                build_tree(dep, depth + 1, ancestors)
                for dep in self.get_dependencies(name)
            ]
            return {"name": name, "children": children, "truncated": False}

        return build_tree(package, 0, set())

    def get_dependency_path(self, source: str, target: str) -> Optional[List[str]]:
        """
        获取两个包之间的依赖路径

        Returns:
            依赖路径，如果不存在则返回 None
        """
        if source not in self or target not in self:
            return None

        try:
            return nx.shortest_path(self._graph, source, target)
        except nx.NetworkXNoPath:
            return None

    def get_dependency_depth(self, package: str) -> int:
        """获取软件包到最远依赖的最短路径长度"""
        if package not in self:
            return 0
        lengths = nx.single_source_shortest_path_length(self._graph, package)
        return max(lengths.values(), default=0)

    def find_cycles(self) -> List[List[str]]:
        """查找循环依赖"""
        return [list(cycle) for cycle in nx.simple_cycles(self._graph)]

    # ------------------------------------------------------------------
    # 统计

    def get_most_depended(self, top_n: int = 20) -> List[Tuple[str, int]]:
        """获取被依赖最多的包，数量相同时按名称排序"""
        counts = [(n.name, len(n.dependents)) for n in self._nodes]
        counts.sort(key=lambda x: (-x[1], x[0]))
        return counts[:top_n]

    def get_most_dependencies(self, top_n: int = 20) -> List[Tuple[str, int]]:
        """获取（递归）依赖最多的包"""
        counts = [(n.name, len(self.get_dependencies(n.name, recursive=True))) for n in self._nodes]
        counts.sort(key=lambda x: (-x[1], x[0]))
        return counts[:top_n]

    def get_statistics(self) -> dict:
        """获取图统计信息"""
        count = self.total_packages
        return {
            "nodes": count,
            "edges": self.total_edges,
            "orphans": len(self.orphans),
            "leaves": len(self.leaves),
            "density": nx.density(self._graph),
            "is_dag": nx.is_directed_acyclic_graph(self._graph),
            "weakly_connected_components": (
                nx.number_weakly_connected_components(self._graph) if count else 0
            ),
            "avg_in_degree": self.total_edges / count if count else 0,
            "avg_out_degree": self.total_edges / count if count else 0,
        }

    # ------------------------------------------------------------------
    # 导出

    def to_dict(self) -> dict:
        """导出为字典"""
        return {
            "nodes": [n.to_dict() for n in self._nodes],
            "edges": [{"source": e.source, "target": e.target} for e in self._edges],
        }

    def to_json(self, filepath: str):
        """导出为 JSON 文件"""
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, ensure_ascii=False, indent=2)
