"""
依赖图浏览辅助

在构建好的依赖图上做搜索过滤和节点选择，供 CLI 等调用方使用。
"""

from typing import List, Optional

from .graph import DependencyGraph, DependencyNode


def _matches(node: DependencyNode, query: str) -> bool:
    if query in node.name.casefold():
        return True
    if any(query in dep.casefold() for dep in node.dependencies):
        return True
    return any(query in rdep.casefold() for rdep in node.dependents)


def filter_nodes(
    graph: Optional[DependencyGraph],
    search: str = "",
    orphans_only: bool = False,
) -> List[DependencyNode]:
    """
    按搜索词和孤儿开关过滤节点

    搜索不区分大小写，匹配包名、依赖名或被依赖名中的子串。

    Args:
        graph: 依赖图，尚未构建时为 None
        search: 搜索词，为空时不过滤
        orphans_only: 是否只保留孤儿包

    Returns:
        保持图中排序的节点列表
    """
    if graph is None:
        return []

    result = list(graph.nodes)

    if orphans_only:
        result = [n for n in result if n.is_orphan]

    query = search.strip().casefold()
    if not query:
        return result

    return [n for n in result if _matches(n, query)]


class NodeSelection:
    """当前选中的节点"""

    def __init__(self, graph: Optional[DependencyGraph] = None, name: Optional[str] = None):
        self.graph = graph
        self.name = name

    def select(self, name: str):
        self.name = name

    def clear(self):
        self.name = None

    @property
    def selected(self) -> Optional[DependencyNode]:
        """选中的节点；没有选择或图中不存在时为 None"""
        if self.graph is None or self.name is None:
            return None
        return self.graph.node(self.name)

    def with_graph(self, graph: DependencyGraph) -> "NodeSelection":
        """图重新构建后保留选中的名称"""
        return NodeSelection(graph, self.name)
