"""
依赖关系分析器

提供统计分析和报告功能。
"""

from dataclasses import dataclass

from .graph import DependencyGraph

# 被依赖数达到此值的包视为核心包
CORE_THRESHOLD = 10


@dataclass
class PackageAnalysis:
    """软件包分析结果"""

    name: str

    # 依赖统计
    direct_deps_count: int
    total_deps_count: int

    # 被依赖统计
    direct_rdeps_count: int
    total_rdeps_count: int

    # 深度
    dependency_depth: int

    # 分类
    is_leaf: bool  # 没有依赖
    is_orphan: bool  # 有依赖但没有被依赖
    is_core: bool  # 被大量包依赖

    connection_count: int = 0


class DependencyAnalyzer:
    """依赖关系分析器"""

    def __init__(self, graph: DependencyGraph, core_threshold: int = CORE_THRESHOLD):
        self.graph = graph
        self.core_threshold = core_threshold

    def analyze_package(self, package: str) -> PackageAnalysis | None:
        """
        分析单个软件包

        Args:
            package: 软件包名称

        Returns:
            分析结果，包不存在时返回 None
        """
        node = self.graph.node(package)
        if node is None:
            return None

        all_deps = self.graph.get_dependencies(package, recursive=True)
        all_rdeps = self.graph.get_reverse_dependencies(package, recursive=True)

        return PackageAnalysis(
            name=package,
            direct_deps_count=len(node.dependencies),
            total_deps_count=len(all_deps),
            direct_rdeps_count=len(node.dependents),
            total_rdeps_count=len(all_rdeps),
            dependency_depth=self.graph.get_dependency_depth(package),
            is_leaf=node.is_leaf,
            is_orphan=node.is_orphan,
            is_core=len(node.dependents) >= self.core_threshold,
            connection_count=node.connection_count,
        )

    def find_circular_dependencies(self) -> list[list[str]]:
        """查找循环依赖"""
        return self.graph.find_cycles()

    def find_orphans(self) -> list[str]:
        """查找孤儿包（可能是用户主动安装的顶层包）"""
        return [n.name for n in self.graph.orphans]

    def find_base_packages(self) -> list[str]:
        """查找基础包（被依赖数达到核心阈值的包）"""
        most_depended = self.graph.get_most_depended(self.graph.total_packages)
        return [pkg for pkg, count in most_depended if count >= self.core_threshold]

    def get_common_dependencies(self, packages: list[str]) -> list[str]:
        """
        获取多个包的公共依赖

        Args:
            packages: 软件包列表

        Returns:
            公共依赖列表
        """
        if not packages:
            return []

        dep_sets = [set(self.graph.get_dependencies(pkg, recursive=True)) for pkg in packages]

        common = dep_sets[0]
        for deps in dep_sets[1:]:
            common = common.intersection(deps)

        return sorted(common)

    def get_unique_dependencies(self, package: str, compared_to: list[str]) -> list[str]:
        """
        获取相对于其他包的独特依赖

        Args:
            package: 目标包
            compared_to: 比较的包列表

        Returns:
            独特依赖列表
        """
        pkg_deps = set(self.graph.get_dependencies(package, recursive=True))

        other_deps = set()
        for other in compared_to:
            other_deps.update(self.graph.get_dependencies(other, recursive=True))

        return sorted(pkg_deps - other_deps)

    def estimate_removal(self, package: str) -> list[str]:
        """
        估算卸载某个包后会变成无用的依赖

        一个依赖只有在它的所有被依赖者都会被移除时才会一起变成无用。

        Args:
            package: 软件包名称

        Returns:
            随之可以移除的包列表，不含包自身
        """
        if package not in self.graph:
            return []

        removed = {package}
        candidates = self.graph.get_dependencies(package, recursive=True)

        changed = True
        while changed:
            changed = False
            for name in candidates:
                if name in removed:
                    continue
                node = self.graph.node(name)
                if node and set(node.dependents) <= removed:
                    removed.add(name)
                    changed = True

        removed.discard(package)
        return sorted(removed)

    def generate_report(self, top_n: int = 20) -> dict:
        """
        生成完整分析报告

        Returns:
            报告字典
        """
        stats = self.graph.get_statistics()
        most = self.graph.most_depended
        cycles = self.find_circular_dependencies()

        return {
            "summary": {
                "total_packages": stats["nodes"],
                "total_edges": stats["edges"],
                "orphans": stats["orphans"],
                "leaves": stats["leaves"],
                "density": stats["density"],
                "is_dag": stats["is_dag"],
                "components": stats["weakly_connected_components"],
                "most_depended": most.name if most else None,
            },
            "core_packages": self.find_base_packages()[:top_n],
            "most_depended": self.graph.get_most_depended(top_n),
            "most_dependencies": self.graph.get_most_dependencies(top_n),
            "orphans": self.find_orphans(),
            "circular_dependencies_count": len(cycles),
            "circular_dependencies": cycles[:10],
        }
