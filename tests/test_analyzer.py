"""
测试依赖分析器与浏览辅助
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from brew_depgraph.analyzer import DependencyAnalyzer
from brew_depgraph.graph import DependencyGraph
from brew_depgraph.query import NodeSelection, filter_nodes

DEPS_OUTPUT = """\
app: libfoo libbar
libfoo: libc
libbar: libc libfoo
libc:
tool: libc
"""


class TestDependencyAnalyzer:
    """测试分析器"""

    def setup_method(self):
        self.graph = DependencyGraph.build(DEPS_OUTPUT)
        self.analyzer = DependencyAnalyzer(self.graph, core_threshold=3)

    def test_analyze_package(self):
        """测试分析单个包"""
        analysis = self.analyzer.analyze_package("app")

        assert analysis is not None
        assert analysis.direct_deps_count == 2
        assert analysis.total_deps_count == 3
        assert analysis.direct_rdeps_count == 0
        assert analysis.dependency_depth == 2
        assert analysis.is_orphan
        assert not analysis.is_leaf
        assert not analysis.is_core
        assert analysis.connection_count == 2

    def test_analyze_core_package(self):
        """测试核心包判断"""
        analysis = self.analyzer.analyze_package("libc")

        assert analysis.is_core
        assert analysis.is_leaf
        assert analysis.direct_rdeps_count == 3
        assert analysis.total_rdeps_count == 4

    def test_analyze_missing_package(self):
        """测试不存在的包"""
        assert self.analyzer.analyze_package("missing") is None

    def test_find_orphans(self):
        """测试孤儿包"""
        assert self.analyzer.find_orphans() == ["app", "tool"]

    def test_find_base_packages(self):
        """测试基础包"""
        assert self.analyzer.find_base_packages() == ["libc"]

    def test_common_dependencies(self):
        """测试公共依赖"""
        assert self.analyzer.get_common_dependencies(["app", "libbar"]) == ["libc", "libfoo"]
        assert self.analyzer.get_common_dependencies(["app", "tool"]) == ["libc"]
        assert self.analyzer.get_common_dependencies([]) == []

    def test_unique_dependencies(self):
        """测试独特依赖"""
        assert self.analyzer.get_unique_dependencies("app", ["tool"]) == ["libbar", "libfoo"]

    def test_estimate_removal(self):
        """测试卸载后可移除的依赖"""
        # libc 仍被 tool 依赖
        assert self.analyzer.estimate_removal("app") == ["libbar", "libfoo"]
        assert self.analyzer.estimate_removal("libbar") == []
        assert self.analyzer.estimate_removal("missing") == []

    def test_estimate_removal_cascades(self):
        """测试可移除的依赖会逐层传递"""
        graph = DependencyGraph.build("app: libfoo libbar\nlibfoo: libc\nlibbar: libc libfoo\n")
        analyzer = DependencyAnalyzer(graph)

        assert analyzer.estimate_removal("app") == ["libbar", "libc", "libfoo"]

    def test_generate_report(self):
        """测试生成报告"""
        report = self.analyzer.generate_report()

        assert report["summary"]["total_packages"] == 5
        assert report["summary"]["total_edges"] == 6
        assert report["summary"]["most_depended"] == "libc"
        assert report["most_depended"][0] == ("libc", 3)
        assert report["orphans"] == ["app", "tool"]
        assert report["circular_dependencies_count"] == 0

    def test_report_on_empty_graph(self):
        """测试空图报告"""
        report = DependencyAnalyzer(DependencyGraph()).generate_report()

        assert report["summary"]["total_packages"] == 0
        assert report["summary"]["most_depended"] is None
        assert report["most_depended"] == []


class TestFilterNodes:
    """测试搜索过滤"""

    def setup_method(self):
        self.graph = DependencyGraph.build(DEPS_OUTPUT)

    def test_no_graph(self):
        """测试尚未构建图"""
        assert filter_nodes(None, search="lib") == []

    def test_no_filter(self):
        """测试不过滤时返回全部"""
        assert filter_nodes(self.graph) == list(self.graph.nodes)

    def test_orphans_only(self):
        """测试只显示孤儿包"""
        nodes = filter_nodes(self.graph, orphans_only=True)

        assert [n.name for n in nodes] == ["app", "tool"]

    def test_search_matches_relations(self):
        """测试搜索匹配依赖和被依赖"""
        nodes = filter_nodes(self.graph, search="TOOL")

        # tool 本身以及 tool 依赖的 libc
        assert [n.name for n in nodes] == ["libc", "tool"]

    def test_search_with_orphans(self):
        """测试搜索与孤儿开关组合"""
        nodes = filter_nodes(self.graph, search="libbar", orphans_only=True)

        assert [n.name for n in nodes] == ["app"]


class TestNodeSelection:
    """测试节点选择"""

    def test_select(self):
        """测试选择节点"""
        graph = DependencyGraph.build(DEPS_OUTPUT)
        selection = NodeSelection(graph)

        assert selection.selected is None

        selection.select("libc")
        assert selection.selected.name == "libc"

        selection.clear()
        assert selection.selected is None

    def test_select_missing(self):
        """测试选择不存在的节点"""
        selection = NodeSelection(DependencyGraph.build(DEPS_OUTPUT), "missing")

        assert selection.selected is None

    def test_with_graph(self):
        """测试重新构建图后保留选择"""
        selection = NodeSelection(DependencyGraph.build(DEPS_OUTPUT), "libfoo")
        rebuilt = selection.with_graph(DependencyGraph.build("libfoo: libc zlib\n"))

        assert rebuilt.selected.dependencies == ("libc", "zlib")
        assert selection.selected.dependencies == ("libc",)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
