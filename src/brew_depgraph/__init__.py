"""
Homebrew 已安装软件包依赖关系图谱工具

解析 `brew deps --installed` 的输出，构建并分析双向依赖图。
"""

from .analyzer import DependencyAnalyzer, PackageAnalysis
from .graph import DependencyGraph, DependencyNode, Edge
from .parser import DepsOutputParser, ParseResult, parse_deps_output
from .query import NodeSelection, filter_nodes

__version__ = "0.1.0"
__all__ = [
    "DepsOutputParser",
    "ParseResult",
    "parse_deps_output",
    "DependencyGraph",
    "DependencyNode",
    "Edge",
    "DependencyAnalyzer",
    "PackageAnalysis",
    "NodeSelection",
    "filter_nodes",
]
