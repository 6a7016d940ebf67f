"""
依赖输出解析器

解析 `brew deps --installed` 的逐行输出，提取每个软件包的直接依赖。

每行格式为 ``package: dep1 dep2 dep3``，没有依赖的包写作 ``package:``。
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)


@dataclass
class DepsLine:
    """单行解析结果"""

    name: str
    depends: List[str] = field(default_factory=list)
    line_no: int = 0


@dataclass
class ParseResult:
    """整段输出的解析结果"""

    # 主体包名 -> 直接依赖列表（保持首次出现顺序）
    entries: Dict[str, List[str]] = field(default_factory=dict)
    # 被跳过的畸形行号（从 1 开始）
    skipped: List[int] = field(default_factory=list)
    total_lines: int = 0

    @property
    def package_count(self) -> int:
        return len(self.entries)

    @property
    def edge_count(self) -> int:
        return sum(len(deps) for deps in self.entries.values())


class DepsOutputParser:
    """`brew deps --installed` 输出解析器"""

    SEPARATOR = ":"

    def parse_line(self, line: str, line_no: int = 0) -> Optional[DepsLine]:
        """
        解析单行

        Args:
            line: 原始行文本
            line_no: 行号，仅用于日志

        Returns:
            解析结果；没有冒号或包名为空时返回 None
        """
        name, sep, rest = line.partition(self.SEPARATOR)
        if not sep:
            return None

        name = name.strip()
        if not name:
            return None

        depends: List[str] = []
        seen = set()
        for token in rest.split():
            # 同一行里的重复依赖和自身引用都丢弃
            if token in seen or token == name:
                continue
            seen.add(token)
            depends.append(token)

        return DepsLine(name=name, depends=depends, line_no=line_no)

    def parse_content(self, content: str) -> ParseResult:
        """
        解析整段输出

        同一个包出现多次时以最后一次为准，不做合并。只作为依赖出现、
        自身没有对应行的包会补上一个空依赖列表。

        Args:
            content: 命令的完整标准输出

        Returns:
            解析结果，永远不会抛出异常
        """
        result = ParseResult()
        entries = result.entries

        # 记录只按 \n 分隔，兼容 \r\n
        lines = [line.rstrip("\r") for line in content.split("\n")]
        if lines and not lines[-1]:
            lines.pop()
        result.total_lines = len(lines)

        for line_no, line in enumerate(lines, 1):
            if not line.strip():
                continue

            parsed = self.parse_line(line, line_no)
            if parsed is None:
                logger.debug("Skipping malformed line %d: %r", line_no, line)
                result.skipped.append(line_no)
                continue

            entries[parsed.name] = parsed.depends

            for dep in parsed.depends:
                if dep not in entries:
                    entries[dep] = []

        logger.debug(
            "Parsed %d packages (%d edges), skipped %d lines",
            result.package_count,
            result.edge_count,
            len(result.skipped),
        )
        return result

    def parse_file(self, filepath: Union[str, Path]) -> ParseResult:
        """解析保存到文件中的输出"""
        with open(filepath, encoding="utf-8") as f:
            return self.parse_content(f.read())


def parse_deps_output(content: str) -> Dict[str, List[str]]:
    """解析输出并返回 包名 -> 直接依赖 映射"""
    return DepsOutputParser().parse_content(content).entries
