"""
命令行入口

提供 brew-depgraph 命令行工具。依赖数据从文件或标准输入读取，例如：

    brew deps --installed | brew-depgraph summary
"""

import json
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from . import __version__
from .analyzer import DependencyAnalyzer
from .graph import DependencyGraph, DependencyNode
from .query import filter_nodes

console = Console()
err_console = Console(stderr=True)

INPUT_ENVVAR = "BREW_DEPGRAPH_INPUT"


def setup_logging(verbose: bool):
    """配置日志输出"""
    logging.basicConfig(
        level=logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )
    if verbose:
        logging.getLogger("brew_depgraph").setLevel(logging.DEBUG)


def load_graph(ctx: click.Context, quiet: bool = False) -> DependencyGraph:
    """读取输入并构建依赖图；提示信息写到标准错误"""
    stream = ctx.obj["input"]
    graph = DependencyGraph.build(stream.read())

    if not graph.total_packages and not quiet:
        err_console.print("[yellow]Warning:[/yellow] No dependency data found in input")

    return graph


def require_node(graph: DependencyGraph, package: str) -> DependencyNode:
    """查找节点，不存在时退出"""
    node = graph.node(package)
    if node is None:
        console.print(f"[red]Error:[/red] Package '{package}' not found")
        sys.exit(1)
    return node


def node_table(nodes: list[DependencyNode]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Package", style="cyan")
    table.add_column("Deps", justify="right")
    table.add_column("Dependents", justify="right")
    table.add_column("Kind")

    for node in nodes:
        if node.is_orphan:
            kind = "[yellow]orphan[/yellow]"
        elif node.is_leaf:
            kind = "[dim]leaf[/dim]"
        else:
            kind = ""
        table.add_row(node.name, str(len(node.dependencies)), str(len(node.dependents)), kind)

    return table


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--input",
    "-i",
    "input_file",
    type=click.File("r", encoding="utf-8"),
    default="-",
    envvar=INPUT_ENVVAR,
    help="`brew deps --installed` 的输出文件（默认读取标准输入）",
)
@click.option("--verbose", "-v", is_flag=True, help="输出调试日志")
@click.pass_context
def main(ctx: click.Context, input_file, verbose: bool):
    """Homebrew 已安装软件包依赖关系图谱工具"""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["input"] = input_file


@main.command()
@click.option("--json", "as_json", is_flag=True, help="输出 JSON 格式")
@click.option("--top", "-n", default=10, help="排行显示数量")
@click.pass_context
def summary(ctx: click.Context, as_json: bool, top: int):
    """显示依赖图统计信息"""
    graph = load_graph(ctx, quiet=as_json)
    report = DependencyAnalyzer(graph).generate_report(top_n=top)

    if as_json:
        click.echo(json.dumps(report, indent=2, ensure_ascii=False))
        return

    data = report["summary"]
    console.print(Panel("[bold]Summary[/bold]", border_style="blue"))

    table = Table(show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total Packages", str(data["total_packages"]))
    table.add_row("Total Edges", str(data["total_edges"]))
    table.add_row("Orphans", str(data["orphans"]))
    table.add_row("Leaves", str(data["leaves"]))
    table.add_row("Graph Density", f"{data['density']:.6f}")
    table.add_row("Is DAG", "Yes" if data["is_dag"] else "No")
    table.add_row("Connected Components", str(data["components"]))
    table.add_row("Most Depended", data["most_depended"] or "-")

    console.print(table)

    console.print(Panel("[bold]Most Depended Packages[/bold]", border_style="blue"))

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", style="dim")
    table.add_column("Package", style="cyan")
    table.add_column("Dependents", justify="right")

    for i, (pkg, count) in enumerate(report["most_depended"], 1):
        table.add_row(str(i), pkg, str(count))

    console.print(table)

    if report["circular_dependencies"]:
        console.print(
            Panel(
                f"[yellow]Found {report['circular_dependencies_count']} circular dependencies[/yellow]",
                border_style="yellow",
            )
        )


@main.command("list")
@click.option("--search", "-s", default="", help="按包名、依赖或被依赖名搜索")
@click.option("--orphans", is_flag=True, help="只显示孤儿包")
@click.option("--leaves", is_flag=True, help="只显示叶子包")
@click.pass_context
def list_packages(ctx: click.Context, search: str, orphans: bool, leaves: bool):
    """列出软件包"""
    graph = load_graph(ctx)

    nodes = filter_nodes(graph, search=search, orphans_only=orphans)
    if leaves:
        nodes = [n for n in nodes if n.is_leaf]

    if not nodes:
        console.print("[dim]No matching packages[/dim]")
        return

    console.print(f"\n[bold]Packages ({len(nodes)})[/bold]")
    console.print(node_table(nodes))


@main.command()
@click.argument("package")
@click.option("--recursive", "-r", is_flag=True, help="递归显示所有依赖")
@click.option("--depth", "-d", default=3, help="最大递归深度")
@click.option("--tree", is_flag=True, help="以树形结构显示")
@click.pass_context
def deps(ctx: click.Context, package: str, recursive: bool, depth: int, tree: bool):
    """查询软件包的依赖关系"""
    graph = load_graph(ctx)
    require_node(graph, package)

    if tree:
        tree_data = graph.get_dependency_tree(package, max_depth=depth)

        def build_tree(node_data, parent_tree):
            label = f"[cyan]{node_data['name']}[/cyan]"
            if node_data.get("truncated"):
                label += " [yellow]...[/yellow]"

            branch = parent_tree.add(label)

            for child in node_data.get("children", []):
                build_tree(child, branch)

        rich_tree = Tree(f"[bold green]{package}[/bold green]")
        for child in tree_data.get("children", []):
            build_tree(child, rich_tree)

        console.print(rich_tree)
        return

    deps_list = graph.get_dependencies(
        package, recursive=recursive, max_depth=depth if recursive else -1
    )

    if not deps_list:
        console.print("[dim]No dependencies[/dim]")
        return

    console.print(f"\n[bold]Dependencies ({len(deps_list)})[/bold]")
    console.print(node_table([graph.node(name) for name in deps_list]))


@main.command()
@click.argument("package")
@click.option("--recursive", "-r", is_flag=True, help="递归显示")
@click.option("--depth", "-d", default=2, help="最大递归深度")
@click.pass_context
def rdeps(ctx: click.Context, package: str, recursive: bool, depth: int):
    """查询软件包的反向依赖（哪些包依赖此包）"""
    graph = load_graph(ctx)
    require_node(graph, package)

    rdeps_list = graph.get_reverse_dependencies(
        package, recursive=recursive, max_depth=depth if recursive else -1
    )

    if not rdeps_list:
        console.print(f"[dim]No packages depend on {package}[/dim]")
        return

    console.print(f"\n[bold]Reverse Dependencies ({len(rdeps_list)})[/bold]")
    console.print(node_table([graph.node(name) for name in rdeps_list]))


@main.command()
@click.argument("package")
@click.pass_context
def info(ctx: click.Context, package: str):
    """显示软件包详细信息"""
    graph = load_graph(ctx)
    node = require_node(graph, package)

    analyzer = DependencyAnalyzer(graph)
    analysis = analyzer.analyze_package(package)

    console.print(
        Panel(
            f"[bold]{node.name}[/bold]\n\n"
            f"Dependencies: {', '.join(node.dependencies) or '-'}\n"
            f"Dependents: {', '.join(node.dependents) or '-'}",
            title="Package Information",
            border_style="blue",
        )
    )

    table = Table(title="Dependency Statistics", show_header=True, header_style="bold")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Direct Dependencies", str(analysis.direct_deps_count))
    table.add_row("Total Dependencies", str(analysis.total_deps_count))
    table.add_row("Direct Reverse Deps", str(analysis.direct_rdeps_count))
    table.add_row("Total Reverse Deps", str(analysis.total_rdeps_count))
    table.add_row("Dependency Depth", str(analysis.dependency_depth))
    table.add_row("Is Leaf Package", "Yes" if analysis.is_leaf else "No")
    table.add_row("Is Orphan Package", "Yes" if analysis.is_orphan else "No")
    table.add_row("Is Core Package", "Yes" if analysis.is_core else "No")

    console.print(table)

    removable = analyzer.estimate_removal(package)
    if removable:
        console.print(f"\n[bold]Freed on uninstall:[/bold] {', '.join(removable)}")


@main.command()
@click.argument("source")
@click.argument("target")
@click.pass_context
def path(ctx: click.Context, source: str, target: str):
    """查找两个包之间的依赖路径"""
    graph = load_graph(ctx)

    dep_path = graph.get_dependency_path(source, target)

    if not dep_path:
        console.print(f"[yellow]No dependency path found from {source} to {target}[/yellow]")
        return

    console.print(f"\n[bold]Dependency path ({len(dep_path) - 1} hops):[/bold]\n")

    for i, pkg in enumerate(dep_path):
        if i > 0:
            console.print("  ↓")
        console.print(f"  [cyan]{pkg}[/cyan]")


@main.command()
@click.option("--output", "-o", required=True, type=click.Path(), help="输出 JSON 文件路径")
@click.pass_context
def export(ctx: click.Context, output: str):
    """导出依赖图为 JSON"""
    graph = load_graph(ctx)
    graph.to_json(output)
    console.print(f"[green]✓[/green] Saved {graph.total_packages} packages to {output}")


if __name__ == "__main__":
    main()
