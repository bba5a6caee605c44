"""ASCII rendering of the dependency graph of an export.

Levels are printed from the highest down; under each item its resolved
dependencies are drawn as a tree. An item that was already drawn is shown
in parentheses, and a reference back to an item on the current branch is
shown as ``*** (label)`` with a bracket on the right joining the two lines.
"""

from __future__ import annotations

from pathlib import Path

from content_migrator.core.dependency_graph import DependencyGraph, DependencyNode
from content_migrator.core.loader import load_export
from content_migrator.core.mapping import ContentMapping

BRANCH_PIPES = ("├", "├", "└")
CIRCULAR_PIPES = ("╗", "║", "╝")
CIRCULAR_LINE = "═"


def first_second_third(index: int, total: int) -> int:
    """0 for the first of a run, 2 for the last, 1 for anything between."""
    if index == total - 1:
        return 2
    return 0 if index == 0 else 1


class TreeBuilder:
    """Collects the lines of one tree, and the cycles found while drawing it."""

    def __init__(self, graph: DependencyGraph, evaluated: set[int]) -> None:
        self.graph = graph
        self.evaluated = evaluated
        self.lines: list[str] = []
        self.circular_links: list[tuple[int, int]] = []

    def add_dependency(
        self,
        node: DependencyNode,
        parents: list[tuple[int, int]],
        fst: int,
        prefix: str,
    ) -> bool:
        """Draw ``node`` and its dependencies; False when nothing new was drawn.

        ``parents`` holds ``(node index, line)`` for each item on the branch.
        The walk keeps its own stack so arbitrarily deep chains can be drawn.
        """
        drawn_root = False
        root = True
        stack = [(node, parents, fst, prefix)]

        while stack:
            node, parents, fst, prefix = stack.pop()
            is_root, root = root, False
            depth = len(parents) - 1
            pipe = "" if depth < 0 else BRANCH_PIPES[fst] + "─ "

            match = next((line for index, line in parents if index == node.index), None)
            if match is not None:
                self.lines.append(f"{prefix}{pipe}*** ({node.label})")
                self.circular_links.append((match, len(self.lines) - 1))
                continue
            if node.index in self.evaluated:
                if depth > -1:
                    self.lines.append(f"{prefix}{pipe}({node.label})")
                continue

            self.lines.append(f"{prefix}{pipe}{node.label}")
            if is_root:
                drawn_root = True
            branch = [*parents, (node.index, len(self.lines) - 1)]
            self.evaluated.add(node.index)

            if depth == -1:
                sub_prefix = prefix
            else:
                sub_prefix = prefix + ("   " if fst == 2 else "│  ")
            resolved = [dep for dep in node.dependencies if dep.resolved is not None]
            # Pushed last to first so they are drawn in order.
            for i in range(len(resolved) - 1, -1, -1):
                stack.append(
                    (
                        self.graph.node(resolved[i].resolved),
                        branch,
                        first_second_third(i, len(resolved)),
                        sub_prefix,
                    )
                )
        return drawn_root


def fill_whitespace(original: str, current: str, char: str, target_length: int) -> str:
    """Extend ``current`` to ``target_length`` past the end of ``original``,
    turning spaces into ``char`` but keeping brackets already drawn there."""
    position = len(original)
    repeats = target_length - len(original)
    chars = list(current)

    while position < len(chars) and repeats > 0:
        if chars[position] == " ":
            chars[position] = char
        position += 1
        repeats -= 1

    result = "".join(chars)
    if repeats > 0:
        result += char * repeats
    return result


def render_tree(graph: DependencyGraph, node: DependencyNode, evaluated: set[int]) -> list[str]:
    """Lines for the tree rooted at ``node``; empty if it was already drawn."""
    builder = TreeBuilder(graph, evaluated)
    if not builder.add_dependency(node, [], 0, ""):
        return []

    lines = [line + " " for line in builder.lines]
    modified = list(lines)
    max_width = max(len(line) for line in lines)

    links = builder.circular_links
    for i, (start, end) in enumerate(links):
        distance = max_width + 2
        # Push the bracket further out for each earlier bracket it overlaps.
        for other_start, other_end in links[:i]:
            if start <= other_end and end >= other_start:
                distance += 2

        for ln in range(start, end + 1):
            is_end = ln in (start, end)
            current = fill_whitespace(
                lines[ln], modified[ln], CIRCULAR_LINE if is_end else " ", distance
            )
            current += CIRCULAR_PIPES[first_second_third(ln - start, end - start + 1)]
            modified[ln] = current

    return [*modified, ""]


def render_graph(graph: DependencyGraph) -> list[str]:
    """Every level, highest first, followed by the circular items."""
    output: list[str] = []
    evaluated: set[int] = set()

    for number in range(len(graph.levels), 0, -1):
        level = graph.levels[number - 1]
        output.append(f"=== LEVEL {number} ({len(level.items)}) ===")
        for node in level.items:
            output.extend(render_tree(graph, node, evaluated))

    top_level_prints = 0
    if graph.circular_links:
        output.append(f"=== CIRCULAR ({len(graph.circular_links)}) ===")
        for node in graph.circular_links:
            lines = render_tree(graph, node, evaluated)
            if lines:
                top_level_prints += 1
                output.extend(lines)

    output.append(f"Finished. Circular Dependencies printed: {top_level_prints}")
    return output


def build_tree_graph(export_dir: Path) -> DependencyGraph:
    """Graph of an export directory, as if nothing had been imported yet."""
    contents = load_export(export_dir)
    return DependencyGraph(
        ((None, record) for record in contents.records), ContentMapping()
    )
