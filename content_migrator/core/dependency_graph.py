"""Dependency graph between content items and their creation order.

Content item bodies embed references to other items as small tagged objects
(content links and content references), and may point at a hierarchy parent
through ``_meta.hierarchy.parentId``. The graph records each of these as a
position inside the owning body so that references can be rewritten in place
once the referenced item exists on the destination hub.

Nodes live in a flat list and every edge is stored as a node index. Levels
are computed by repeatedly peeling off every node whose dependencies are
already satisfied; whatever cannot be peeled takes part in a cycle.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from content_migrator.constants import (
    CONTENT_LINK_SCHEMA,
    CONTENT_REFERENCE_SCHEMA,
)
from content_migrator.core.mapping import ContentMapping
from content_migrator.types import ContentRecord, ContentRepository


class DependencyKind(str, Enum):
    """How a content item refers to another one."""

    CONTENT_LINK = "content-link"
    CONTENT_REFERENCE = "content-reference"
    HIERARCHY = "hierarchy"


_KINDS_BY_SCHEMA = {
    CONTENT_LINK_SCHEMA: DependencyKind.CONTENT_LINK,
    CONTENT_REFERENCE_SCHEMA: DependencyKind.CONTENT_REFERENCE,
}

DependencyMatcher = Callable[[Any], "DependencyKind | None"]


def match_content_dependency(value: Any) -> DependencyKind | None:
    """Return the dependency kind if ``value`` has the shape of an item reference.

    A reference is an object whose ``_meta.schema`` is the content-link or
    content-reference schema, with string ``contentType`` and ``id`` fields.
    Anything else, including partially typed objects, is not a reference.
    """
    if not isinstance(value, dict):
        return None
    meta = value.get("_meta")
    if not isinstance(meta, dict):
        return None
    schema = meta.get("schema")
    kind = _KINDS_BY_SCHEMA.get(schema) if isinstance(schema, str) else None
    if kind is None:
        return None
    if not isinstance(value.get("contentType"), str):
        return None
    if not isinstance(value.get("id"), str):
        return None
    return kind


@dataclass(eq=False)
class ContentDependency:
    """A reference at a fixed position inside its owner's body.

    ``container`` and ``key`` locate the reference object so it can be
    removed and restored; hierarchy dependencies have no container and are
    rewritten through ``_meta.hierarchy.parentId`` instead.
    """

    owner: int
    kind: DependencyKind
    target_id: str
    reference: dict[str, Any] | None = None
    container: dict[str, Any] | list[Any] | None = None
    key: str | int | None = None
    resolved: int | None = None

    @property
    def is_hierarchy(self) -> bool:
        return self.kind is DependencyKind.HIERARCHY


@dataclass(eq=False)
class DependencyNode:
    """A content item with its outgoing dependencies and incoming dependants."""

    index: int
    record: ContentRecord
    repository: ContentRepository | None = None
    dependencies: list[ContentDependency] = field(default_factory=list)
    dependants: list[int] = field(default_factory=list)

    @property
    def id(self) -> str | None:
        return self.record.id

    @property
    def label(self) -> str:
        return self.record.label

    def rewrite_dependency(self, dependency: ContentDependency, new_id: str | None) -> None:
        """Point ``dependency`` at ``new_id``, or remove it from the body when None."""
        if dependency.is_hierarchy:
            meta = self.record.body.setdefault("_meta", {})
            hierarchy = meta.setdefault("hierarchy", {})
            hierarchy["parentId"] = new_id
            return

        reference = dependency.reference
        container = dependency.container
        if container is None:
            # Reference is the body itself; it can only be re-pointed.
            if reference is not None and new_id is not None:
                reference["id"] = new_id
            return

        if new_id is None:
            if isinstance(container, dict):
                container.pop(dependency.key, None)
            else:
                container[dependency.key] = None
            return

        container[dependency.key] = reference
        if reference is not None:
            reference["id"] = new_id


@dataclass
class Level:
    """Nodes that can be written together once earlier levels exist."""

    items: list[DependencyNode] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)


class DependencyGraph:
    """Reference graph for a batch of content items.

    Args:
        items: ``(repository, record)`` pairs making up the batch.
        mapping: Mapping of ids already migrated; their dependants can be
            placed without waiting for them.
        matcher: Predicate recognising reference objects inside bodies.
    """

    def __init__(
        self,
        items: Iterable[tuple[ContentRepository | None, ContentRecord]],
        mapping: ContentMapping | None = None,
        matcher: DependencyMatcher = match_content_dependency,
    ) -> None:
        self._matcher = matcher
        self.nodes: list[DependencyNode] = [
            DependencyNode(index=index, record=record, repository=repository)
            for index, (repository, record) in enumerate(items)
        ]
        self._removed: set[int] = set()

        required_schema: dict[str, None] = {}
        for node in self.nodes:
            self._find_dependencies(node)
            if node.record.schema is not None:
                required_schema[node.record.schema] = None
        self.required_schema: list[str] = list(required_schema)

        self.by_id: dict[str, DependencyNode] = {
            node.id: node for node in self.nodes if node.id is not None
        }
        self._link_dependencies()

        self.all: list[DependencyNode] = list(self.nodes)
        self.levels: list[Level] = []
        self.circular_links: list[DependencyNode] = []
        self.relevel(mapping)

    # -- Construction ---------------------------------------------------------

    def _find_dependencies(self, node: DependencyNode) -> None:
        """Collect every reference in the node's body, depth first."""
        body = node.record.body
        stack: list[tuple[Any, Any, Any]] = [(body, None, None)]
        while stack:
            value, container, key = stack.pop()
            kind = self._matcher(value)
            if kind is not None:
                node.dependencies.append(
                    ContentDependency(
                        owner=node.index,
                        kind=kind,
                        target_id=value["id"],
                        reference=value,
                        container=container,
                        key=key,
                    )
                )
                continue

            if isinstance(value, dict):
                children = [(v, value, k) for k, v in value.items()]
            elif isinstance(value, list):
                children = [(v, value, i) for i, v in enumerate(value)]
            else:
                continue
            # Reversed so the stack visits children in document order.
            stack.extend(
                child for child in reversed(children) if isinstance(child[0], (dict, list))
            )

        parent_id = _hierarchy_parent_id(body)
        if parent_id is not None:
            node.dependencies.append(
                ContentDependency(
                    owner=node.index,
                    kind=DependencyKind.HIERARCHY,
                    target_id=parent_id,
                )
            )

    def _link_dependencies(self) -> None:
        for node in self.nodes:
            for dependency in node.dependencies:
                target = self.by_id.get(dependency.target_id)
                if target is None:
                    continue
                dependency.resolved = target.index
                if node.index not in target.dependants:
                    target.dependants.append(node.index)

    # -- Leveling -------------------------------------------------------------

    def relevel(self, mapping: ContentMapping | None = None) -> None:
        """Partition the remaining nodes into levels and a circular set."""
        resolved = mapping.resolved_ids() if mapping is not None else set()
        remaining = list(self.all)
        levels: list[Level] = []

        while remaining:
            stage = [
                node
                for node in remaining
                if all(dep.target_id in resolved for dep in node.dependencies)
            ]
            if not stage:
                break

            # Ids only count as resolved for the next round.
            resolved.update(node.id for node in stage if node.id is not None)
            placed = {node.index for node in stage}
            remaining = [node for node in remaining if node.index not in placed]
            levels.append(Level(stage))

        self.levels = levels
        self.circular_links = remaining

    # -- Traversal ------------------------------------------------------------

    def node(self, index: int) -> DependencyNode:
        return self.nodes[index]

    def contains(self, content_id: str | None) -> bool:
        """True if an item with this id is still part of the batch."""
        return content_id is not None and content_id in self.by_id

    def traverse_dependants(
        self,
        node: DependencyNode,
        action: Callable[[DependencyNode], None],
        ignore_hierarchy: bool = False,
    ) -> None:
        """Call ``action`` on ``node`` and each transitive dependant, once each.

        With ``ignore_hierarchy`` an edge is only followed when the dependant
        refers to the current node through a link or reference, not just as
        its hierarchy parent.
        """
        visited: set[int] = set()
        stack = [node]
        while stack:
            current = stack.pop()
            if current.index in visited:
                continue
            visited.add(current.index)
            action(current)

            for dependant_index in reversed(current.dependants):
                if dependant_index in visited or dependant_index in self._removed:
                    continue
                dependant = self.nodes[dependant_index]
                if ignore_hierarchy and not any(
                    dep.resolved == current.index and not dep.is_hierarchy
                    for dep in dependant.dependencies
                ):
                    continue
                stack.append(dependant)

    def with_dependants(self, nodes: Iterable[DependencyNode]) -> list[DependencyNode]:
        """Return ``nodes`` plus all their transitive dependants, in batch order."""
        affected: set[int] = set()
        for node in nodes:
            if node.index not in affected:
                self.traverse_dependants(node, lambda n: affected.add(n.index))
        return [node for node in self.all if node.index in affected]

    def missing_dependencies(
        self, mapping: ContentMapping
    ) -> dict[int, list[ContentDependency]]:
        """Dependencies whose target is neither in the batch nor in the mapping."""
        missing: dict[int, list[ContentDependency]] = {}
        for node in self.all:
            for dependency in node.dependencies:
                if self.contains(dependency.target_id):
                    continue
                if mapping.get_content_item(dependency.target_id) is not None:
                    continue
                missing.setdefault(node.index, []).append(dependency)
        return missing

    # -- Mutation -------------------------------------------------------------

    def remove_content(self, nodes: Iterable[DependencyNode]) -> None:
        """Drop nodes from the batch, its levels and its circular set."""
        removed = {node.index for node in nodes}
        if not removed:
            return
        self._removed |= removed

        self.all = [node for node in self.all if node.index not in removed]
        self.circular_links = [
            node for node in self.circular_links if node.index not in removed
        ]
        levels = []
        for level in self.levels:
            items = [node for node in level.items if node.index not in removed]
            if items:
                levels.append(Level(items))
        self.levels = levels
        self.by_id = {
            content_id: node
            for content_id, node in self.by_id.items()
            if node.index not in removed
        }

    def drop_dependencies(
        self, node: DependencyNode, dependencies: Iterable[ContentDependency]
    ) -> None:
        """Forget dependencies that were nulled out of the node's body."""
        dropped = {id(dep) for dep in dependencies}
        node.dependencies = [dep for dep in node.dependencies if id(dep) not in dropped]


def _hierarchy_parent_id(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    meta = body.get("_meta")
    if not isinstance(meta, dict):
        return None
    hierarchy = meta.get("hierarchy")
    if not isinstance(hierarchy, dict):
        return None
    parent_id = hierarchy.get("parentId")
    return parent_id if isinstance(parent_id, str) and parent_id else None
