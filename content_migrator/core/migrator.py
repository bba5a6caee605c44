"""
Main migrator class for the content hub migration tool.

A run loads an export directory, replicates its folder structure on the
destination hub, checks that every content type the export needs is
available, works out the order in which items must be written so that
references can be pointed at the new ids, writes them, and optionally
publishes the ones that were published in the export.
"""

from __future__ import annotations

import asyncio
import logging
import posixpath
import time
from collections.abc import Callable
from pathlib import Path

from tqdm import tqdm

from content_migrator.core.action_log import ActionLog
from content_migrator.core.context import MigrationContext
from content_migrator.core.dependency_graph import (
    ContentDependency,
    DependencyGraph,
    DependencyNode,
    Level,
)
from content_migrator.core.folders import FolderResolver
from content_migrator.core.loader import LoadedItem, load_export
from content_migrator.core.mapping import ContentMapping, try_save_mapping
from content_migrator.core.migration_logging import (
    log_migration_failure,
    log_migration_success,
)
from content_migrator.core.publish_queue import PublishQueue
from content_migrator.core.state import MigrationState
from content_migrator.exceptions import (
    ImportFailedError,
    MigrationAbortedError,
    MigratorError,
    PublishError,
)
from content_migrator.services.protocols import HubService, PublishService, Validator
from content_migrator.types import (
    ContentRecord,
    ContentRepository,
    ContentType,
    ContentTypeSchema,
    Folder,
    ImportResult,
    ImportTarget,
)
from content_migrator.utils.api import REMOTE_ERRORS
from content_migrator.utils.logging import log_with_context
from content_migrator.utils.prompts import ConfirmCallback


def content_type_label(schema_uri: str) -> str:
    """Default label for a content type registered from a schema URI."""
    return posixpath.basename(schema_uri.rstrip("/")) or schema_uri


class ContentMigrator:
    """Imports an exported content tree into a hub.

    Args:
        context: Paths, mode flags and configuration for the run.
        hub: Hub service; the dry-run service in dry-run mode.
        confirm: Asked at every decision point; always yes in force mode.
        publisher: Publish service, required when publishing is enabled.
        validator: Validates bodies whose dangling references were removed.
        validator_factory: Builds the validator from the schema catalog loaded
            while checking content types, when no ``validator`` is given.
        mapping: Id mapping to start from; loaded from ``context.mapping_path``
            when that file exists.
    """

    def __init__(
        self,
        context: MigrationContext,
        hub: HubService,
        confirm: ConfirmCallback,
        publisher: PublishService | None = None,
        validator: Validator | None = None,
        mapping: ContentMapping | None = None,
        validator_factory: Callable[[list[ContentTypeSchema]], Validator] | None = None,
    ) -> None:
        self.context = context
        self.config = context.config
        self.hub = hub
        self.confirm = confirm
        self.publisher = publisher
        self.validator = validator
        self.validator_factory = validator_factory
        self.mapping = mapping if mapping is not None else ContentMapping()
        self.state = MigrationState()
        self.action_log = ActionLog(f"{context.log_prefix}Import of {context.import_dir}")
        self.graph: DependencyGraph | None = None

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    async def run(self) -> bool:
        """Run the import. Returns True on success.

        The mapping is saved whatever the outcome, so a failed run can be
        resumed from what it managed to write.
        """
        start = time.monotonic()
        self.state.reset_for_run()
        self._load_mapping()

        try:
            targets = await self.resolve_targets()
            graph = await self.prepare(targets)
            if self.context.validate_only:
                log_with_context(
                    logging.INFO, "--validate was passed, so no content was imported"
                )
            else:
                await self.import_graph(graph)
                await self.publish()
        except MigratorError as e:
            self.action_log.success = False
            self.state.errors.migration_errors.append(str(e))
            log_migration_failure(self, e, time.monotonic() - start)
            return False
        finally:
            self._persist()

        log_migration_success(self, time.monotonic() - start)
        return True

    def _load_mapping(self) -> None:
        path = self.context.mapping_path
        if path is None:
            return
        if self.mapping.load(path):
            log_with_context(
                logging.INFO,
                f"Existing mapping loaded from '{path}', changes will be saved back to it",
            )
        else:
            log_with_context(logging.INFO, f"Creating new mapping file at '{path}'")

    def _persist(self) -> None:
        if self.context.dry_run:
            log_with_context(
                logging.INFO, "[DRY RUN] Mapping and action log were not written"
            )
            return
        try_save_mapping(self.context.mapping_path, self.mapping)
        if self.context.action_log_path is not None and not self.context.validate_only:
            self.action_log.write(self.context.action_log_path)

    # -------------------------------------------------------------------------
    # Step 0: import targets
    # -------------------------------------------------------------------------

    async def resolve_targets(self) -> list[ImportTarget]:
        """Bind the import directory to a base folder, a base repository, or
        to every subdirectory named after a repository on the hub."""
        ctx = self.context
        base_path = str(ctx.import_dir)

        if ctx.base_folder:
            try:
                folder = await self.hub.get_folder(ctx.base_folder)
                if folder.repository_id is None:
                    raise MigrationAbortedError(
                        f"Base folder {ctx.base_folder} has no repository"
                    )
                repository = await self.hub.get_repository(folder.repository_id)
            except REMOTE_ERRORS as e:
                raise MigrationAbortedError(f"Couldn't get base folder: {e}") from e
            return [ImportTarget(repository, base_path, folder)]

        if ctx.base_repo:
            try:
                repository = await self.hub.get_repository(ctx.base_repo)
            except REMOTE_ERRORS as e:
                raise MigrationAbortedError(f"Couldn't get base repository: {e}") from e
            return [ImportTarget(repository, base_path)]

        try:
            repositories = await self.hub.list_repositories()
        except REMOTE_ERRORS as e:
            raise MigrationAbortedError(f"Couldn't get repositories: {e}") from e

        by_label = {repo.label: repo for repo in repositories}
        targets: list[ImportTarget] = []
        missing: list[str] = []
        for path in sorted(p for p in ctx.import_dir.iterdir() if p.is_dir()):
            repository = by_label.get(path.name)
            if repository is None:
                missing.append(path.name)
            else:
                targets.append(ImportTarget(repository, str(path)))

        if missing:
            self.state.errors.unmatched_directories.extend(missing)
            log_with_context(
                logging.WARNING,
                "The following repositories must exist on the destination hub to "
                "import content into them, but don't:",
            )
            for name in missing:
                log_with_context(logging.WARNING, f"  {name}")
            if targets and not self.confirm(
                "These repositories will be skipped during the import, as they need "
                "to be added to the hub manually. Do you want to continue?"
            ):
                raise MigrationAbortedError("Import cancelled: missing repositories")

        if not targets:
            raise MigrationAbortedError(
                "Could not find any matching repositories to import into"
            )
        return targets

    # -------------------------------------------------------------------------
    # Steps 1-4: preparation
    # -------------------------------------------------------------------------

    async def prepare(self, targets: list[ImportTarget]) -> DependencyGraph:
        """Load, place and validate the content, returning the leveled graph."""
        batch = await self.load_content(targets)
        batch = self.filter_existing(batch)

        graph = DependencyGraph(batch, self.mapping)
        self.graph = graph

        types, schemas = await self.preflight_types(graph)
        if self.validator is None and self.validator_factory is not None:
            self.validator = self.validator_factory(schemas)
        self.remove_missing_schema(graph, types, schemas)
        await self.resolve_missing_dependencies(graph)

        graph.relevel(self.mapping)
        self.state.progress.circular_items = len(graph.circular_links)
        log_with_context(
            logging.INFO,
            f"Found {len(graph.levels)} dependency levels in {len(graph.all)} items, "
            f"{len(graph.circular_links)} referencing a circular dependency",
        )
        return graph

    async def load_content(
        self, targets: list[ImportTarget]
    ) -> list[tuple[ContentRepository, ContentRecord]]:
        """Read every target's export and place each record in its folder."""
        batch: list[tuple[ContentRepository, ContentRecord]] = []

        for target in targets:
            repository = target.repository
            resolver = FolderResolver(self.hub, repository, target.base_folder)
            try:
                await resolver.load_root_folders()
            except REMOTE_ERRORS as e:
                raise MigrationAbortedError(
                    f"Could not get base folders for repository {repository.label}: {e}"
                ) from e

            log_with_context(
                logging.INFO,
                f"Scanning structure and content in '{target.base_path}' "
                f"for repository '{repository.label}'",
            )
            contents = load_export(Path(target.base_path), self.config.exclude_keys)
            folders = await asyncio.gather(
                *(self._resolve_folder(resolver, item) for item in contents.items)
            )

            for item, folder in zip(contents.items, folders):
                item.record.repository_id = repository.id
                item.record.folder_id = folder.id if folder is not None else None
                batch.append((repository, item.record))

            self.state.count("folders_created", resolver.folders_created)

        self.state.count("items_loaded", len(batch))
        return batch

    async def _resolve_folder(
        self, resolver: FolderResolver, item: LoadedItem
    ) -> Folder | None:
        try:
            return await resolver.resolve(item.folder_path)
        except REMOTE_ERRORS as e:
            log_with_context(
                logging.WARNING,
                f"Placing '{item.record.label}' at the import root, "
                f"folder '{item.folder_path}' is unavailable: {e}",
            )
            self.state.errors.folder_failures.append(item.folder_path)
            return resolver.base_folder

    def filter_existing(
        self, batch: list[tuple[ContentRepository, ContentRecord]]
    ) -> list[tuple[ContentRepository, ContentRecord]]:
        """Ask whether already-mapped items should be updated or skipped."""
        existing = [
            record
            for _, record in batch
            if self.mapping.get_content_item(record.id) is not None
        ]
        if not existing:
            return batch

        if self.confirm(
            f"{len(existing)} of the items being imported already exist in the "
            "mapping. Would you like to update these content items instead of "
            "skipping them?"
        ):
            return batch

        for record in existing:
            self.state.record_removed(record, "already imported")
        return [
            (repository, record)
            for repository, record in batch
            if self.mapping.get_content_item(record.id) is None
        ]

    async def preflight_types(
        self, graph: DependencyGraph
    ) -> tuple[list[ContentType], list[ContentTypeSchema]]:
        """Make sure the content types the batch needs exist and are assigned."""
        try:
            types = await self.hub.list_content_types()
            schemas = await self.hub.list_content_type_schemas()
        except REMOTE_ERRORS as e:
            raise MigrationAbortedError(f"Could not load content types: {e}") from e

        types_by_schema = {t.content_type_uri: t for t in types}
        missing_types = [s for s in graph.required_schema if s not in types_by_schema]
        registrable = [s for s in schemas if s.schema_id in missing_types]

        if missing_types:
            log_with_context(
                logging.WARNING, "Required content types are missing from the target hub"
            )
        if registrable:
            log_with_context(
                logging.WARNING,
                "The following required content type schemas exist, but do not "
                "exist as content types:",
            )
            for schema in registrable:
                log_with_context(logging.WARNING, f"  {schema.schema_id}")
            if not self.confirm(
                "Content types can be automatically created for these schemas, but it "
                "is not recommended as they will have a default name and lack any "
                "configuration. Are you sure you wish to continue?"
            ):
                raise MigrationAbortedError("Import cancelled: missing content types")

            log_with_context(
                logging.WARNING, f"Creating {len(registrable)} missing content types"
            )
            for schema in registrable:
                try:
                    content_type = await self.hub.register_content_type(
                        schema.schema_id, content_type_label(schema.schema_id)
                    )
                except REMOTE_ERRORS as e:
                    raise MigrationAbortedError(
                        f"Could not register content type for {schema.schema_id}: {e}"
                    ) from e
                types.append(content_type)
                types_by_schema[schema.schema_id] = content_type

        await self._assign_types(graph, types_by_schema)

        for schema_uri in graph.required_schema:
            content_type = types_by_schema.get(schema_uri)
            if content_type is not None:
                self.mapping.register_content_type(schema_uri, content_type.id)

        return types, schemas

    async def _assign_types(
        self, graph: DependencyGraph, types_by_schema: dict[str, ContentType]
    ) -> None:
        expected: dict[str, tuple[ContentRepository, dict[str, ContentType]]] = {}
        for node in graph.all:
            content_type = types_by_schema.get(node.record.schema or "")
            if content_type is None or node.repository is None:
                continue
            entry = expected.setdefault(node.repository.id, (node.repository, {}))
            entry[1][content_type.id] = content_type

        missing = [
            (repository, content_type)
            for repository, content_types in expected.values()
            for content_type in content_types.values()
            if content_type.id not in repository.content_type_ids
        ]
        if not missing:
            return

        log_with_context(
            logging.WARNING,
            "Some content items are using types incompatible with the target "
            "repository. Missing assignments:",
        )
        for repository, content_type in missing:
            label = content_type.label or "<no label>"
            log_with_context(
                logging.WARNING,
                f"  {repository.label} - {label} ({content_type.content_type_uri})",
            )
        if not self.confirm(
            "These assignments will be created automatically. Are you sure you "
            "still wish to continue?"
        ):
            raise MigrationAbortedError("Import cancelled: missing type assignments")

        log_with_context(
            logging.WARNING, f"Creating {len(missing)} missing repository assignments"
        )
        try:
            await asyncio.gather(
                *(
                    self.hub.assign_content_type(repository, content_type)
                    for repository, content_type in missing
                )
            )
        except REMOTE_ERRORS as e:
            raise MigrationAbortedError(f"Failed creating repository assignments: {e}") from e

        for repository, content_type in missing:
            if content_type.id not in repository.content_type_ids:
                repository.content_type_ids.append(content_type.id)

    def remove_missing_schema(
        self,
        graph: DependencyGraph,
        types: list[ContentType],
        schemas: list[ContentTypeSchema],
    ) -> None:
        """Skip items whose schema is unknown to the hub, with their dependants."""
        known = {s.schema_id for s in schemas} | {t.content_type_uri for t in types}
        missing = [s for s in graph.required_schema if s not in known]
        unusable = [
            node
            for node in graph.all
            if node.record.schema is None or node.record.schema in missing
        ]
        if not unusable:
            return

        log_with_context(
            logging.WARNING,
            "Required content type schema are missing from the target hub:",
        )
        for schema in missing:
            log_with_context(logging.WARNING, f"  {schema}")
        log_with_context(
            logging.WARNING,
            "All content referencing this content type schema, and any content "
            "depending on those items will be skipped.",
        )

        affected = graph.with_dependants(unusable)
        before = len(graph.all)
        graph.remove_content(affected)
        for node in affected:
            self.state.record_removed(node.record, "missing schema")

        if not graph.all:
            raise MigrationAbortedError(
                "No content remains after removing those with missing content type schemas"
            )
        if not self.confirm(
            f"{len(affected)} out of {before} content items will be skipped. "
            "Are you sure you still wish to continue?"
        ):
            raise MigrationAbortedError("Import cancelled: missing schemas")

        log_with_context(
            logging.WARNING, f"Skipping {len(affected)} content items due to missing schemas"
        )

    async def resolve_missing_dependencies(self, graph: DependencyGraph) -> None:
        """Handle references to items that are neither imported nor mapped.

        With ``skip_incomplete`` the referring items are skipped. Otherwise the
        references are removed, and items that no longer validate without
        them are skipped.
        """
        missing = graph.missing_dependencies(self.mapping)
        if not missing:
            return

        total = len(graph.all)
        owners = [graph.node(index) for index in missing]
        missing_ids = list(
            dict.fromkeys(dep.target_id for deps in missing.values() for dep in deps)
        )

        if self.config.skip_incomplete:
            removed = graph.with_dependants(owners)
            graph.remove_content(removed)
            for node in removed:
                self.state.record_removed(node.record, "missing dependency")
        else:
            for index, dependencies in missing.items():
                node = graph.node(index)
                for dependency in dependencies:
                    node.rewrite_dependency(dependency, None)
                graph.drop_dependencies(node, dependencies)

            errors = await asyncio.gather(
                *(self._validation_errors(node.record) for node in owners)
            )
            must_skip = [node for node, found in zip(owners, errors) if found]
            if must_skip:
                log_with_context(
                    logging.WARNING,
                    "Required dependencies for the following content items are "
                    "missing, and would cause validation errors if set null. "
                    "These items will be skipped:",
                )
                for node in must_skip:
                    log_with_context(logging.WARNING, f"  {node.label}")
                removed = graph.with_dependants(must_skip)
                graph.remove_content(removed)
                for node in removed:
                    self.state.record_removed(node.record, "invalid without dependency")

        action = "skipped" if self.config.skip_incomplete else "set as null"
        log_with_context(
            logging.WARNING,
            "Referenced content items (targets of links/references) are missing "
            "from the import and mapping:",
        )
        for content_id in missing_ids:
            log_with_context(logging.WARNING, f"  {content_id}")
        log_with_context(
            logging.WARNING,
            f"All references to these content items will be {action}. Note: if you "
            "have already imported these items before, make sure you are using a "
            "mapping file from that import.",
        )

        if not graph.all:
            raise MigrationAbortedError(
                "No content remains after removing those with missing dependencies"
            )
        for node in owners:
            log_with_context(logging.INFO, f"  {node.label}")
        if not self.confirm(
            f"{len(owners)} out of {total} content items will be affected. "
            "Are you sure you still wish to continue?"
        ):
            raise MigrationAbortedError("Import cancelled: missing dependencies")

        log_with_context(
            logging.WARNING,
            f"{len(owners)} content items {action} due to missing references",
        )

    async def _validation_errors(self, record: ContentRecord) -> list[str]:
        if self.validator is None:
            return []
        try:
            return await self.validator.validate(record.body)
        except Exception as e:
            # A schema that cannot be loaded is not a reason to skip the item.
            log_with_context(
                logging.DEBUG, f"Could not validate {record.label}, ignoring: {e}"
            )
            return []

    # -------------------------------------------------------------------------
    # Steps 5-6: writing content
    # -------------------------------------------------------------------------

    async def import_graph(self, graph: DependencyGraph) -> None:
        """Write every level in order, then the circular items in two passes.

        Raises:
            ImportFailedError: If any create or update fails. Items written
                before the failure stay registered in the mapping.
        """
        log_with_context(
            logging.INFO, f"{self.context.log_prefix}Importing {len(graph.all)} content items"
        )
        publishable: list[tuple[ContentRecord, DependencyNode]] = []

        for level in tqdm(graph.levels, desc="Importing content", unit="level"):
            results = await self._import_level(level)
            for node, result in zip(level.items, results):
                if self._should_publish(node.record, result):
                    publishable.append((result.record, node))
            self.state.progress.levels_completed += 1

        top_level = self._filter_publishable(graph, publishable)
        circular = await self._import_circular(graph)

        self.state.publish.publishable = top_level + circular

    async def _import_level(self, level: Level) -> list[ImportResult]:
        semaphore = asyncio.Semaphore(self.config.max_concurrent_writes)
        failures: list[tuple[DependencyNode, Exception]] = []

        async def write(node: DependencyNode) -> ImportResult | None:
            async with semaphore:
                if failures:
                    return None
                try:
                    existing = self.mapping.get_content_item(node.id)
                    return await self._import_node(node, existing, allow_null=False)
                except REMOTE_ERRORS as e:
                    failures.append((node, e))
                    return None

        results = await asyncio.gather(*(write(node) for node in level.items))

        if failures:
            for node, error in failures:
                message = f"Failed creating {node.label}: {error}"
                log_with_context(logging.ERROR, message, content_id=node.id)
                self.state.errors.migration_errors.append(message)
            raise ImportFailedError("Importing content item failed, aborting")

        return [result for result in results if result is not None]

    async def _import_circular(self, graph: DependencyGraph) -> list[ContentRecord]:
        """Create circular items with what can be resolved, then point them at
        each other. Returns the records to publish from the second pass."""
        circular = graph.circular_links
        if not circular:
            return []

        first_pass: list[ContentRecord | None] = [None] * len(circular)
        publishable: list[ContentRecord] = []

        for pass_index in (0, 1):
            mode = "Creating" if pass_index == 0 else "Resolving"
            log_with_context(logging.INFO, f"{mode} circular dependants")

            for i, node in enumerate(circular):
                existing: ContentRecord | str | None
                if pass_index == 0:
                    existing = self.mapping.get_content_item(node.id)
                else:
                    existing = first_pass[i]

                try:
                    result = await self._import_node(
                        node, existing, allow_null=pass_index == 0, register=pass_index == 0
                    )
                except REMOTE_ERRORS as e:
                    message = f"Failed creating {node.label}: {e}"
                    log_with_context(logging.ERROR, message, content_id=node.id)
                    self.state.errors.migration_errors.append(message)
                    raise ImportFailedError("Importing content item failed, aborting") from e

                if pass_index == 0:
                    first_pass[i] = result.record
                elif self._should_publish(node.record, result):
                    publishable.append(result.record)

        return publishable

    async def _import_node(
        self,
        node: DependencyNode,
        existing: ContentRecord | str | None,
        allow_null: bool,
        register: bool = True,
    ) -> ImportResult:
        record = node.record
        for dependency in node.dependencies:
            self._rewrite(node, dependency, allow_null)

        result = await self.create_or_update(node.repository, existing, record)
        if not register:
            return result

        self.action_log.record_import(record.label, result)
        self.state.count("items_updated" if result.updated else "items_created")
        if record.id is not None and result.record.id is not None:
            self.mapping.register_content_item(record.id, result.record.id)
        log_with_context(
            logging.DEBUG,
            f"{self.context.log_prefix}{'Updated' if result.updated else 'Created'} {record.label}",
            content_id=result.record.id,
        )
        return result

    def _rewrite(
        self, node: DependencyNode, dependency: ContentDependency, allow_null: bool
    ) -> None:
        new_id = self.mapping.get_content_item(dependency.target_id)
        if new_id is None and not allow_null:
            new_id = dependency.target_id
        node.rewrite_dependency(dependency, new_id)

    async def create_or_update(
        self,
        repository: ContentRepository | None,
        existing: ContentRecord | str | None,
        record: ContentRecord,
    ) -> ImportResult:
        """Create ``record``, or update the hub item it was mapped to before.

        ``existing`` is either the hub item itself or its id.
        """
        current = (
            await self.hub.get_content_item(existing)
            if isinstance(existing, str)
            else existing
        )

        if current is None:
            if repository is None:
                raise ImportFailedError(f"No repository to create {record.label} in")
            created = await self.hub.create_content_item(repository, record)
            result = ImportResult(record=created, old_version=0)
        else:
            old_version = current.version or 0
            if current.archived:
                # Archived items must be unarchived before they can be updated.
                current = await self.hub.unarchive_content_item(current)
            record.version = current.version
            updated = await self.hub.update_content_item(current, record)
            result = ImportResult(record=updated, old_version=old_version)

        if record.locale is not None and result.record.locale != record.locale:
            await self.hub.set_locale(result.record, record.locale)

        return result

    # -------------------------------------------------------------------------
    # Step 7: publishing
    # -------------------------------------------------------------------------

    def _should_publish(self, record: ContentRecord, result: ImportResult) -> bool:
        return record.publish and (result.changed or self.config.republish)

    def _filter_publishable(
        self,
        graph: DependencyGraph,
        publishable: list[tuple[ContentRecord, DependencyNode]],
    ) -> list[ContentRecord]:
        """Drop items that will be published as part of a dependant's publish.

        Publishing an item also publishes the items it links to or references,
        so only items with no publishable dependant need their own request.
        """
        candidates = {node.index for _, node in publishable}
        top_level: list[ContentRecord] = []
        children = 0

        for record, node in publishable:
            covered = False

            def visit(dependant: DependencyNode, node: DependencyNode = node) -> None:
                nonlocal covered
                if dependant is not node and dependant.index in candidates:
                    covered = True

            graph.traverse_dependants(node, visit, ignore_hierarchy=True)
            if covered:
                children += 1
            else:
                top_level.append(record)

        if children:
            log_with_context(
                logging.INFO,
                f"{children} publishable items are published through a dependant",
            )
        return top_level

    async def publish(self) -> None:
        """Publish the eligible records, waiting for every job to finish."""
        if not self.config.should_publish:
            return

        publishable = self.state.publish.publishable
        if self.publisher is None:
            log_with_context(
                logging.WARNING,
                f"No publish service available, {len(publishable)} items not published",
            )
            return

        queue = PublishQueue(self.publisher, self.config.publish_queue)
        log_with_context(
            logging.INFO, f"{self.context.log_prefix}Publishing {len(publishable)} items"
        )

        for record in tqdm(publishable, desc="Starting publishes", unit="item"):
            try:
                await queue.submit(record)
            except PublishError as e:
                log_with_context(logging.WARNING, str(e), content_id=record.id)
                continue
            self.state.count("publishes_started")

        log_with_context(logging.INFO, "Waiting for all publishes to complete...")
        await queue.drain()

        self.state.publish.completed_jobs = list(queue.completed_jobs)
        self.state.publish.failed_jobs = list(queue.failed_jobs)
        failed = len(queue.failed_jobs)
        log_with_context(
            logging.INFO, f"Finished publishing, with {failed} failed publishes total"
        )
        for job in queue.failed_jobs:
            log_with_context(logging.WARNING, f" - {job.record.label}: {job.error}")
