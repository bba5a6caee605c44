#!/usr/bin/env python3
"""
Content hub migration tool
"""

__version__ = "0.1.0"

from content_migrator.core.config import MigrationConfig, load_config
from content_migrator.core.dependency_graph import DependencyGraph
from content_migrator.core.mapping import ContentMapping
from content_migrator.core.migrator import ContentMigrator
from content_migrator.core.publish_queue import PublishQueue
