"""Core migration logic including configuration, dependency ordering and orchestration."""

__all__ = [
    "action_log",
    "config",
    "context",
    "dependency_graph",
    "folders",
    "loader",
    "mapping",
    "migration_logging",
    "migrator",
    "publish_queue",
    "revert",
    "state",
    "tree_printer",
]
