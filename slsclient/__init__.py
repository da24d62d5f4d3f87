"""Client for a cloud log service: logstores, shards, cursors, log queries and consumer groups."""

__version__ = "0.1.0"

__all__ = [
    "api",
    "checkpoint",
    "client",
    "consumer_group",
    "cursor",
    "errors",
    "logs",
    "logstore",
    "logstore_list",
    "logstore_update",
]