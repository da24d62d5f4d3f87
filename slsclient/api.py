"""High-level client exposing one method per service operation."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from .checkpoint import get_checkpoint_request, update_checkpoint_request
from .client import Client, ClientConfig, Response, Signer, Transport
from .consumer_group import (
    create_consumer_group_request,
    delete_consumer_group_request,
    heartbeat_request,
    list_consumer_groups_request,
    update_consumer_group_request,
)
from .cursor import CursorPos, get_cursor_request, list_shards_request
from .logs import get_logs_request
from .logstore import create_logstore_request, delete_logstore_request, get_logstore_request
from .logstore_list import list_logstores_request
from .logstore_update import update_logstore_request


class LogServiceClient:
    """Client of the log service; every method returns a parsed Response."""

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: Transport | None = None,
        signer: Signer | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.client = Client(config, transport, signer, sleep)

    def get_cursor(
        self, project: str, logstore: str, shard_id: int, cursor_pos: CursorPos | int
    ) -> Response:
        """Get a cursor of a shard at the beginning, the end or a Unix timestamp."""
        return self.client.send(get_cursor_request(project, logstore, shard_id, cursor_pos))

    def list_shards(self, project: str, logstore: str) -> Response:
        """List all shards of a logstore."""
        return self.client.send(list_shards_request(project, logstore))

    def get_logs(
        self, project: str, logstore: str, from_time: int, to_time: int, **kwargs: Any
    ) -> Response:
        """Query logs between two Unix timestamps in seconds."""
        return self.client.send(
            get_logs_request(project, logstore, from_time, to_time, **kwargs)
        )

    def create_consumer_group(
        self, project: str, logstore: str, consumer_group: str, timeout: int, order: bool
    ) -> Response:
        """Create a consumer group."""
        return self.client.send(
            create_consumer_group_request(project, logstore, consumer_group, timeout, order)
        )

    def update_consumer_group(
        self, project: str, logstore: str, consumer_group: str, timeout: int, order: bool
    ) -> Response:
        """Change the timeout and ordering of a consumer group."""
        return self.client.send(
            update_consumer_group_request(project, logstore, consumer_group, timeout, order)
        )

    def delete_consumer_group(
        self, project: str, logstore: str, consumer_group: str
    ) -> Response:
        """Delete a consumer group."""
        return self.client.send(
            delete_consumer_group_request(project, logstore, consumer_group)
        )

    def list_consumer_groups(self, project: str, logstore: str) -> Response:
        """List the consumer groups of a logstore."""
        return self.client.send(list_consumer_groups_request(project, logstore))

    def consumer_group_heartbeat(
        self,
        project: str,
        logstore: str,
        consumer_group: str,
        consumer: str,
        shards: Iterable[int] | None = None,
    ) -> Response:
        """Send a heartbeat; the response lists the shards assigned to the consumer."""
        return self.client.send(
            heartbeat_request(project, logstore, consumer_group, consumer, shards)
        )

    def get_consumer_group_checkpoint(
        self, project: str, logstore: str, consumer_group: str, shard_id: int | None = None
    ) -> Response:
        """Get checkpoints of a consumer group, of one shard or of all."""
        return self.client.send(
            get_checkpoint_request(project, logstore, consumer_group, shard_id)
        )

    def update_consumer_group_checkpoint(
        self,
        project: str,
        logstore: str,
        consumer_group: str,
        shard_id: int,
        consumer_id: str,
        checkpoint: str,
        force_success: bool | None = None,
    ) -> Response:
        """Store the checkpoint of a shard."""
        return self.client.send(
            update_checkpoint_request(
                project,
                logstore,
                consumer_group,
                shard_id,
                consumer_id,
                checkpoint,
                force_success,
            )
        )

    def create_logstore(
        self, project: str, logstore_name: str, shard_count: int, ttl: int, **kwargs: Any
    ) -> Response:
        """Create a logstore."""
        return self.client.send(
            create_logstore_request(project, logstore_name, shard_count, ttl, **kwargs)
        )

    def update_logstore(self, project: str, logstore_name: str, **kwargs: Any) -> Response:
        """Update the settings of a logstore."""
        return self.client.send(update_logstore_request(project, logstore_name, **kwargs))

    def delete_logstore(self, project: str, logstore_name: str) -> Response:
        """Delete a logstore and all of its data."""
        return self.client.send(delete_logstore_request(project, logstore_name))

    def get_logstore(self, project: str, logstore_name: str) -> Response:
        """Get the settings of a logstore."""
        return self.client.send(get_logstore_request(project, logstore_name))

    def list_logstores(
        self, project: str, offset: int, size: int, **kwargs: Any
    ) -> Response:
        """List a page of logstores of a project."""
        return self.client.send(list_logstores_request(project, offset, size, **kwargs))