"""Cloudflare resource deletion strategies.

Maps binding kinds to their delete calls. Each call is made at most once;
a resource that is already gone counts as deleted.
"""

from __future__ import annotations

import logging
from typing import Optional

from cfdelete.cloudflare.errors import CloudflareError, NotFoundError
from cfdelete.models.binding import BindingType

logger = logging.getLogger(__name__)


class ResourceDeleter:
    """Cloudflare resource deletion dispatcher.

    Attributes:
        client: Object exposing the delete_* methods named in DELETION_METHODS
            plus delete_worker(name)
    """

    # Deletion method mapping: binding type -> client method
    DELETION_METHODS = {
        BindingType.KV: "delete_kv_namespace",
        BindingType.R2: "delete_r2_bucket",
        BindingType.D1: "delete_d1_database",
    }

    # Kinds that resolve without a remote call
    NO_OP_REASONS = {
        BindingType.DURABLE_OBJECT: "Durable Object classes are removed with the worker script",
        BindingType.SERVICE: "Service bindings point at other workers and are never deleted",
        BindingType.QUEUE: "Queues are left in place",
    }

    def __init__(self, client) -> None:
        self.client = client

    def is_no_op(self, resource_type: BindingType) -> bool:
        return resource_type in self.NO_OP_REASONS

    def delete_worker(self, name: str) -> tuple[bool, Optional[str]]:
        """Delete a worker script.

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        try:
            self.client.delete_worker(name)
        except NotFoundError:
            logger.info(f"Worker {name} already deleted")
            return (True, None)
        except CloudflareError as e:
            logger.error(f"Failed to delete worker {name}: {e}")
            return (False, str(e))

        logger.info(f"Successfully deleted worker: {name}")
        return (True, None)

    def delete_resource(self, resource_type: BindingType, resource_id: str) -> tuple[bool, Optional[str]]:
        """Delete a backing resource.

        Args:
            resource_type: Binding kind of the resource
            resource_id: Identifier accepted by the kind's delete call

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        if resource_type in self.NO_OP_REASONS:
            logger.debug(f"No deletion needed for {resource_type.value} {resource_id}")
            return (True, None)

        method = self.DELETION_METHODS.get(resource_type)
        if method is None:
            error_msg = f"Unsupported resource type: {resource_type.value}"
            logger.warning(error_msg)
            return (False, error_msg)

        try:
            getattr(self.client, method)(resource_id)
        except NotFoundError:
            logger.info(f"Resource {resource_type.value} {resource_id} already deleted")
            return (True, None)
        except CloudflareError as e:
            logger.error(f"Failed to delete {resource_type.value} {resource_id}: {e}")
            return (False, str(e))

        logger.info(f"Successfully deleted {resource_type.value}: {resource_id}")
        return (True, None)
