"""
Factory module for creating storage client instances.
"""

import logging
from typing import List
from urllib.parse import urlparse

# Suppress boto3/botocore logging before importing any boto3-related modules
logging.getLogger('botocore').setLevel(logging.CRITICAL)
logging.getLogger('botocore.credentials').setLevel(logging.CRITICAL)
logging.getLogger('boto3').setLevel(logging.CRITICAL)
logging.getLogger('urllib3').setLevel(logging.CRITICAL)
logging.getLogger('s3transfer').setLevel(logging.CRITICAL)

from configuration import HDFS_HOST, HDFS_PORT
from systems.base import StorageClient

logger = logging.getLogger(__name__)

CLIENT_TYPES = ("hdfs", "native", "posix")


def create_storage_system(client_type: str, parameters) -> StorageClient:
    """Create one storage client of the given type.

    Args:
        client_type: 'hdfs', 'native' or 'posix'
        parameters: ClientIOParameters of the run

    Returns:
        A connected StorageClient

    Raises:
        ValueError: If client_type is not supported
    """
    client_type = client_type.lower()

    if client_type == "hdfs":
        from systems.hdfs import HdfsClient

        parsed = urlparse(parameters.base_path)
        host = parsed.hostname or HDFS_HOST
        port = parsed.port or HDFS_PORT
        return HdfsClient(
            host=host,
            port=port,
            block_size=parameters.block_size,
            extra_conf=parameters.conf,
        )

    elif client_type == "native":
        from systems.native import NativeClient

        # one connection per thread sharing this client
        pool_size = max(parameters.threads) // parameters.clients + 1
        return NativeClient.for_object_store(parameters.object_store, max_pool_connections=pool_size)

    elif client_type == "posix":
        from systems.posix import PosixClient

        return PosixClient()

    else:
        raise ValueError(f"Unsupported client type: {client_type}. Must be one of {', '.join(CLIENT_TYPES)}.")


def storage_client_class(client_type: str):
    """Return the client class for client_type without connecting anything."""
    client_type = client_type.lower()
    if client_type == "hdfs":
        from systems.hdfs import HdfsClient
        return HdfsClient
    elif client_type == "native":
        from systems.native import NativeClient
        return NativeClient
    elif client_type == "posix":
        from systems.posix import PosixClient
        return PosixClient
    raise ValueError(f"Unsupported client type: {client_type}. Must be one of {', '.join(CLIENT_TYPES)}.")


def create_client_pool(parameters) -> List[StorageClient]:
    """Create the clients shared round-robin by all workers of the run.

    The POSIX client holds no connection, so one instance is enough.
    """
    if parameters.client_type == "posix":
        count = 1
    else:
        count = parameters.clients

    logger.info(f"Creating {count} {parameters.client_type} client(s)")
    return [create_storage_system(parameters.client_type, parameters) for _ in range(count)]
