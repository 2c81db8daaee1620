"""
Capability probing for ERC-7821 execution modes.
"""

import logging
from typing import Any, Hashable, Optional, Union

from eth_abi import decode
from web3 import Web3

from .abi import encode_function_data
from .cache import CapabilityCache, get_default_cache
from .constants import EXECUTE_ABI, ExecutionMode, to_execution_mode

logger = logging.getLogger(__name__)


def capability_cache_key(client_id: Hashable, address: str, mode: ExecutionMode) -> str:
    """Cache key for one (client, address, mode) probe."""
    return f"supportsExecutionMode.{client_id}.{address}.{mode.value}"


def client_identity(client: Any) -> Hashable:
    """Identity of a web3 client for cache keys."""
    return getattr(client, "uid", None) or id(client)


async def query_execution_mode(client: Any, address: str, mode: ExecutionMode) -> bool:
    """
    Ask `address` whether it supports `mode` with a read-only eth_call.

    Remote failures propagate unchanged.
    """
    call_data = encode_function_data(EXECUTE_ABI, "supportsExecutionMode", [mode.word])
    raw = await client.eth.call({"to": address, "data": Web3.to_hex(call_data)})
    (supported,) = decode(["bool"], bytes(raw))
    logger.debug(f"supportsExecutionMode({mode.name}) at {address}: {supported}")
    return bool(supported)


async def supports_execution_mode(
    client: Any,
    address: str,
    mode: Union[ExecutionMode, str, bytes] = ExecutionMode.DEFAULT,
    *,
    cache: Optional[CapabilityCache] = None,
    client_id: Optional[Hashable] = None,
) -> bool:
    """
    Check whether a contract supports an ERC-7821 execution mode.

    The answer is memoized per (client, address, mode) so repeated checks do
    not hit the node again.

    Args:
        client: AsyncWeb3 instance
        address: Contract to query
        mode: ExecutionMode, mode name ("default", "opData", "batchOfBatches")
            or raw 32-byte mode word
        cache: Cache to memoize in (defaults to the process-wide cache)
        client_id: Client identity for the cache key (defaults to the client's)

    Returns:
        True if the contract reports support for the mode
    """
    mode = to_execution_mode(mode)
    address = Web3.to_checksum_address(address)
    cache = cache if cache is not None else get_default_cache()
    if client_id is None:
        client_id = client_identity(client)

    key = capability_cache_key(client_id, address, mode)
    return await cache.get_or_create(
        key, lambda: query_execution_mode(client, address, mode)
    )
