"""
ERC-7821 batch execution.

This module submits one or more calls through the `execute` function of an
ERC-7821 compatible account. Support for the execution mode is confirmed
before any gas is spent, and reverts are traced back to the call that caused
them.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from hexbytes import HexBytes
from web3 import AsyncWeb3, Web3

from ..config.execution import ExecutionConfig
from .abi import encode_function_data
from .cache import CapabilityCache, get_default_cache
from .calls import (
    Batch,
    HexLike,
    encode_batches,
    encode_calls,
    execution_mode_for,
    iter_batch_calls,
)
from .constants import EXECUTE_ABI, ExecutionMode
from .errors import ErrorHandler, ExecuteUnsupportedError
from .probe import client_identity, supports_execution_mode
from .resolver import resolve_execute_error

logger = logging.getLogger(__name__)


def delegated_address(authorization_list: Optional[Sequence[Any]]) -> Optional[str]:
    """Contract address the first EIP-7702 authorization delegates to."""
    if not authorization_list:
        return None
    first = authorization_list[0]
    if isinstance(first, Mapping):
        return first.get("address") or first.get("contractAddress")
    return getattr(first, "address", None)


class Erc7821Executor:
    """
    Executes call batches on ERC-7821 compatible contracts.

    Args:
        web3: AsyncWeb3 instance used for probing and submission
        cache: Capability cache (defaults to the process-wide cache)
        config: Execution configuration
    """

    def __init__(
        self,
        web3: AsyncWeb3,
        cache: Optional[CapabilityCache] = None,
        config: Optional[ExecutionConfig] = None,
    ):
        self.web3 = web3
        self.config = config or ExecutionConfig()
        self.cache = cache if cache is not None else get_default_cache(
            self.config.cache_max_entries
        )
        self.uid = client_identity(web3)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.error_handler = ErrorHandler(self.logger, self.config.LOG_REVERT_DATA)

    async def supports_execution_mode(
        self, address: str, mode: Union[ExecutionMode, str, bytes] = ExecutionMode.DEFAULT
    ) -> bool:
        """Check (memoized) whether `address` supports `mode`."""
        return await supports_execution_mode(
            self.web3, address, mode, cache=self.cache, client_id=self.uid
        )

    async def execute(
        self,
        address: str,
        calls: Sequence[Any],
        *,
        op_data: Optional[HexLike] = None,
        **tx_params: Any,
    ) -> HexBytes:
        """
        Execute calls through the account's `execute` function.

        Args:
            address: Account that executes the calls
            calls: InterfaceCall/RawCall instances or call dicts, in order
            op_data: Optional extra data; selects the opData execution mode
            **tx_params: Transaction parameters passed through unchanged
                (account, authorization_list, gas, gas_price, max_fee_per_gas,
                max_priority_fee_per_gas, nonce, chain_id, value)

        Returns:
            Transaction hash

        Raises:
            EncodingError: If a call cannot be encoded
            ExecuteUnsupportedError: If the contract does not support the mode
            FunctionSelectorNotRecognizedError: If the contract rejected the mode
            ContractFunctionExecutionError: If the revert matches one of the calls
        """
        execution_data = encode_calls(calls, op_data)
        mode = execution_mode_for(op_data)
        return await self._execute(address, mode, execution_data, calls, tx_params)

    async def execute_batches(
        self,
        address: str,
        batches: Sequence[Union[Batch, Mapping[str, Any]]],
        **tx_params: Any,
    ) -> HexBytes:
        """
        Execute several batches in one transaction (batch-of-batches mode).

        Each batch carries its own calls and optional opData. Errors are
        resolved against the calls of every batch, in order.
        """
        execution_data = encode_batches(batches)
        calls = iter_batch_calls(batches)
        return await self._execute(
            address, ExecutionMode.BATCH_OF_BATCHES, execution_data, calls, tx_params
        )

    async def _execute(
        self,
        address: str,
        mode: ExecutionMode,
        execution_data: bytes,
        calls: Sequence[Any],
        tx_params: Dict[str, Any],
    ) -> HexBytes:
        address = Web3.to_checksum_address(address)
        authorization_list = tx_params.get("authorization_list")
        probe_target = delegated_address(authorization_list) or address

        if not await self.supports_execution_mode(probe_target, mode):
            error = ExecuteUnsupportedError(probe_target, mode.name)
            self.error_handler.log_error(error, {"address": address, "mode": mode.name})
            raise error

        data = encode_function_data(EXECUTE_ABI, "execute", [mode.word, execution_data])
        self.logger.info(
            f"Submitting execute to {address} "
            f"(mode={mode.name}, calls={len(calls)}, payload={len(data)} bytes)"
        )

        try:
            return await self._send_transaction(address, data, **tx_params)
        except Exception as e:
            resolved = resolve_execute_error(e, calls, address)
            self.error_handler.log_error(
                resolved, {"address": address, "mode": mode.name, "call_count": len(calls)}
            )
            if resolved is e:
                raise
            raise resolved from e

    async def _send_transaction(
        self,
        to: str,
        data: bytes,
        *,
        account: Any = None,
        authorization_list: Optional[Sequence[Any]] = None,
        gas: Optional[int] = None,
        gas_price: Optional[int] = None,
        max_fee_per_gas: Optional[int] = None,
        max_priority_fee_per_gas: Optional[int] = None,
        nonce: Optional[int] = None,
        chain_id: Optional[int] = None,
        value: Optional[int] = None,
    ) -> HexBytes:
        """
        Submit the execute transaction.

        Local accounts (anything with `sign_transaction`) are signed here and
        broadcast raw; otherwise the node signs for the `from` address.
        """
        tx: Dict[str, Any] = {"to": to, "data": Web3.to_hex(data)}
        optional = {
            "authorizationList": authorization_list,
            "gas": gas,
            "gasPrice": gas_price,
            "maxFeePerGas": max_fee_per_gas,
            "maxPriorityFeePerGas": max_priority_fee_per_gas,
            "nonce": nonce,
            "chainId": chain_id,
            "value": value,
        }
        tx.update({key: val for key, val in optional.items() if val is not None})

        if account is not None and hasattr(account, "sign_transaction"):
            tx["from"] = account.address
            await self._fill_local_transaction(tx)
            signed = account.sign_transaction(tx)
            raw = getattr(signed, "raw_transaction", None) or signed.rawTransaction
            return await self.web3.eth.send_raw_transaction(raw)

        if account is not None:
            tx["from"] = Web3.to_checksum_address(account)
        return await self.web3.eth.send_transaction(tx)

    async def _fill_local_transaction(self, tx: Dict[str, Any]):
        """Fill the fields a locally signed transaction needs."""
        eth = self.web3.eth
        if "nonce" not in tx:
            tx["nonce"] = await eth.get_transaction_count(tx["from"], "pending")
        if "chainId" not in tx:
            tx["chainId"] = await eth.chain_id
        if "gas" not in tx:
            tx["gas"] = await eth.estimate_gas(tx)
        if "gasPrice" in tx:
            return

        block = await eth.get_block("latest")
        base_fee = block.get("baseFeePerGas")
        if base_fee is None:
            # Pre-London chains only price legacy transactions
            if "maxFeePerGas" not in tx and "maxPriorityFeePerGas" not in tx:
                tx["gasPrice"] = await eth.gas_price
                return
            base_fee = 0

        if "maxPriorityFeePerGas" not in tx:
            tx["maxPriorityFeePerGas"] = await eth.max_priority_fee
        if "maxFeePerGas" not in tx:
            tx["maxFeePerGas"] = base_fee * 2 + tx["maxPriorityFeePerGas"]


async def execute(
    web3: AsyncWeb3,
    address: str,
    calls: Sequence[Any],
    *,
    op_data: Optional[HexLike] = None,
    cache: Optional[CapabilityCache] = None,
    **tx_params: Any,
) -> HexBytes:
    """
    Convenience function to execute calls on an ERC-7821 account.

    Args:
        web3: AsyncWeb3 instance
        address: Account that executes the calls
        calls: Calls to execute, in order
        op_data: Optional extra data for the opData execution mode
        cache: Capability cache (defaults to the process-wide cache)
        **tx_params: Transaction parameters passed through unchanged

    Returns:
        Transaction hash
    """
    executor = Erc7821Executor(web3, cache=cache)
    return await executor.execute(address, calls, op_data=op_data, **tx_params)


async def execute_batches(
    web3: AsyncWeb3,
    address: str,
    batches: Sequence[Union[Batch, Mapping[str, Any]]],
    *,
    cache: Optional[CapabilityCache] = None,
    **tx_params: Any,
) -> HexBytes:
    """Convenience function to execute several batches in one transaction."""
    executor = Erc7821Executor(web3, cache=cache)
    return await executor.execute_batches(address, batches, **tx_params)
