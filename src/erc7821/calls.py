"""
Call descriptors and the ERC-7821 execution data encoder.

A call is either an InterfaceCall (calldata derived from an ABI, a function
name and arguments) or a RawCall (calldata given as bytes). Both encode to the
`(address target, uint256 value, bytes data)` tuple of the `Call[]` schema.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from eth_abi import encode
from hexbytes import HexBytes
from web3 import Web3

from .abi import encode_function_data
from .constants import (
    BATCH_OF_BATCHES_TYPES,
    CALL_BATCH_TYPES,
    CALL_BATCH_WITH_OP_DATA_TYPES,
    ExecutionMode,
)
from .errors import EncodingError

HexLike = Union[str, bytes, bytearray]


@dataclass(frozen=True)
class InterfaceCall:
    """Call whose data is the ABI encoding of `function_name(*args)`."""

    to: str
    abi: Sequence[Dict[str, Any]] = field(repr=False)
    function_name: str
    args: Tuple[Any, ...] = ()
    value: int = 0


@dataclass(frozen=True)
class RawCall:
    """Call with pre-encoded data (empty for plain value transfers)."""

    to: str
    data: HexLike = b""
    value: int = 0


Call = Union[InterfaceCall, RawCall]


@dataclass(frozen=True)
class Batch:
    """One inner batch of a batch-of-batches execution."""

    calls: Sequence[Any]
    op_data: Optional[HexLike] = None


def coerce_call(call: Union[Call, Mapping[str, Any]]) -> Call:
    """
    Turn a call descriptor into an InterfaceCall or RawCall.

    Mappings use the keys `to`, `value`, and either `abi` with
    `functionName`/`function_name` and `args`, or `data`.

    Raises:
        EncodingError: If the descriptor has no target or no function name
    """
    if isinstance(call, (InterfaceCall, RawCall)):
        return call
    if not isinstance(call, Mapping):
        raise EncodingError(f"Unsupported call descriptor: {call!r}")

    to = call.get("to")
    if not to:
        raise EncodingError(f"Call is missing a target address: {dict(call)!r}")
    value = call.get("value") or 0

    if call.get("abi"):
        function_name = call.get("functionName") or call.get("function_name")
        if not function_name:
            raise EncodingError(f"Call to {to} has an ABI but no function name")
        return InterfaceCall(
            to=to,
            abi=call["abi"],
            function_name=function_name,
            args=tuple(call.get("args") or ()),
            value=value,
        )
    return RawCall(to=to, data=call.get("data") or b"", value=value)


def encode_call_data(call: Call) -> bytes:
    """Derive the calldata a single call carries."""
    if isinstance(call, InterfaceCall):
        return encode_function_data(call.abi, call.function_name, call.args)
    try:
        return bytes(HexBytes(call.data))
    except ValueError as e:
        raise EncodingError(f"Invalid call data for {call.to}: {call.data!r}") from e


def _encode_call_tuple(call: Call) -> Tuple[str, int, bytes]:
    try:
        target = Web3.to_checksum_address(call.to)
    except (ValueError, TypeError) as e:
        raise EncodingError(f"Invalid call target: {call.to!r}") from e
    if not isinstance(call.value, int) or call.value < 0:
        raise EncodingError(f"Invalid call value for {target}: {call.value!r}")
    return target, call.value, encode_call_data(call)


def normalize_op_data(op_data: Optional[HexLike]) -> bytes:
    """opData as bytes; empty when absent."""
    try:
        return bytes(HexBytes(op_data)) if op_data else b""
    except ValueError as e:
        raise EncodingError(f"Invalid opData: {op_data!r}") from e


def execution_mode_for(op_data: Optional[HexLike]) -> ExecutionMode:
    """Execution mode implied by the presence of opData."""
    return ExecutionMode.OP_DATA if normalize_op_data(op_data) else ExecutionMode.DEFAULT


def encode_calls(calls: Sequence[Any], op_data: Optional[HexLike] = None) -> bytes:
    """
    Encode calls as ERC-7821 execution data.

    Layout is `abi.encode(Call[] calls)` or, when `op_data` is non-empty,
    `abi.encode(Call[] calls, bytes opData)`.

    Args:
        calls: Call descriptors, in execution order
        op_data: Optional opaque bytes passed through to the contract

    Returns:
        Encoded execution data
    """
    tuples: List[Tuple[str, int, bytes]] = [
        _encode_call_tuple(coerce_call(call)) for call in calls
    ]
    op_data_bytes = normalize_op_data(op_data)
    if op_data_bytes:
        return encode(CALL_BATCH_WITH_OP_DATA_TYPES, [tuples, op_data_bytes])
    return encode(CALL_BATCH_TYPES, [tuples])


def encode_batches(batches: Sequence[Union[Batch, Mapping[str, Any]]]) -> bytes:
    """Encode batches as `abi.encode(bytes[])` of per-batch execution data."""
    encoded = []
    for batch in batches:
        if isinstance(batch, Mapping):
            batch = Batch(
                calls=batch.get("calls") or [],
                op_data=batch.get("opData") or batch.get("op_data"),
            )
        encoded.append(encode_calls(batch.calls, batch.op_data))
    return encode(BATCH_OF_BATCHES_TYPES, [encoded])


def iter_batch_calls(batches: Sequence[Union[Batch, Mapping[str, Any]]]) -> List[Call]:
    """Flatten the calls of every batch, preserving order."""
    flattened = []
    for batch in batches:
        if isinstance(batch, Mapping):
            calls = batch.get("calls") or []
        else:
            calls = batch.calls
        flattened.extend(coerce_call(call) for call in calls)
    return flattened
