"""
ERC-7821 interface constants.

ABI fragments, execution mode words and the error selector a compliant
contract reverts with when it does not recognize the requested mode.
"""

from enum import Enum
from typing import List, Union

from eth_utils import function_signature_to_4byte_selector
from hexbytes import HexBytes

EXECUTE_ABI: List[dict] = [
    {"type": "fallback", "stateMutability": "payable"},
    {"type": "receive", "stateMutability": "payable"},
    {
        "type": "function",
        "name": "execute",
        "inputs": [
            {"name": "mode", "type": "bytes32"},
            {"name": "executionData", "type": "bytes"},
        ],
        "outputs": [],
        "stateMutability": "payable",
    },
    {
        "type": "function",
        "name": "supportsExecutionMode",
        "inputs": [{"name": "mode", "type": "bytes32"}],
        "outputs": [{"name": "result", "type": "bool"}],
        "stateMutability": "view",
    },
]


class ExecutionMode(str, Enum):
    """32-byte mode words understood by `execute`."""

    DEFAULT = "0x0100000000000000000000000000000000000000000000000000000000000000"
    OP_DATA = "0x0100000000007821000100000000000000000000000000000000000000000000"
    BATCH_OF_BATCHES = "0x0100000000007821000200000000000000000000000000000000000000000000"

    @property
    def word(self) -> bytes:
        return bytes(HexBytes(self.value))


MODE_NAMES = {
    "default": ExecutionMode.DEFAULT,
    "opData": ExecutionMode.OP_DATA,
    "batchOfBatches": ExecutionMode.BATCH_OF_BATCHES,
}


def to_execution_mode(mode: Union[ExecutionMode, str, bytes]) -> ExecutionMode:
    """
    Normalize a mode given as enum, name or raw 32-byte word.

    Raises:
        ValueError: If the mode is not one of the known ERC-7821 modes
    """
    if isinstance(mode, ExecutionMode):
        return mode
    if isinstance(mode, str) and mode in MODE_NAMES:
        return MODE_NAMES[mode]
    word = HexBytes(mode)
    for candidate in ExecutionMode:
        if candidate.word == bytes(word):
            return candidate
    raise ValueError(f"Unknown execution mode: {mode!r}")


FN_SELECTOR_NOT_RECOGNIZED_SIGNATURE = "FnSelectorNotRecognized()"
FN_SELECTOR_NOT_RECOGNIZED: bytes = function_signature_to_4byte_selector(
    FN_SELECTOR_NOT_RECOGNIZED_SIGNATURE
)

CALL_TUPLE = "(address,uint256,bytes)"
CALL_BATCH_TYPES = [f"{CALL_TUPLE}[]"]
CALL_BATCH_WITH_OP_DATA_TYPES = [f"{CALL_TUPLE}[]", "bytes"]
BATCH_OF_BATCHES_TYPES = ["bytes[]"]
