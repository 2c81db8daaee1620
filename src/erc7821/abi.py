"""
Interface-based encoding helpers.

Thin layer over eth_abi/eth_utils that encodes a function call from a JSON ABI
and decodes revert data against the errors an ABI declares.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from eth_abi import decode, encode, is_encodable
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector
from eth_utils.abi import collapse_if_tuple

from .errors import AbiDecodingError, EncodingError

# Errors every Solidity contract can revert with, whatever its ABI declares
SOLIDITY_ERROR = {
    "type": "error",
    "name": "Error",
    "inputs": [{"name": "message", "type": "string"}],
}
SOLIDITY_PANIC = {
    "type": "error",
    "name": "Panic",
    "inputs": [{"name": "reason", "type": "uint256"}],
}


@dataclass
class DecodedError:
    """Revert data decoded against an ABI error entry."""

    name: str
    args: Tuple[Any, ...]
    signature: str
    abi_item: Dict[str, Any] = field(repr=False)

    def __str__(self) -> str:
        rendered = ", ".join(repr(arg) for arg in self.args)
        return f"{self.name}({rendered})"


def input_types(abi_item: Dict[str, Any]) -> List[str]:
    """Canonical ABI types of an item's inputs, tuples collapsed."""
    return [collapse_if_tuple(param) for param in abi_item.get("inputs", [])]


def abi_signature(abi_item: Dict[str, Any]) -> str:
    """Canonical signature such as `transfer(address,uint256)`."""
    return f"{abi_item['name']}({','.join(input_types(abi_item))})"


def abi_selector(abi_item: Dict[str, Any]) -> bytes:
    return function_signature_to_4byte_selector(abi_signature(abi_item))


def get_function_abi(
    abi: Sequence[Dict[str, Any]], function_name: str, args: Sequence[Any]
) -> Dict[str, Any]:
    """
    Find the function entry matching a name and positional arguments.

    Overloads are resolved by argument count, then by which candidate can
    encode the given values.

    Raises:
        EncodingError: If no entry (or no overload) fits
    """
    candidates = [
        item for item in abi
        if item.get("type") == "function" and item.get("name") == function_name
    ]
    if not candidates:
        raise EncodingError(f'Function "{function_name}" not found on ABI')

    sized = [item for item in candidates if len(item.get("inputs", [])) == len(args)]
    if not sized:
        raise EncodingError(
            f'Function "{function_name}" expects '
            f"{len(candidates[0].get('inputs', []))} arguments, got {len(args)}"
        )
    if len(sized) == 1:
        return sized[0]

    for item in sized:
        if all(is_encodable(typ, arg) for typ, arg in zip(input_types(item), args)):
            return item
    raise EncodingError(f'No overload of "{function_name}" accepts arguments {args!r}')


def encode_function_data(
    abi: Sequence[Dict[str, Any]], function_name: str, args: Optional[Sequence[Any]] = None
) -> bytes:
    """
    Encode calldata (selector + arguments) for a function declared in `abi`.

    Raises:
        EncodingError: On unknown function or argument/type mismatch
    """
    args = list(args or [])
    abi_item = get_function_abi(abi, function_name, args)
    try:
        encoded_args = encode(input_types(abi_item), args)
    except Exception as e:
        raise EncodingError(
            f'Failed to encode arguments for "{abi_signature(abi_item)}": {e}'
        ) from e
    return abi_selector(abi_item) + encoded_args


def decode_error_result(abi: Sequence[Dict[str, Any]], data: bytes) -> DecodedError:
    """
    Decode revert data against the errors declared in `abi`.

    Solidity's built-in `Error(string)` and `Panic(uint256)` are always
    recognized.

    Raises:
        AbiDecodingError: If the selector is unknown or the payload is malformed
    """
    data = bytes(data)
    if len(data) < 4:
        raise AbiDecodingError(f"Revert data too short to carry a selector: 0x{data.hex()}")

    selector = data[:4]
    error_items = [item for item in abi if item.get("type") == "error"]
    for item in error_items + [SOLIDITY_ERROR, SOLIDITY_PANIC]:
        if abi_selector(item) != selector:
            continue
        try:
            args = decode(input_types(item), data[4:])
        except DecodingError as e:
            raise AbiDecodingError(
                f'Revert data does not fit "{abi_signature(item)}": {e}'
            ) from e
        return DecodedError(
            name=item["name"],
            args=tuple(args),
            signature=abi_signature(item),
            abi_item=item,
        )

    raise AbiDecodingError(f"Error signature 0x{selector.hex()} not found on ABI")
