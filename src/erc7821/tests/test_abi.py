"""
Tests for interface-based encoding and error decoding.
"""

import pytest
from eth_abi import decode

from src.erc7821 import AbiDecodingError, EncodingError, decode_error_result, encode_function_data
from src.erc7821.abi import abi_signature, get_function_abi
from src.erc7821.tests.samples import RECIPIENT, TOKEN_ABI, VAULT_ABI, error_data

OVERLOADED_ABI = [
    {
        "type": "function",
        "name": "set",
        "inputs": [{"name": "value", "type": "uint256"}],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "set",
        "inputs": [{"name": "value", "type": "string"}],
        "outputs": [],
    },
]

TUPLE_ABI = [
    {
        "type": "error",
        "name": "BadOrder",
        "inputs": [
            {
                "name": "order",
                "type": "tuple",
                "components": [
                    {"name": "maker", "type": "address"},
                    {"name": "amount", "type": "uint256"},
                ],
            }
        ],
    }
]


class TestEncodeFunctionData:
    """Function call encoding from an ABI."""

    def test_selector_and_arguments(self):
        data = encode_function_data(TOKEN_ABI, "transfer", [RECIPIENT, 10])

        assert data[:4] == bytes.fromhex("a9059cbb")
        to, amount = decode(["address", "uint256"], data[4:])
        assert to.lower() == RECIPIENT.lower()
        assert amount == 10

    def test_overload_resolved_by_argument_type(self):
        as_int = encode_function_data(OVERLOADED_ABI, "set", [1])
        as_str = encode_function_data(OVERLOADED_ABI, "set", ["one"])

        assert as_int[:4] != as_str[:4]
        assert get_function_abi(OVERLOADED_ABI, "set", ["one"])["inputs"][0]["type"] == "string"

    def test_unencodable_argument_raises(self):
        with pytest.raises(EncodingError, match="transfer"):
            encode_function_data(TOKEN_ABI, "transfer", [RECIPIENT, "ten"])

    def test_tuple_signature_collapses_components(self):
        assert abi_signature(TUPLE_ABI[0]) == "BadOrder((address,uint256))"


class TestDecodeErrorResult:
    """Revert data decoding against an ABI."""

    def test_custom_error(self):
        data = error_data("InsufficientBalance(uint256,uint256)", ["uint256", "uint256"], [1, 2])

        decoded = decode_error_result(TOKEN_ABI, data)

        assert decoded.name == "InsufficientBalance"
        assert decoded.args == (1, 2)
        assert str(decoded) == "InsufficientBalance(1, 2)"

    def test_builtin_error_string_matches_any_abi(self):
        data = error_data("Error(string)", ["string"], ["insufficient allowance"])

        decoded = decode_error_result(VAULT_ABI, data)

        assert decoded.name == "Error"
        assert decoded.args == ("insufficient allowance",)

    def test_builtin_panic(self):
        decoded = decode_error_result([], error_data("Panic(uint256)", ["uint256"], [0x11]))
        assert decoded.name == "Panic"
        assert decoded.args == (0x11,)

    def test_unknown_selector_raises(self):
        with pytest.raises(AbiDecodingError, match="not found"):
            decode_error_result(TOKEN_ABI, error_data("VaultPaused()"))

    def test_truncated_payload_raises(self):
        data = error_data("InsufficientBalance(uint256,uint256)", ["uint256"], [1])
        with pytest.raises(AbiDecodingError, match="does not fit"):
            decode_error_result(TOKEN_ABI, data)

    def test_short_data_raises(self):
        with pytest.raises(AbiDecodingError, match="too short"):
            decode_error_result(TOKEN_ABI, b"\x01\x02")

    def test_tuple_error(self):
        data = error_data("BadOrder((address,uint256))", ["(address,uint256)"], [(RECIPIENT, 5)])

        decoded = decode_error_result(TUPLE_ABI, data)

        assert decoded.name == "BadOrder"
        assert decoded.args[0][1] == 5
