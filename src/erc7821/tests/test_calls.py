"""
Tests for call descriptors and execution data encoding.
"""

import pytest
from eth_abi import decode, encode

from src.erc7821 import (
    Batch,
    EncodingError,
    ExecutionMode,
    InterfaceCall,
    RawCall,
    coerce_call,
    encode_batches,
    encode_calls,
    encode_function_data,
    execution_mode_for,
)
from src.erc7821.calls import encode_call_data, iter_batch_calls

from src.erc7821.tests.samples import RECIPIENT, TOKEN, TOKEN_ABI, VAULT

CALLS_TYPE = ["(address,uint256,bytes)[]"]
CALLS_WITH_OP_DATA_TYPE = ["(address,uint256,bytes)[]", "bytes"]


class TestExecutionMode:
    """Mode selection from opData."""

    @pytest.mark.parametrize("op_data", [None, b"", "", "0x"])
    def test_default_without_op_data(self, op_data):
        assert execution_mode_for(op_data) is ExecutionMode.DEFAULT

    @pytest.mark.parametrize("op_data", [b"\x01", "0x01", "0xdeadbeef"])
    def test_op_data_mode_with_op_data(self, op_data):
        assert execution_mode_for(op_data) is ExecutionMode.OP_DATA

    def test_mode_words_are_32_bytes(self):
        for mode in ExecutionMode:
            assert len(mode.word) == 32


class TestCallData:
    """Per-call data derivation."""

    def test_interface_call_uses_abi_encoding(self):
        call = InterfaceCall(to=TOKEN, abi=TOKEN_ABI, function_name="transfer", args=(RECIPIENT, 5))
        expected = encode_function_data(TOKEN_ABI, "transfer", [RECIPIENT, 5])
        assert encode_call_data(call) == expected
        assert expected[:4].hex() == "a9059cbb"

    def test_raw_call_uses_given_data(self):
        assert encode_call_data(RawCall(to=TOKEN, data="0xdead")) == b"\xde\xad"

    def test_raw_call_without_data_is_empty(self):
        assert encode_call_data(RawCall(to=TOKEN, value=1)) == b""

    def test_invalid_raw_data_raises(self):
        with pytest.raises(EncodingError, match="Invalid call data"):
            encode_call_data(RawCall(to=TOKEN, data="0xzz"))


class TestCoerceCall:
    """Dict descriptors become tagged variants."""

    def test_dict_with_abi_becomes_interface_call(self):
        call = coerce_call({
            "to": TOKEN,
            "abi": TOKEN_ABI,
            "functionName": "transfer",
            "args": [RECIPIENT, 1],
        })
        assert isinstance(call, InterfaceCall)
        assert call.function_name == "transfer"
        assert call.args == (RECIPIENT, 1)
        assert call.value == 0

    def test_dict_without_abi_becomes_raw_call(self):
        call = coerce_call({"to": VAULT, "value": 100})
        assert call == RawCall(to=VAULT, data=b"", value=100)

    def test_missing_target_raises(self):
        with pytest.raises(EncodingError, match="target"):
            coerce_call({"data": "0x"})

    def test_abi_without_function_name_raises(self):
        with pytest.raises(EncodingError, match="function name"):
            coerce_call({"to": TOKEN, "abi": TOKEN_ABI})


class TestEncodeCalls:
    """Execution data layout."""

    def test_two_call_example(self):
        calls = [{"to": TOKEN, "data": "0xdead"}, {"to": VAULT, "value": 100}]

        encoded = encode_calls(calls)

        assert encoded == encode(CALLS_TYPE, [[(TOKEN, 0, b"\xde\xad"), (VAULT, 100, b"")]])
        (decoded,) = decode(CALLS_TYPE, encoded)
        assert decoded[0][0].lower() == TOKEN.lower()
        assert decoded[0][1:] == (0, b"\xde\xad")
        assert decoded[1][0].lower() == VAULT.lower()
        assert decoded[1][1:] == (100, b"")
        assert execution_mode_for(None) is ExecutionMode.DEFAULT

    def test_op_data_appended_as_trailing_bytes(self):
        calls = [RawCall(to=TOKEN, data=b"\x01")]

        encoded = encode_calls(calls, op_data="0xbeef")

        assert encoded == encode(CALLS_WITH_OP_DATA_TYPE, [[(TOKEN, 0, b"\x01")], b"\xbe\xef"])

    def test_empty_op_data_is_omitted(self):
        calls = [RawCall(to=TOKEN)]
        assert encode_calls(calls, op_data="0x") == encode_calls(calls)

    def test_encoding_is_deterministic(self):
        calls = [
            InterfaceCall(to=TOKEN, abi=TOKEN_ABI, function_name="transfer", args=(RECIPIENT, 7)),
            RawCall(to=VAULT, data="0x1234", value=3),
        ]
        assert encode_calls(calls, b"\x09") == encode_calls(calls, b"\x09")

    def test_lowercase_target_is_normalized(self):
        lower = encode_calls([RawCall(to=TOKEN.lower())])
        checksummed = encode_calls([RawCall(to=TOKEN)])
        assert lower == checksummed

    def test_invalid_target_raises(self):
        with pytest.raises(EncodingError, match="Invalid call target"):
            encode_calls([RawCall(to="0x1234")])

    def test_negative_value_raises(self):
        with pytest.raises(EncodingError, match="Invalid call value"):
            encode_calls([RawCall(to=TOKEN, value=-1)])

    def test_unknown_function_raises(self):
        call = InterfaceCall(to=TOKEN, abi=TOKEN_ABI, function_name="approve", args=(RECIPIENT, 1))
        with pytest.raises(EncodingError, match="not found"):
            encode_calls([call])

    def test_argument_mismatch_raises(self):
        call = InterfaceCall(to=TOKEN, abi=TOKEN_ABI, function_name="transfer", args=(RECIPIENT,))
        with pytest.raises(EncodingError, match="expects 2 arguments"):
            encode_calls([call])


class TestEncodeBatches:
    """Batch-of-batches layout."""

    def test_each_batch_encoded_as_bytes(self):
        first = [RawCall(to=TOKEN, data="0x01")]
        second = [RawCall(to=VAULT, value=2)]

        encoded = encode_batches([Batch(first), {"calls": second, "opData": "0xff"}])

        (inner,) = decode(["bytes[]"], encoded)
        assert list(inner) == [encode_calls(first), encode_calls(second, "0xff")]

    def test_iter_batch_calls_preserves_order(self):
        batches = [
            Batch([RawCall(to=TOKEN)]),
            {"calls": [{"to": VAULT, "value": 1}]},
        ]
        calls = iter_batch_calls(batches)
        assert [call.to for call in calls] == [TOKEN, VAULT]
