"""
Attribute an execute revert to the call that caused it.
"""

import logging
from typing import Any, Optional, Sequence

from .abi import DecodedError, decode_error_result
from .calls import Call, InterfaceCall, coerce_call
from .constants import FN_SELECTOR_NOT_RECOGNIZED
from .errors import (
    ContractFunctionExecutionError,
    FunctionSelectorNotRecognizedError,
    find_revert_error,
    get_revert_data,
)

logger = logging.getLogger(__name__)


def match_call(
    calls: Sequence[Call], revert_data: bytes
) -> Optional[tuple]:
    """
    Find the first call whose ABI decodes `revert_data`.

    Calls without an ABI cannot match and are skipped.

    Returns:
        (call, decoded error) for the first match, or None
    """
    for index, call in enumerate(calls):
        if not isinstance(call, InterfaceCall):
            continue
        try:
            decoded = decode_error_result(call.abi, revert_data)
        except Exception as e:
            logger.debug(f"Revert data does not match call {index} ({call.to}): {e}")
            continue
        return call, decoded
    return None


def resolve_execute_error(
    error: BaseException, calls: Sequence[Any], address: Optional[str] = None
) -> BaseException:
    """
    Turn an execute submission failure into the most specific error available.

    Args:
        error: Exception raised while submitting the execute transaction
        calls: The calls that were executed, in order
        address: Account the transaction was sent to

    Returns:
        FunctionSelectorNotRecognizedError for the sentinel revert,
        ContractFunctionExecutionError naming the matched call, or `error`
        itself when the revert cannot be attributed
    """
    revert_error = find_revert_error(error)
    if revert_error is None:
        return error

    revert_data = get_revert_data(revert_error)
    if revert_data == FN_SELECTOR_NOT_RECOGNIZED:
        return FunctionSelectorNotRecognizedError(address)

    matched = match_call([coerce_call(call) for call in calls], revert_data)
    if matched is None:
        return error

    call, decoded = matched
    return contract_error_for(error, call, decoded, revert_data)


def contract_error_for(
    cause: BaseException, call: InterfaceCall, decoded: DecodedError, revert_data: bytes
) -> ContractFunctionExecutionError:
    return ContractFunctionExecutionError(
        cause,
        abi=call.abi,
        address=call.to,
        function_name=call.function_name,
        args=call.args,
        error_name=decoded.name,
        error_args=decoded.args,
        revert_data=revert_data,
    )
