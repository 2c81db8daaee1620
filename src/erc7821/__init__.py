"""
ERC-7821 batch execution utilities.

This package encodes call batches for ERC-7821 compatible accounts, checks
that the account supports the execution mode, submits a single `execute`
transaction and attributes reverts to the call that caused them.
"""

from .abi import DecodedError, decode_error_result, encode_function_data
from .cache import CapabilityCache, get_default_cache
from .calls import (
    Batch,
    Call,
    InterfaceCall,
    RawCall,
    coerce_call,
    encode_batches,
    encode_calls,
    execution_mode_for,
)
from .constants import EXECUTE_ABI, FN_SELECTOR_NOT_RECOGNIZED, ExecutionMode
from .errors import (
    AbiDecodingError,
    ContractFunctionExecutionError,
    EncodingError,
    Erc7821Error,
    ErrorHandler,
    ExecuteUnsupportedError,
    FunctionSelectorNotRecognizedError,
    walk,
)
from .execute import Erc7821Executor, execute, execute_batches
from .probe import supports_execution_mode
from .resolver import resolve_execute_error

__all__ = [
    'AbiDecodingError',
    'Batch',
    'Call',
    'CapabilityCache',
    'ContractFunctionExecutionError',
    'DecodedError',
    'EncodingError',
    'Erc7821Error',
    'Erc7821Executor',
    'ErrorHandler',
    'EXECUTE_ABI',
    'ExecuteUnsupportedError',
    'ExecutionMode',
    'FN_SELECTOR_NOT_RECOGNIZED',
    'FunctionSelectorNotRecognizedError',
    'InterfaceCall',
    'RawCall',
    'coerce_call',
    'decode_error_result',
    'encode_batches',
    'encode_calls',
    'encode_function_data',
    'execute',
    'execute_batches',
    'execution_mode_for',
    'get_default_cache',
    'resolve_execute_error',
    'supports_execution_mode',
    'walk',
]
