"""
Error handling utilities for ERC-7821 execution.

This module provides the exception hierarchy raised by the executor, the
helpers that dig revert data out of wrapped web3 exceptions, and an
ErrorHandler that classifies and logs failures.
"""

import logging
from typing import Any, Callable, Dict, Optional, Sequence

from hexbytes import HexBytes

logger = logging.getLogger(__name__)


class Erc7821Error(Exception):
    """Base exception for ERC-7821 operations."""
    pass


class EncodingError(Erc7821Error):
    """Raised when a call cannot be encoded."""
    pass


class AbiDecodingError(Erc7821Error):
    """Raised when revert data does not decode against an ABI."""
    pass


class ExecuteUnsupportedError(Erc7821Error):
    """Raised before submission when the target does not support the mode."""

    def __init__(self, address: Optional[str] = None, mode: Optional[str] = None):
        message = "ERC-7821 execution is not supported."
        if address:
            message += f"\n\nAddress: {address}"
        if mode:
            message += f"\nMode:    {mode}"
        super().__init__(message)
        self.address = address
        self.mode = mode


class FunctionSelectorNotRecognizedError(Erc7821Error):
    """Raised when the contract reverted with `FnSelectorNotRecognized()`."""

    def __init__(self, address: Optional[str] = None):
        message = "Function is not recognized."
        if address:
            message += (
                f"\n\nThe contract at {address} reverted with FnSelectorNotRecognized(); "
                "it does not implement ERC-7821 execute for the requested mode."
            )
        super().__init__(message)
        self.address = address


class ContractFunctionExecutionError(Erc7821Error):
    """
    A revert attributed to one specific call of an executed batch.

    The low-level submission failure is kept as `__cause__`.
    """

    def __init__(
        self,
        cause: BaseException,
        *,
        abi: Sequence[Dict[str, Any]],
        address: str,
        function_name: str,
        args: Sequence[Any] = (),
        error_name: Optional[str] = None,
        error_args: Sequence[Any] = (),
        revert_data: Optional[bytes] = None,
    ):
        self.abi = abi
        self.address = address
        self.function_name = function_name
        self.function_args = tuple(args)
        self.error_name = error_name
        self.error_args = tuple(error_args)
        self.revert_data = revert_data
        self.cause = cause
        super().__init__(self._format_message())
        self.__cause__ = cause

    @property
    def reason(self) -> Optional[str]:
        """Revert reason string for `Error(string)` reverts."""
        if self.error_name == "Error" and self.error_args:
            return str(self.error_args[0])
        return None

    def _format_message(self) -> str:
        lines = [f'The contract function "{self.function_name}" reverted.']
        if self.reason is not None:
            lines.append(f"\nReason: {self.reason}")
        elif self.error_name:
            rendered = ", ".join(repr(arg) for arg in self.error_args)
            lines.append(f"\nError: {self.error_name}({rendered})")
        lines.append("\nContract Call:")
        lines.append(f"  address:   {self.address}")
        lines.append(f"  function:  {self.function_name}")
        if self.function_args:
            lines.append(f"  args:      ({', '.join(repr(arg) for arg in self.function_args)})")
        lines.append(f"\nDetails: {self.cause}")
        return "\n".join(lines)


def walk(
    error: BaseException, predicate: Callable[[BaseException], bool]
) -> Optional[BaseException]:
    """
    Follow an exception's cause chain until `predicate` matches.

    Explicit causes (`raise ... from`) are preferred over implicit context.

    Returns:
        The first matching exception, or None when the chain ends
    """
    seen = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        if predicate(current):
            return current
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return None


def _as_revert_bytes(value: Any) -> Optional[bytes]:
    if not isinstance(value, (str, bytes, bytearray)):
        return None
    try:
        data = bytes(HexBytes(value))
    except ValueError:
        return None
    return data or None


def get_revert_data(error: BaseException) -> Optional[bytes]:
    """
    Extract embedded revert bytes from an exception, if any.

    Understands web3's `ContractLogicError.data`, the `rpc_response` of RPC
    errors and raw JSON-RPC error dicts passed as the first argument.
    """
    data = _as_revert_bytes(getattr(error, "data", None))
    if data is not None:
        return data

    rpc_response = getattr(error, "rpc_response", None)
    if isinstance(rpc_response, dict):
        rpc_error = rpc_response.get("error")
        if isinstance(rpc_error, dict):
            data = _as_revert_bytes(rpc_error.get("data"))
            if data is not None:
                return data

    if error.args and isinstance(error.args[0], dict):
        return _as_revert_bytes(error.args[0].get("data"))

    return None


def find_revert_error(error: BaseException) -> Optional[BaseException]:
    """First exception in the cause chain that carries revert data."""
    return walk(error, lambda e: get_revert_data(e) is not None)


class ErrorHandler:
    """
    Centralized error handling for execute operations.

    Classifies failures so they are logged at a level that matches how
    actionable they are.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, log_revert_data: bool = False):
        self.logger = logger or logging.getLogger(__name__)
        self.log_revert_data = log_revert_data

    def classify_error(self, error: BaseException) -> str:
        """
        Classify an error into a category for appropriate handling.

        Args:
            error: Exception to classify

        Returns:
            Error category string
        """
        if isinstance(error, ExecuteUnsupportedError):
            return 'unsupported'
        if isinstance(error, FunctionSelectorNotRecognizedError):
            return 'selector'
        if isinstance(error, (ContractFunctionExecutionError, AbiDecodingError)):
            return 'contract'
        if isinstance(error, EncodingError):
            return 'validation'

        error_str = str(error).lower()

        # Network connectivity errors
        if any(keyword in error_str for keyword in ['connection', 'timeout', 'network', 'dns']):
            return 'network'

        # Contract execution errors
        if any(keyword in error_str for keyword in ['revert', 'execution reverted', 'out of gas']):
            return 'contract'

        # Validation errors
        if any(keyword in error_str for keyword in ['invalid', 'bad request', '400']):
            return 'validation'

        return 'unknown'

    def log_error(self, error: BaseException, context: Dict[str, Any]):
        """
        Log error with appropriate level and context.

        Args:
            error: Exception to log
            context: Additional context for logging
        """
        error_category = self.classify_error(error)

        log_data = {
            'error_type': type(error).__name__,
            'error_category': error_category,
            'error_message': str(error),
            **context
        }

        if self.log_revert_data:
            revert_error = find_revert_error(error)
            if revert_error is not None:
                log_data['revert_data'] = '0x' + get_revert_data(revert_error).hex()

        # Pre-flight and validation failures are caller mistakes
        if error_category in ('unsupported', 'validation'):
            self.logger.warning("Execute rejected", extra=log_data)
        elif error_category in ('contract', 'selector'):
            self.logger.error("Contract execution failed", extra=log_data)
        else:
            self.logger.warning("Execute operation error", extra=log_data)
