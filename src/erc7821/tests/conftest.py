"""Test configuration for the ERC-7821 executor."""
import pytest
from unittest.mock import AsyncMock, MagicMock

from eth_abi import encode

from src.config import ExecutionConfig
from src.erc7821 import CapabilityCache, Erc7821Executor
from src.erc7821.tests.samples import TX_HASH


@pytest.fixture
def cache():
    """Isolated capability cache."""
    return CapabilityCache()


@pytest.fixture
def web3():
    """AsyncWeb3 stand-in whose account supports every mode."""
    client = MagicMock()
    client.uid = "test-client"
    client.eth.call = AsyncMock(return_value=encode(["bool"], [True]))
    client.eth.send_transaction = AsyncMock(return_value=TX_HASH)
    client.eth.send_raw_transaction = AsyncMock(return_value=TX_HASH)
    return client


@pytest.fixture
def executor(web3, cache):
    """Executor over the mocked client with an isolated cache."""
    return Erc7821Executor(web3, cache=cache, config=ExecutionConfig())
