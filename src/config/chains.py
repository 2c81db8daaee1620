"""
Chain-specific configuration for the ERC-7821 executor.
"""

from dataclasses import dataclass
from typing import Dict

from web3 import AsyncHTTPProvider, AsyncWeb3

from .base import BaseConfig


@dataclass
class ChainConfig(BaseConfig):
    """Chain-specific configuration for different blockchains."""

    # Default chain settings
    DEFAULT_CHAIN: str = BaseConfig.get_env("DEFAULT_CHAIN", "ethereum")

    # Chain-specific RPC URLs
    ETHEREUM_RPC_URL: str = BaseConfig.get_env(
        "ETHEREUM_RPC_URL", "http://127.0.0.1:8545"
    )
    BASE_RPC_URL: str = BaseConfig.get_env("BASE_RPC_URL", "https://mainnet.base.org")
    ARBITRUM_RPC_URL: str = BaseConfig.get_env(
        "ARBITRUM_RPC_URL", "https://arb1.arbitrum.io/rpc"
    )

    # Chain IDs
    ETHEREUM_CHAIN_ID: int = 1
    BASE_CHAIN_ID: int = 8453
    ARBITRUM_CHAIN_ID: int = 42161

    # Seconds before an RPC request is abandoned
    RPC_TIMEOUT: int = BaseConfig.get_env_int("RPC_TIMEOUT", 30)

    @property
    def supported_chains(self) -> Dict[str, Dict]:
        """Get configuration for all supported chains."""
        return {
            "ethereum": {
                "chain_id": self.ETHEREUM_CHAIN_ID,
                "rpc_url": self.ETHEREUM_RPC_URL,
                "native_token": "ETH",
                "explorer_url": "https://etherscan.io",
            },
            "base": {
                "chain_id": self.BASE_CHAIN_ID,
                "rpc_url": self.BASE_RPC_URL,
                "native_token": "ETH",
                "explorer_url": "https://basescan.org",
            },
            "arbitrum": {
                "chain_id": self.ARBITRUM_CHAIN_ID,
                "rpc_url": self.ARBITRUM_RPC_URL,
                "native_token": "ETH",
                "explorer_url": "https://arbiscan.io",
            },
        }

    def get_chain_config(self, chain_name: str) -> Dict:
        """Get configuration for a specific chain."""
        if chain_name not in self.supported_chains:
            raise ValueError(f"Unsupported chain: {chain_name}")
        return self.supported_chains[chain_name]

    def get_rpc_url(self, chain_name: str) -> str:
        """Get RPC URL for a specific chain."""
        return self.get_chain_config(chain_name)["rpc_url"]

    def get_chain_id(self, chain_name: str) -> int:
        """Get chain ID for a specific chain."""
        return self.get_chain_config(chain_name)["chain_id"]

    def make_web3(self, chain_name: str = None) -> AsyncWeb3:
        """
        Build an async Web3 client for a chain.

        Args:
            chain_name: Chain to connect to (defaults to DEFAULT_CHAIN)

        Returns:
            AsyncWeb3 instance over an HTTP provider
        """
        rpc_url = self.get_rpc_url(chain_name or self.DEFAULT_CHAIN)
        return AsyncWeb3(
            AsyncHTTPProvider(
                rpc_url, request_kwargs={"timeout": self.RPC_TIMEOUT}
            )
        )
