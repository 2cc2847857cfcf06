"""External API client implementations."""

from .core_banking_client import HttpCoreBankingClient
from .simulated_core_banking_client import SimulatedCoreBankingClient

__all__ = [
    "HttpCoreBankingClient",
    "SimulatedCoreBankingClient",
]
