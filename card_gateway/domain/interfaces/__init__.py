"""
Domain Interfaces (Ports)
"""

from .repositories import ApplicationRepository
from .clients import CoreBankingClient

__all__ = [
    "ApplicationRepository",
    "CoreBankingClient",
]
