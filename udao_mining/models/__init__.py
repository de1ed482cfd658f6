from .base import Base
from .balance import Balance
from .supply import SupplyRecord

__all__ = [
    "Base",
    "Balance",
    "SupplyRecord",
]
