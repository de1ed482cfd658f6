from typing import Optional

from sqlalchemy import BigInteger, Column, Integer, String
from sqlalchemy.orm import Session

from .base import Base
from udao_mining.utils.assets import Asset, Symbol


class SupplyRecord(Base):
    __tablename__ = "supply_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    symbol_code = Column(String(7), unique=True, index=True, nullable=False)
    precision = Column(Integer, nullable=False)
    current_supply = Column(BigInteger, nullable=False, default=0)
    max_supply = Column(BigInteger, nullable=False)
    issuer = Column(String(12), nullable=False)
    created_at = Column(BigInteger, nullable=False, comment="Seconds since epoch")
    last_reward_at = Column(
        BigInteger,
        nullable=False,
        comment="Seconds since epoch of the last reward tranche boundary",
    )

    @classmethod
    def find(cls, session: Session, symbol_code: str) -> Optional["SupplyRecord"]:
        return session.query(cls).filter_by(symbol_code=symbol_code.upper()).first()

    @property
    def symbol(self) -> Symbol:
        return Symbol(code=self.symbol_code, precision=self.precision)

    @property
    def supply(self) -> Asset:
        return Asset(amount=self.current_supply, symbol=self.symbol)

    @property
    def maximum(self) -> Asset:
        return Asset(amount=self.max_supply, symbol=self.symbol)

    @property
    def available(self) -> int:
        return self.max_supply - self.current_supply

    def to_dict(self) -> dict:
        return {
            "symbol": str(self.symbol),
            "supply": str(self.supply),
            "max_supply": str(self.maximum),
            "issuer": self.issuer,
            "created_at": self.created_at,
            "last_reward_at": self.last_reward_at,
        }
