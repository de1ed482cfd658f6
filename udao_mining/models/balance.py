from typing import Optional

from sqlalchemy import BigInteger, Column, DateTime, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Session

from .base import Base
from udao_mining.utils.assets import Asset, Symbol


class Balance(Base):
    __tablename__ = "balance_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account = Column(String(12), index=True, nullable=False)
    symbol_code = Column(String(7), index=True, nullable=False)
    precision = Column(Integer, nullable=False)
    amount = Column(BigInteger, nullable=False, default=0)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (UniqueConstraint("account", "symbol_code"),)

    @classmethod
    def find(cls, session: Session, account: str, symbol_code: str) -> Optional["Balance"]:
        return session.query(cls).filter_by(account=account, symbol_code=symbol_code.upper()).first()

    @classmethod
    def get_or_create(cls, session: Session, account: str, symbol: Symbol) -> "Balance":
        balance = cls.find(session, account, symbol.code)
        if not balance:
            balance = cls(account=account, symbol_code=symbol.code, precision=symbol.precision, amount=0)
            session.add(balance)
            session.flush()
        return balance

    @property
    def symbol(self) -> Symbol:
        return Symbol(code=self.symbol_code, precision=self.precision)

    def as_asset(self) -> Asset:
        return Asset(amount=self.amount or 0, symbol=self.symbol)

    def add_amount(self, amount: int) -> None:
        self.amount = (self.amount or 0) + amount

    def subtract_amount(self, amount: int) -> bool:
        if (self.amount or 0) < amount:
            return False
        self.amount = self.amount - amount
        return True

    @classmethod
    def get_total_supply(cls, session: Session, symbol_code: str) -> int:
        result = session.query(func.sum(cls.amount)).filter_by(symbol_code=symbol_code.upper()).scalar()
        return int(result or 0)
