"""
Fixed-point asset handling for ledger operations.
Amounts are held as integer counts of the smallest unit so that no ledger
path ever touches floating point. Decimal is used only for display.
"""

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from udao_mining.utils.exceptions import LedgerErrorCodes, LedgerException

MAX_AMOUNT = (1 << 62) - 1
MAX_PRECISION = 18

_SYMBOL_CODE_RE = re.compile(r"^[A-Z]{1,7}$")
_ASSET_RE = re.compile(r"^(-?)([0-9]+)(?:\.([0-9]+))? ([A-Z]{1,7})$")


@dataclass(frozen=True)
class Symbol:
    code: str
    precision: int

    @classmethod
    def parse(cls, text: str) -> "Symbol":
        """Parse the "<precision>,<CODE>" form, e.g. "8,UDAO" """
        if not isinstance(text, str) or "," not in text:
            raise LedgerException(LedgerErrorCodes.INVALID_AMOUNT, f"Invalid symbol: {text!r}")
        precision, code = text.split(",", 1)
        if not precision.isdigit():
            raise LedgerException(LedgerErrorCodes.INVALID_AMOUNT, f"Invalid symbol precision: {text!r}")
        symbol = cls(code=code.strip(), precision=int(precision))
        if not symbol.is_valid():
            raise LedgerException(LedgerErrorCodes.INVALID_AMOUNT, f"Invalid symbol: {text!r}")
        return symbol

    def is_valid(self) -> bool:
        return (
            isinstance(self.code, str)
            and bool(_SYMBOL_CODE_RE.match(self.code))
            and isinstance(self.precision, int)
            and 0 <= self.precision <= MAX_PRECISION
        )

    @property
    def scale(self) -> int:
        return 10**self.precision

    def __str__(self):
        return f"{self.precision},{self.code}"


@dataclass(frozen=True)
class Asset:
    amount: int
    symbol: Symbol

    @classmethod
    def parse(cls, text: str) -> "Asset":
        """Parse "<amount> <CODE>"; the number of fraction digits fixes the precision"""
        if not isinstance(text, str):
            raise LedgerException(LedgerErrorCodes.INVALID_AMOUNT, f"Invalid asset: {text!r}")
        match = _ASSET_RE.match(text.strip())
        if not match:
            raise LedgerException(LedgerErrorCodes.INVALID_AMOUNT, f"Invalid asset: {text!r}")

        sign, whole, fraction, code = match.groups()
        fraction = fraction or ""
        symbol = Symbol(code=code, precision=len(fraction))
        if not symbol.is_valid():
            raise LedgerException(LedgerErrorCodes.INVALID_AMOUNT, f"Invalid asset precision: {text!r}")

        amount = int(whole + fraction)
        if sign:
            amount = -amount
        asset = cls(amount=amount, symbol=symbol)
        if not asset.is_amount_within_range():
            raise LedgerException(LedgerErrorCodes.INVALID_AMOUNT, f"Asset amount out of range: {text!r}")
        return asset

    @classmethod
    def zero(cls, symbol: Symbol) -> "Asset":
        return cls(amount=0, symbol=symbol)

    def is_amount_within_range(self) -> bool:
        return -MAX_AMOUNT <= self.amount <= MAX_AMOUNT

    def is_valid(self) -> bool:
        return isinstance(self.amount, int) and self.is_amount_within_range() and self.symbol.is_valid()

    def to_decimal(self) -> Decimal:
        return Decimal(self.amount).scaleb(-self.symbol.precision)

    def _check_same_symbol(self, other: "Asset") -> None:
        if self.symbol != other.symbol:
            raise LedgerException(
                LedgerErrorCodes.SYMBOL_MISMATCH,
                f"Attempt to combine {self.symbol} with {other.symbol}",
            )

    def _checked(self, amount: int) -> "Asset":
        result = Asset(amount=amount, symbol=self.symbol)
        if not result.is_amount_within_range():
            raise LedgerException(LedgerErrorCodes.INVALID_AMOUNT, "Asset arithmetic overflow")
        return result

    def __add__(self, other: "Asset") -> "Asset":
        self._check_same_symbol(other)
        return self._checked(self.amount + other.amount)

    def __sub__(self, other: "Asset") -> "Asset":
        self._check_same_symbol(other)
        return self._checked(self.amount - other.amount)

    def __mul__(self, factor: int) -> "Asset":
        if not isinstance(factor, int):
            return NotImplemented
        return self._checked(self.amount * factor)

    __rmul__ = __mul__

    def __floordiv__(self, divisor: int) -> "Asset":
        if not isinstance(divisor, int):
            return NotImplemented
        if divisor == 0:
            raise LedgerException(LedgerErrorCodes.INVALID_AMOUNT, "Divide by zero")
        # truncate toward zero for negative amounts
        quotient = abs(self.amount) // abs(divisor)
        if (self.amount < 0) != (divisor < 0):
            quotient = -quotient
        return self._checked(quotient)

    def __lt__(self, other: "Asset") -> bool:
        self._check_same_symbol(other)
        return self.amount < other.amount

    def __le__(self, other: "Asset") -> bool:
        self._check_same_symbol(other)
        return self.amount <= other.amount

    def __str__(self):
        precision = self.symbol.precision
        digits = str(abs(self.amount)).rjust(precision + 1, "0")
        sign = "-" if self.amount < 0 else ""
        if precision:
            return f"{sign}{digits[:-precision]}.{digits[-precision:]} {self.symbol.code}"
        return f"{sign}{digits} {self.symbol.code}"


def to_asset(value: Union[str, Asset]) -> Asset:
    if isinstance(value, Asset):
        return value
    return Asset.parse(value)


def to_symbol(value: Union[str, Symbol]) -> Symbol:
    if isinstance(value, Symbol):
        return value
    return Symbol.parse(value)
