"""
Ledger rule validation service
"""

from typing import Optional

from sqlalchemy.orm import Session

from udao_mining.config import settings
from udao_mining.models.supply import SupplyRecord
from udao_mining.utils.assets import Asset, Symbol
from udao_mining.utils.exceptions import LedgerErrorCodes, ValidationResult


class LedgerValidator:
    """Validate actions against the ledger rules before any state is touched"""

    def __init__(self, db_session: Session, memo_max_bytes: Optional[int] = None):
        self.db = db_session
        self.memo_max_bytes = memo_max_bytes or settings.MEMO_MAX_BYTES

    def get_supply_record(self, symbol_code: str) -> Optional[SupplyRecord]:
        return SupplyRecord.find(self.db, symbol_code)

    def validate_memo(self, memo: str) -> ValidationResult:
        if memo is None:
            return ValidationResult(True)
        if not isinstance(memo, str):
            return ValidationResult(False, LedgerErrorCodes.MALFORMED_ACTION, "memo must be a string")
        if len(memo.encode("utf-8")) > self.memo_max_bytes:
            return ValidationResult(
                False,
                LedgerErrorCodes.MEMO_TOO_LONG,
                f"memo has more than {self.memo_max_bytes} bytes",
            )
        return ValidationResult(True)

    def validate_symbol(self, symbol: Symbol) -> ValidationResult:
        if not symbol.is_valid():
            return ValidationResult(False, LedgerErrorCodes.INVALID_AMOUNT, f"invalid symbol name: {symbol}")
        return ValidationResult(True)

    def validate_quantity(self, quantity: Asset, action: str) -> ValidationResult:
        if not quantity.is_valid():
            return ValidationResult(False, LedgerErrorCodes.INVALID_AMOUNT, f"invalid quantity: {quantity}")
        if quantity.amount <= 0:
            return ValidationResult(
                False,
                LedgerErrorCodes.INVALID_AMOUNT,
                f"must {action} positive quantity",
            )
        return ValidationResult(True)

    def validate_symbol_matches(self, symbol: Symbol, supply: SupplyRecord) -> ValidationResult:
        if symbol != supply.symbol:
            return ValidationResult(
                False,
                LedgerErrorCodes.SYMBOL_MISMATCH,
                f"symbol precision mismatch: {symbol} != {supply.symbol}",
            )
        return ValidationResult(True)

    def validate_create(self, max_supply: Asset) -> ValidationResult:
        if not max_supply.is_valid():
            return ValidationResult(False, LedgerErrorCodes.INVALID_AMOUNT, "invalid supply")
        if max_supply.amount <= 0:
            return ValidationResult(False, LedgerErrorCodes.INVALID_AMOUNT, "max-supply must be positive")

        if self.get_supply_record(max_supply.symbol.code) is not None:
            return ValidationResult(
                False,
                LedgerErrorCodes.ALREADY_EXISTS,
                f"token with symbol {max_supply.symbol.code} already exists",
            )
        return ValidationResult(True)

    def validate_issue(self, quantity: Asset, supply: SupplyRecord) -> ValidationResult:
        result = self.validate_quantity(quantity, "issue")
        if not result:
            return result

        result = self.validate_symbol_matches(quantity.symbol, supply)
        if not result:
            return result

        if quantity.amount > supply.available:
            return ValidationResult(
                False,
                LedgerErrorCodes.SUPPLY_EXCEEDED,
                f"quantity {quantity} exceeds available supply {supply.available}",
            )
        return ValidationResult(True)

    def validate_retire(self, quantity: Asset, supply: SupplyRecord) -> ValidationResult:
        result = self.validate_quantity(quantity, "retire")
        if not result:
            return result
        return self.validate_symbol_matches(quantity.symbol, supply)

    def validate_transfer(self, quantity: Asset, supply: SupplyRecord) -> ValidationResult:
        result = self.validate_quantity(quantity, "transfer")
        if not result:
            return result
        return self.validate_symbol_matches(quantity.symbol, supply)
