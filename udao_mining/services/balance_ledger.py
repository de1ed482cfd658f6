import structlog
from sqlalchemy.orm import Session

from udao_mining.models.balance import Balance
from udao_mining.models.supply import SupplyRecord
from udao_mining.runtime.contracts import ActionContext
from udao_mining.utils.assets import Asset, Symbol
from udao_mining.utils.exceptions import LedgerErrorCodes, LedgerException, check

logger = structlog.get_logger()


class BalanceLedger:
    """Per-account holdings. Every credit/debit pair keeps balances summing to supply."""

    def __init__(self, db_session: Session):
        self.db = db_session

    def get_balance(self, account: str, symbol_code: str) -> Asset:
        balance = Balance.find(self.db, account, symbol_code)
        if balance is None:
            raise LedgerException(
                LedgerErrorCodes.NOT_FOUND,
                f"no balance object found for {account} {symbol_code}",
            )
        return balance.as_asset()

    def has_balance_record(self, account: str, symbol_code: str) -> bool:
        return Balance.find(self.db, account, symbol_code) is not None

    def credit(self, account: str, value: Asset) -> Asset:
        check(value.amount > 0, LedgerErrorCodes.INVALID_AMOUNT, f"must credit positive quantity: {value}")

        balance = Balance.get_or_create(self.db, account, value.symbol)
        check(
            balance.symbol == value.symbol,
            LedgerErrorCodes.SYMBOL_MISMATCH,
            f"symbol precision mismatch: {value.symbol} != {balance.symbol}",
        )
        updated = balance.as_asset() + value
        balance.add_amount(value.amount)
        self.db.flush()

        logger.debug("Balance credited", account=account, amount=str(value), balance=str(updated))
        return updated

    def debit(self, account: str, value: Asset) -> Asset:
        check(value.amount > 0, LedgerErrorCodes.INVALID_AMOUNT, f"must debit positive quantity: {value}")

        balance = Balance.find(self.db, account, value.symbol.code)
        if balance is None:
            raise LedgerException(
                LedgerErrorCodes.INSUFFICIENT_BALANCE,
                f"no balance object found for {account}",
            )
        check(
            balance.symbol == value.symbol,
            LedgerErrorCodes.SYMBOL_MISMATCH,
            f"symbol precision mismatch: {value.symbol} != {balance.symbol}",
        )
        if not balance.subtract_amount(value.amount):
            raise LedgerException(
                LedgerErrorCodes.INSUFFICIENT_BALANCE,
                f"overdrawn balance: {account} has {balance.as_asset()}, needs {value}",
            )
        self.db.flush()

        logger.debug("Balance debited", account=account, amount=str(value), balance=str(balance.as_asset()))
        return balance.as_asset()

    def _registered_symbol(self, symbol: Symbol) -> SupplyRecord:
        supply = SupplyRecord.find(self.db, symbol.code)
        if supply is None:
            raise LedgerException(LedgerErrorCodes.NOT_FOUND, f"symbol {symbol.code} does not exist")
        check(
            supply.symbol == symbol,
            LedgerErrorCodes.SYMBOL_MISMATCH,
            f"symbol precision mismatch: {symbol} != {supply.symbol}",
        )
        return supply

    def _ensure_record(self, owner: str, symbol: Symbol) -> bool:
        if Balance.find(self.db, owner, symbol.code) is not None:
            return False
        self.db.add(Balance(account=owner, symbol_code=symbol.code, precision=symbol.precision, amount=0))
        self.db.flush()
        return True

    def open(self, ctx: ActionContext, owner: str, symbol: Symbol, payer: str) -> None:
        ctx.require_auth(payer)
        check(ctx.is_account(owner), LedgerErrorCodes.NOT_FOUND, f"owner account {owner} does not exist")
        self._registered_symbol(symbol)

        if self._ensure_record(owner, symbol):
            logger.info("Balance record opened", owner=owner, symbol=str(symbol), payer=payer)

    def setup_miner(self, ctx: ActionContext, user: str, symbol: Symbol) -> None:
        ctx.require_auth(user)
        self._registered_symbol(symbol)

        if self._ensure_record(user, symbol):
            logger.info("Miner initialized", user=user, symbol=str(symbol))

    def close(self, ctx: ActionContext, owner: str, symbol: Symbol) -> None:
        ctx.require_auth(owner)

        balance = Balance.find(self.db, owner, symbol.code)
        if balance is None:
            raise LedgerException(
                LedgerErrorCodes.NOT_FOUND,
                "balance row already deleted or never existed",
            )
        check(
            balance.amount == 0,
            LedgerErrorCodes.BALANCE_NOT_EMPTY,
            "cannot close because the balance is not zero",
        )
        self.db.delete(balance)
        self.db.flush()

        logger.info("Balance record closed", owner=owner, symbol=str(symbol))

    def total(self, symbol_code: str) -> int:
        return Balance.get_total_supply(self.db, symbol_code)
