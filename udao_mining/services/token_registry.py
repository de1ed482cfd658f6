import structlog
from sqlalchemy.orm import Session

from udao_mining.config import settings
from udao_mining.models.supply import SupplyRecord
from udao_mining.runtime.contracts import ActionContext
from udao_mining.services.balance_ledger import BalanceLedger
from udao_mining.services.validator import LedgerValidator
from udao_mining.utils.assets import Asset
from udao_mining.utils.exceptions import LedgerErrorCodes, LedgerException, check

logger = structlog.get_logger()


class TokenRegistry:
    """Owns one supply record per symbol and validates issue/retire/transfer."""

    def __init__(self, db_session: Session, ledger: BalanceLedger = None, validator: LedgerValidator = None):
        self.db = db_session
        self.ledger = ledger or BalanceLedger(db_session)
        self.validator = validator or LedgerValidator(db_session)

    def _get_supply(self, symbol_code: str) -> SupplyRecord:
        supply = self.validator.get_supply_record(symbol_code)
        if supply is None:
            raise LedgerException(
                LedgerErrorCodes.NOT_FOUND,
                f"token with symbol {symbol_code} does not exist",
            )
        return supply

    def create(self, ctx: ActionContext, issuer: str, max_supply: Asset) -> SupplyRecord:
        ctx.require_auth(ctx.contract)
        self.validator.validate_create(max_supply).raise_if_invalid()

        supply = SupplyRecord(
            symbol_code=max_supply.symbol.code,
            precision=max_supply.symbol.precision,
            current_supply=0,
            max_supply=max_supply.amount,
            issuer=issuer,
            created_at=ctx.now,
            last_reward_at=ctx.now,
        )
        self.db.add(supply)
        self.db.flush()

        logger.info("Token created", symbol=str(max_supply.symbol), max_supply=str(max_supply), issuer=issuer)
        return supply

    def issue(self, ctx: ActionContext, to: str, quantity: Asset, memo: str) -> SupplyRecord:
        self.validator.validate_symbol(quantity.symbol).raise_if_invalid()
        self.validator.validate_memo(memo).raise_if_invalid()

        supply = self._get_supply(quantity.symbol.code)
        ctx.require_auth(supply.issuer)
        self.validator.validate_issue(quantity, supply).raise_if_invalid()

        supply.current_supply = (supply.supply + quantity).amount
        self.ledger.credit(to, quantity)
        self.db.flush()

        logger.info("Tokens issued", to=to, quantity=str(quantity), supply=str(supply.supply), memo=memo)
        return supply

    def retire(self, ctx: ActionContext, quantity: Asset, memo: str) -> SupplyRecord:
        self.validator.validate_symbol(quantity.symbol).raise_if_invalid()
        self.validator.validate_memo(memo).raise_if_invalid()

        supply = self._get_supply(quantity.symbol.code)
        ctx.require_auth(supply.issuer)
        self.validator.validate_retire(quantity, supply).raise_if_invalid()

        # debit first so an overdrawn issuer leaves the supply untouched
        self.ledger.debit(supply.issuer, quantity)
        supply.current_supply = (supply.supply - quantity).amount
        self.db.flush()

        logger.info("Tokens retired", quantity=str(quantity), supply=str(supply.supply), memo=memo)
        return supply

    def transfer(self, ctx: ActionContext, from_account: str, to: str, quantity: Asset, memo: str) -> None:
        check(from_account != to, LedgerErrorCodes.SELF_TRANSFER_DENIED, "cannot transfer to self")
        ctx.require_auth(from_account)
        check(ctx.is_account(to), LedgerErrorCodes.NOT_FOUND, f"to account {to} does not exist")

        supply = self._get_supply(quantity.symbol.code)

        if quantity.symbol.code == settings.REWARD_SYMBOL_CODE and not ctx.has_auth(ctx.contract):
            raise LedgerException(
                LedgerErrorCodes.POLICY_DENIED,
                f"{quantity.symbol.code} cannot be transferred by users.",
            )

        data = {"from": from_account, "to": to, "quantity": str(quantity), "memo": memo}
        ctx.require_recipient(from_account, "transfer", data)
        ctx.require_recipient(to, "transfer", data)

        self.validator.validate_transfer(quantity, supply).raise_if_invalid()
        self.validator.validate_memo(memo).raise_if_invalid()

        self.ledger.debit(from_account, quantity)
        self.ledger.credit(to, quantity)

        logger.info("Tokens transferred", sender=from_account, to=to, quantity=str(quantity), memo=memo)

    def query_supply(self, symbol_code: str) -> SupplyRecord:
        return self._get_supply(symbol_code)

    def query_last_reward_time(self, symbol_code: str) -> int:
        return self._get_supply(symbol_code).last_reward_at

    def query_balance(self, account: str, symbol_code: str) -> Asset:
        return self.ledger.get_balance(account, symbol_code)

    def set_last_reward_time(self, symbol_code: str, timestamp: int) -> None:
        supply = self._get_supply(symbol_code)
        check(
            timestamp >= supply.last_reward_at,
            LedgerErrorCodes.REWARD_TIME_REGRESSION,
            f"last reward time cannot move backwards: {timestamp} < {supply.last_reward_at}",
        )
        supply.last_reward_at = timestamp
        self.db.flush()
