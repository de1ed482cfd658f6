"""
Time-gated halving issuance.

Every deposit notification addressed to the contract is a mining attempt:
the deposit is refunded, whole reward intervals elapsed since the last
tranche are minted to the contract at the current tier rate, and a fixed
fraction of the contract's reward balance is paid to the depositor.
"""

from bisect import bisect_left
from dataclasses import dataclass
from typing import Optional, Tuple

import structlog
from sqlalchemy.orm import Session

from udao_mining.config import settings
from udao_mining.models.balance import Balance
from udao_mining.runtime.contracts import ActionContext
from udao_mining.services.balance_ledger import BalanceLedger
from udao_mining.services.token_registry import TokenRegistry
from udao_mining.utils.assets import Asset, Symbol
from udao_mining.utils.exceptions import LedgerErrorCodes, LedgerException

logger = structlog.get_logger()

REWARD_INTERVAL = 600
PAYOUT_DIVISOR = 40000

# whole-token scale: raw amount / 10^4 / 10^4 at precision 8
UNIT_DIVISOR = 10000

MAX_SUPPLY_UNITS = 21000000

# (inclusive upper bound on supply units, reward in raw units)
REWARD_TIERS: Tuple[Tuple[int, int], ...] = (
    (10500000, 5000000000),
    (15750000, 2500000000),
    (18375000, 1250000000),
    (19687500, 625000000),
    (20343750, 312500000),
    (20671875, 156250000),
    (20835938, 78125000),
    (20917969, 39062500),
    (20958984, 19531250),
    (20979492, 9765625),
    (20989746, 4882813),
    (20994873, 2441406),
    (20997437, 1220703),
    (20998718, 610352),
    (20999359, 305176),
    (20999680, 152588),
    (20999840, 76294),
    (20999920, 38147),
    (20999960, 19073),
    (20999980, 9537),
    (20999990, 4768),
    (20999995, 2384),
    (20999998, 1192),
    (MAX_SUPPLY_UNITS - 1, 596),
)

_TIER_BOUNDS = [bound for bound, _ in REWARD_TIERS]


def reward_symbol() -> Symbol:
    return Symbol(code=settings.REWARD_SYMBOL_CODE, precision=settings.REWARD_PRECISION)


def supply_units(supply: Asset) -> int:
    return supply.amount // UNIT_DIVISOR // UNIT_DIVISOR


def reward_for_tier(supply: Asset) -> Asset:
    """Per-tranche reward for the tier the current supply falls in."""
    index = bisect_left(_TIER_BOUNDS, supply_units(supply))
    amount = REWARD_TIERS[index][1] if index < len(REWARD_TIERS) else 0
    return Asset(amount=amount, symbol=reward_symbol())


@dataclass
class MiningOutcome:
    depositor: str
    tranche_count: int = 0
    issued: Optional[Asset] = None
    payout: Optional[Asset] = None
    last_reward_at: Optional[int] = None


class RewardScheduler:

    def __init__(self, db_session: Session, registry: TokenRegistry = None, ledger: BalanceLedger = None):
        self.db = db_session
        self.ledger = ledger or BalanceLedger(db_session)
        self.registry = registry or TokenRegistry(db_session, ledger=self.ledger)

    def _system_balance(self, contract: str, symbol: Symbol) -> Asset:
        balance = Balance.find(self.db, contract, symbol.code)
        if balance is None:
            return Asset.zero(symbol)
        return balance.as_asset()

    def on_deposit(
        self,
        ctx: ActionContext,
        from_account: str,
        to: str,
        quantity: str,
        memo: str,
    ) -> Optional[MiningOutcome]:
        if to != ctx.contract or from_account == ctx.contract:
            return None

        symbol = reward_symbol()
        if not self.ledger.has_balance_record(from_account, symbol.code):
            raise LedgerException(
                LedgerErrorCodes.NOT_INITIALIZED,
                f"must initialize {symbol.code} before mining",
            )

        ctx.send_inline(
            settings.DEPOSIT_CONTRACT,
            "transfer",
            {"from": ctx.contract, "to": from_account, "quantity": quantity, "memo": "Refund UOS"},
        )

        supply = self.registry.query_supply(symbol.code)
        elapsed = ctx.now - supply.last_reward_at
        reward = reward_for_tier(supply.supply)
        balance = self._system_balance(ctx.contract, symbol)

        outcome = MiningOutcome(depositor=from_account, last_reward_at=supply.last_reward_at)

        if elapsed >= REWARD_INTERVAL:
            tranche_count = elapsed // REWARD_INTERVAL
            issue_reward = reward * tranche_count

            if issue_reward.amount > 0:
                ctx.send_inline(
                    ctx.contract,
                    "issue",
                    {"to": ctx.contract, "quantity": str(issue_reward), "memo": f"Issue {symbol.code}"},
                )
                balance = balance + issue_reward
                outcome.issued = issue_reward

            outcome.tranche_count = tranche_count
            outcome.last_reward_at = supply.last_reward_at + tranche_count * REWARD_INTERVAL
            self.registry.set_last_reward_time(symbol.code, outcome.last_reward_at)

            logger.info(
                "Reward tranches scheduled",
                tranche_count=tranche_count,
                unit_reward=str(reward),
                issued=str(issue_reward),
                last_reward_at=outcome.last_reward_at,
            )

        payout = balance // PAYOUT_DIVISOR
        if payout.amount > 0:
            ctx.send_inline(
                ctx.contract,
                "transfer",
                {"from": ctx.contract, "to": from_account, "quantity": str(payout), "memo": f"Mine {symbol.code}"},
            )
            outcome.payout = payout

        logger.info(
            "Mining attempt processed",
            depositor=from_account,
            elapsed=elapsed,
            payout=str(payout),
        )
        return outcome
