"""
Action dispatcher for the mining ledger.

One push is one invocation: the top-level action (or deposit notification)
runs first, then every deferred instruction it enqueued, in FIFO order, under
the contract's own authority. Instructions addressed to other contracts are
not executed here; they are handed back on the receipt. The whole invocation
is a single database transaction.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

import structlog
from sqlalchemy.orm import Session

from udao_mining.config import settings
from udao_mining.runtime.contracts import ActionContext, ActionRequest, RecipientNotice
from udao_mining.services.accounts import AccountDirectory
from udao_mining.services.balance_ledger import BalanceLedger
from udao_mining.services.reward_scheduler import MiningOutcome, RewardScheduler
from udao_mining.services.token_registry import TokenRegistry
from udao_mining.services.validator import LedgerValidator
from udao_mining.utils.assets import to_asset, to_symbol
from udao_mining.utils.exceptions import LedgerErrorCodes, LedgerException


@dataclass
class InvocationReceipt:
    executed: List[ActionRequest] = field(default_factory=list)
    external_effects: List[ActionRequest] = field(default_factory=list)
    notices: List[RecipientNotice] = field(default_factory=list)
    mining: Optional[MiningOutcome] = None

    def to_dict(self) -> Dict[str, Any]:
        mining = None
        if self.mining is not None:
            mining = {
                "depositor": self.mining.depositor,
                "tranche_count": self.mining.tranche_count,
                "issued": str(self.mining.issued) if self.mining.issued else None,
                "payout": str(self.mining.payout) if self.mining.payout else None,
                "last_reward_at": self.mining.last_reward_at,
            }
        return {
            "executed": [_request_dict(r) for r in self.executed],
            "external_effects": [_request_dict(r) for r in self.external_effects],
            "notices": [
                {"account": n.account, "contract": n.contract, "action": n.action, "data": n.data}
                for n in self.notices
            ],
            "mining": mining,
        }


def _request_dict(request: ActionRequest) -> Dict[str, Any]:
    return {
        "contract": request.contract,
        "action": request.action,
        "data": request.data,
        "authorization": list(request.authorization),
    }


def _field(data: Dict[str, Any], key: str) -> Any:
    if key not in data:
        raise LedgerException(LedgerErrorCodes.MALFORMED_ACTION, f"missing action field: {key}")
    return data[key]


class ActionDispatcher:

    def __init__(
        self,
        db_session: Session,
        accounts: Optional[AccountDirectory] = None,
        contract: Optional[str] = None,
    ):
        self.db = db_session
        self.contract = contract or settings.CONTRACT_ACCOUNT
        self.accounts = accounts or AccountDirectory(settings.REGISTERED_ACCOUNTS)
        self.ledger = BalanceLedger(db_session)
        self.registry = TokenRegistry(db_session, ledger=self.ledger, validator=LedgerValidator(db_session))
        self.scheduler = RewardScheduler(db_session, registry=self.registry, ledger=self.ledger)
        self.logger = structlog.get_logger()

        self._handlers: Dict[str, Callable[[ActionContext, Dict[str, Any]], None]] = {
            "create": self._create,
            "issue": self._issue,
            "retire": self._retire,
            "transfer": self._transfer,
            "open": self._open,
            "close": self._close,
            "setupminer": self._setup_miner,
        }

    def push_action(
        self,
        action: str,
        data: Dict[str, Any],
        authorization: Iterable[str],
        now: int,
    ) -> InvocationReceipt:
        request = ActionRequest(
            contract=self.contract,
            action=action,
            data=dict(data),
            authorization=tuple(authorization),
        )
        return self._run(now, lambda receipt: self._apply(request, now, receipt))

    def push_notification(self, contract: str, action: str, data: Dict[str, Any], now: int) -> InvocationReceipt:
        if contract != settings.DEPOSIT_CONTRACT or action != settings.DEPOSIT_ACTION:
            self.logger.debug("Ignoring notification", contract=contract, action=action)
            return InvocationReceipt()

        return self._run(now, lambda receipt: self._on_deposit(data, now, receipt))

    def _context(self, now: int, authorization: Iterable[str]) -> ActionContext:
        return ActionContext(
            contract=self.contract,
            now=now,
            authorization=frozenset(authorization),
            accounts=self.accounts,
        )

    def _run(self, now: int, entry: Callable[[InvocationReceipt], List[ActionRequest]]) -> InvocationReceipt:
        receipt = InvocationReceipt()
        try:
            queue = deque(entry(receipt))
            while queue:
                request = queue.popleft()
                if request.contract != self.contract:
                    receipt.external_effects.append(request)
                    continue
                queue.extend(self._apply(request, now, receipt))
            self.db.commit()
        except LedgerException as e:
            self.db.rollback()
            self.logger.warning("Invocation rejected", error_code=e.error_code, error=e.message)
            raise
        except Exception as e:
            self.db.rollback()
            self.logger.error("Invocation failed", error=str(e), exc_info=True)
            raise

        self.logger.info(
            "Invocation committed",
            executed=[r.action for r in receipt.executed],
            external_effects=len(receipt.external_effects),
        )
        return receipt

    def _apply(self, request: ActionRequest, now: int, receipt: InvocationReceipt) -> List[ActionRequest]:
        handler = self._handlers.get(request.action)
        if handler is None:
            raise LedgerException(LedgerErrorCodes.UNKNOWN_ACTION, f"unknown action: {request.action}")

        ctx = self._context(now, request.authorization)
        handler(ctx, request.data)

        receipt.executed.append(request)
        receipt.notices.extend(ctx.notices)
        return ctx.outbox

    def _on_deposit(self, data: Dict[str, Any], now: int, receipt: InvocationReceipt) -> List[ActionRequest]:
        from_account = _field(data, "from")
        quantity = _field(data, "quantity")
        # the deposit lives on another ledger, only its shape is checked here
        to_asset(quantity)

        ctx = self._context(now, [from_account])
        receipt.mining = self.scheduler.on_deposit(
            ctx,
            from_account,
            _field(data, "to"),
            quantity,
            data.get("memo", ""),
        )
        return ctx.outbox

    def _create(self, ctx: ActionContext, data: Dict[str, Any]) -> None:
        self.registry.create(ctx, _field(data, "issuer"), to_asset(_field(data, "maximum_supply")))

    def _issue(self, ctx: ActionContext, data: Dict[str, Any]) -> None:
        self.registry.issue(ctx, _field(data, "to"), to_asset(_field(data, "quantity")), data.get("memo", ""))

    def _retire(self, ctx: ActionContext, data: Dict[str, Any]) -> None:
        self.registry.retire(ctx, to_asset(_field(data, "quantity")), data.get("memo", ""))

    def _transfer(self, ctx: ActionContext, data: Dict[str, Any]) -> None:
        self.registry.transfer(
            ctx,
            _field(data, "from"),
            _field(data, "to"),
            to_asset(_field(data, "quantity")),
            data.get("memo", ""),
        )

    def _open(self, ctx: ActionContext, data: Dict[str, Any]) -> None:
        self.ledger.open(ctx, _field(data, "owner"), to_symbol(_field(data, "symbol")), _field(data, "ram_payer"))

    def _close(self, ctx: ActionContext, data: Dict[str, Any]) -> None:
        self.ledger.close(ctx, _field(data, "owner"), to_symbol(_field(data, "symbol")))

    def _setup_miner(self, ctx: ActionContext, data: Dict[str, Any]) -> None:
        self.ledger.setup_miner(ctx, _field(data, "user"), to_symbol(_field(data, "symbol")))
