from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Tuple

from udao_mining.services.accounts import AccountDirectory
from udao_mining.utils.exceptions import LedgerErrorCodes, LedgerException


@dataclass(frozen=True)
class ActionRequest:
    """A deferred instruction, executed after the invocation that produced it returns."""

    contract: str
    action: str
    data: Dict[str, Any]
    authorization: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RecipientNotice:
    account: str
    contract: str
    action: str
    data: Dict[str, Any]


@dataclass
class ActionContext:
    """
    Per-invocation view of the host: who signed, what time it is, which
    accounts exist, and the outbox of deferred instructions.
    """

    contract: str
    now: int
    authorization: FrozenSet[str]
    accounts: AccountDirectory
    outbox: List[ActionRequest] = field(default_factory=list)
    notices: List[RecipientNotice] = field(default_factory=list)

    def has_auth(self, account: str) -> bool:
        return account in self.authorization

    def require_auth(self, account: str) -> None:
        if not self.has_auth(account):
            raise LedgerException(LedgerErrorCodes.UNAUTHORIZED, f"missing authority of {account}")

    def is_account(self, account: str) -> bool:
        return self.accounts.is_account(account)

    def send_inline(self, contract: str, action: str, data: Dict[str, Any]) -> ActionRequest:
        request = ActionRequest(
            contract=contract,
            action=action,
            data=dict(data),
            authorization=(self.contract,),
        )
        self.outbox.append(request)
        return request

    def require_recipient(self, account: str, action: str, data: Dict[str, Any]) -> None:
        if any(n.account == account and n.action == action and n.data == data for n in self.notices):
            return
        self.notices.append(RecipientNotice(account=account, contract=self.contract, action=action, data=dict(data)))
