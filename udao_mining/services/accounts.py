from typing import Iterable, Optional

from udao_mining.utils.names import is_valid_account_name


class AccountDirectory:
    """Resolves account names. With no registered accounts every well-formed name resolves."""

    def __init__(self, accounts: Optional[Iterable[str]] = None):
        self._accounts = set()
        for account in accounts or []:
            self.register(account)

    def register(self, account: str) -> None:
        if not is_valid_account_name(account):
            raise ValueError(f"Invalid account name: {account!r}")
        self._accounts.add(account)

    def is_account(self, account: str) -> bool:
        if not is_valid_account_name(account):
            return False
        if not self._accounts:
            return True
        return account in self._accounts
