"""
Ledger exception handling and standardized error codes
"""


class LedgerErrorCodes:
    """Standardized error codes for ledger actions"""

    # Record lifecycle
    ALREADY_EXISTS = "ALREADY_EXISTS"
    NOT_FOUND = "NOT_FOUND"
    NOT_INITIALIZED = "NOT_INITIALIZED"
    BALANCE_NOT_EMPTY = "BALANCE_NOT_EMPTY"

    # Authority and policy
    UNAUTHORIZED = "UNAUTHORIZED"
    POLICY_DENIED = "POLICY_DENIED"
    SELF_TRANSFER_DENIED = "SELF_TRANSFER_DENIED"

    # Amounts
    INVALID_AMOUNT = "INVALID_AMOUNT"
    SYMBOL_MISMATCH = "SYMBOL_MISMATCH"
    SUPPLY_EXCEEDED = "SUPPLY_EXCEEDED"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"

    # Payload
    MEMO_TOO_LONG = "MEMO_TOO_LONG"
    UNKNOWN_ACTION = "UNKNOWN_ACTION"
    MALFORMED_ACTION = "MALFORMED_ACTION"

    # Scheduling
    REWARD_TIME_REGRESSION = "REWARD_TIME_REGRESSION"


class ValidationResult:

    def __init__(self, is_valid: bool, error_code: str = None, error_message: str = None):
        self.is_valid = is_valid
        self.error_code = error_code
        self.error_message = error_message

    def __bool__(self):
        return self.is_valid

    def __repr__(self):
        if self.is_valid:
            return "ValidationResult(valid=True)"
        return f"ValidationResult(valid=False, error={self.error_code})"

    def raise_if_invalid(self) -> None:
        if not self.is_valid:
            raise LedgerException(self.error_code, self.error_message)


class LedgerException(Exception):

    def __init__(self, error_code: str, message: str):
        self.error_code = error_code
        self.message = message
        super().__init__(f"{error_code}: {message}")


def check(condition: bool, error_code: str, message: str) -> None:
    """Raise a LedgerException when condition does not hold"""
    if not condition:
        raise LedgerException(error_code, message)
