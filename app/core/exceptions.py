"""
Ledger error taxonomy.

- NotFound: user/account/transaction absent. Often a control-flow signal
  (e.g. lazily create an account on first expense).
- AlreadyExists: duplicate identity or duplicate pairwise account.
- InvalidInput: rejected before any mutation happens.
- DataIntegrityError: stored state violates an invariant. Never auto-repaired.
"""

from typing import Any


class LedgerError(Exception):
    """Base class for ledger errors."""
    pass


# ===== NOT FOUND =====

class NotFound(LedgerError):
    pass


class UserNotFound(NotFound):
    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class AccountNotFound(NotFound):
    def __init__(self, message: str = "Account not found"):
        super().__init__(message)


class TransactionNotFound(NotFound):
    def __init__(self, message: str = "Transaction not found"):
        super().__init__(message)


# ===== ALREADY EXISTS =====

class AlreadyExists(LedgerError):
    pass


class UserAlreadyExists(AlreadyExists):
    def __init__(self, message: str = "User already exists"):
        super().__init__(message)


class IdentityConflict(AlreadyExists):
    """A concurrent registration claimed the same platform identity."""

    def __init__(self, platform: str, platform_user_id: str):
        super().__init__(
            f"Platform identity {platform}:{platform_user_id} was registered concurrently"
        )
        self.platform = platform
        self.platform_user_id = platform_user_id


class AccountExists(AlreadyExists):
    """An account already exists for the pair. `existing` is set when known."""

    def __init__(self, existing: Any = None):
        super().__init__("Account already exists")
        self.existing = existing


# ===== INVALID INPUT =====

class InvalidInput(LedgerError):
    pass


class InvalidAccount(InvalidInput):
    pass


class ZeroBalance(InvalidInput):
    def __init__(self, message: str = "Balance cannot be 0"):
        super().__init__(message)


class SelfTransaction(InvalidInput):
    def __init__(self, message: str = "Cannot create a balance with yourself"):
        super().__init__(message)


# ===== INTEGRITY =====

class DataIntegrityError(LedgerError):
    pass


class AccountMembershipError(AccountNotFound, DataIntegrityError):
    """
    An account was found for the pair but the initiator is not a party to it.

    Callers that only check for AccountNotFound see a plain miss; callers that
    care can tell it apart by catching DataIntegrityError first.
    """

    def __init__(self, account_id: Any, user_id: Any):
        super().__init__(f"User {user_id} is not a party to account {account_id}")
        self.account_id = account_id
        self.user_id = user_id
