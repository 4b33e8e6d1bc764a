"""
Balance sign and split rules.

The same sign rule is used to apply a charge to an account and to read an
account back from one party's point of view, so the two can never disagree.

Account convention: balance > 0 means subject owes creator, balance < 0 means
creator owes subject.
"""

from enum import Enum
from typing import Any

from app.core.exceptions import AccountMembershipError, InvalidInput, ZeroBalance
from app.models.account import Account


class Role(str, Enum):
    CREATOR = "creator"
    SUBJECT = "subject"


def role_of(account: Account, user_id: Any) -> Role:
    """Which side of the account the user is on."""
    if user_id == account.creator_id:
        return Role.CREATOR
    if user_id == account.subject_id:
        return Role.SUBJECT
    raise AccountMembershipError(account.id, user_id)


def charge_delta(role: Role, amount: float) -> float:
    """
    Balance change when the party holding `role` records `amount`.

    A positive amount is a new charge (the other party now owes more to the
    initiator). A negative amount is a credit: the initiator reduces what is
    owed to them, e.g. recording a payment.
    """
    magnitude = abs(amount)
    is_credit = amount < 0
    if role is Role.CREATOR:
        return -magnitude if is_credit else magnitude
    return magnitude if is_credit else -magnitude


def owed_to(account: Account, user_id: Any) -> float:
    """
    Signed amount the counterparty owes `user_id` on this account.

    Negative means `user_id` owes the counterparty. Reading a balance is the
    same as the user "recording" the balance against the other party.
    """
    return charge_delta(role_of(account, user_id), account.balance)


def split_amount(total: int, participants: int) -> int:
    """
    Per-participant share of `total`.

    Integer division on the magnitude with the sign reapplied; any remainder
    is dropped, so split_amount(10, 3) == 3 and split_amount(-10, 3) == -3.
    """
    if participants < 1:
        raise InvalidInput("An expense needs at least one participant")
    share = abs(int(total)) // participants
    if share == 0:
        raise ZeroBalance()
    return share if total > 0 else -share
