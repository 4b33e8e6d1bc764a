"""Read-side rendering of balances and history for chat replies."""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional

from bson import ObjectId

from app.models.account import Account
from app.models.transaction import Transaction
from app.models.user import User
from app.utils.balance_rules import owed_to

logger = logging.getLogger(__name__)

HELP_TEXT = """
Hi! I'm a Bot that will help you track balances between people!

If you want to create a transaction between you and another user, just run /add USERNAME BALANCE

If you want to create a transaction between you and multiple people, run /add USERNAME USERNAME... BALANCE

To record a payment someone made you, use a negative balance: /add USERNAME -BALANCE

To view all transactions relating to you, run /history

To view transactions between you and a user, run /history USERNAME

To list all registered users, run /list

To list all account balances, run /status
"""


@dataclass(frozen=True)
class Position:
    """One account seen from one party's side."""
    account_id: ObjectId
    counterparty_id: ObjectId
    amount: float  # signed: > 0 the counterparty owes us, < 0 we owe them

    @property
    def owes(self) -> bool:
        return self.amount < 0

    @property
    def settled(self) -> bool:
        return self.amount == 0

    @property
    def magnitude(self) -> float:
        return abs(self.amount)


def positions(user_id, accounts: Iterable[Account]) -> List[Position]:
    return [
        Position(
            account_id=account.id,
            counterparty_id=account.counterparty_of(user_id),
            amount=owed_to(account, user_id)
        )
        for account in accounts
    ]


def format_amount(value: float) -> str:
    value = round(float(value), 2)
    if value.is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0")


def _name(names: Mapping[str, str], user_id) -> str:
    return names.get(str(user_id), str(user_id))


def summarize(user_id, accounts: Iterable[Account], names: Mapping[str, str], currency: str = "$") -> str:
    """Balance statement for `user_id`, one bullet per account."""
    user_positions = positions(user_id, accounts)

    message = f"Your Accounts ({len(user_positions)} Accounts):\n\n"
    for position in user_positions:
        other = _name(names, position.counterparty_id)
        amount = format_amount(position.magnitude)
        if position.settled:
            message += f" •\tYou and *{other}* are settled up\n"
        elif position.owes:
            message += f" •\tYou owe *{other}* {currency}{amount}\n"
        else:
            message += f" •\t*{other}* owes you {currency}{amount}\n"
    message += "\nTo get my details behind a balance, run /history USERNAME"
    return message


def render_history(
    user_id,
    transactions: Iterable[Transaction],
    names: Mapping[str, str],
    filter_user_id: Optional[ObjectId] = None,
    currency: str = "$"
) -> str:
    """Account history as seen by `user_id`, newest entries first."""
    context = f" ({_name(names, filter_user_id)})" if filter_user_id is not None else ""
    lines = [f"*Account History{context}*", ""]

    for transaction in transactions:
        initiator = names.get(str(transaction.created_by))
        if initiator is None:
            logger.warning("Skipping transaction %s, initiator %s not found", transaction.id, transaction.created_by)
            continue

        verb = "requested" if transaction.share >= 0 else "credited"
        preposition = "from" if transaction.share >= 0 else "to"
        op = f"{verb} {currency}{format_amount(abs(transaction.share))} {preposition}"

        if transaction.created_by == user_id:
            if filter_user_id is not None:
                targets = [_name(names, filter_user_id)]
            else:
                targets = [_name(names, participant) for participant in transaction.participants]
            op += " " + " ".join(targets)
        else:
            op += " you"

        lines.append(f"_{transaction.created_at.strftime('%m-%d %H:%M')}_: {initiator} {op}")

    if len(lines) == 2:
        lines.append("No transactions yet.")
    return "\n".join(lines)


def render_user_list(users: Iterable[User], platform: str) -> str:
    message = "Available Users:\n"
    for user in users:
        message += f"• {user.display_name(platform)}\n"
    return message
