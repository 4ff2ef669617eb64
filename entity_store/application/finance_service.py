import logging
from decimal import Decimal
from operator import attrgetter
from typing import Dict, List

from entity_store.application.reporting import render_group
from entity_store.domain.exceptions import InvalidValueException
from entity_store.domain.index import GroupIndex
from entity_store.domain.models import Transaction
from entity_store.domain.repository import Repository

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """Base payment channel. Subclasses only change the channel label."""
    channel = "Generic"

    def process(self, transaction: Transaction) -> None:
        if transaction.amount <= 0:
            raise InvalidValueException(
                f"[{self.channel}] Invalid amount ({transaction.amount}).", field="amount"
            )
        logger.info(
            f"[{self.channel}] Processing transaction {transaction.id}. "
            f"Amount: {transaction.amount}, Category: {transaction.category}"
        )

class BankTransferProcessor(TransactionProcessor):
    channel = "BankTransfer"

class MobileMoneyProcessor(TransactionProcessor):
    channel = "MobileMoney"

class CryptoWalletProcessor(TransactionProcessor):
    channel = "CryptoWallet"


class SavingsAccount:
    """An account that refuses non-positive amounts and overdrafts."""

    def __init__(self, account_number: str, initial_balance: Decimal):
        if not account_number or not account_number.strip():
            raise InvalidValueException("Account number must be provided.", field="account_number")
        if initial_balance < 0:
            raise InvalidValueException("Initial balance cannot be negative.", field="balance")
        self.account_number = account_number
        self.balance = Decimal(initial_balance)

    def apply(self, transaction: Transaction) -> Decimal:
        """Deducts the transaction amount and returns the new balance."""
        if transaction.amount <= 0:
            raise InvalidValueException("Transaction amount must be greater than zero.", field="amount")
        if transaction.amount > self.balance:
            raise InvalidValueException(
                f"Insufficient funds for transaction {transaction.id}: "
                f"{transaction.amount} requested, {self.balance} available.",
                field="amount",
            )
        self.balance -= transaction.amount
        logger.info(f"[SavingsAccount] Transaction {transaction.id} applied. Updated balance: {self.balance}")
        return self.balance


class TransactionLedger:
    """Processed transactions, stored by id and grouped by category."""

    def __init__(self):
        self.transactions: Repository[Transaction] = Repository(name="transactions")
        self.by_category: GroupIndex[str, Transaction] = GroupIndex(key=attrgetter("category"))

    def record(self, transaction: Transaction) -> None:
        self.transactions.add(transaction)

    def in_category(self, category: str) -> List[Transaction]:
        self.by_category.rebuild(self.transactions)
        return self.by_category.lookup(category, sort_by=attrgetter("posted_on"))

    def totals_by_category(self) -> Dict[str, Decimal]:
        self.by_category.rebuild(self.transactions)
        return {
            category: sum((t.amount for t in self.by_category.lookup(category)), Decimal("0"))
            for category in self.by_category.keys()
        }

    def category_report(self, category: str) -> List[str]:
        return render_group("Transactions", category, self.in_category(category))
