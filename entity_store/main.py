import os
import sys
import logging
from datetime import date
from decimal import Decimal
from dotenv import load_dotenv

from entity_store.application.finance_service import (
    BankTransferProcessor,
    CryptoWalletProcessor,
    MobileMoneyProcessor,
    SavingsAccount,
    TransactionLedger,
)
from entity_store.application.grading_service import GradingService
from entity_store.application.health_service import HealthSystem
from entity_store.application.records_service import InventoryRecordsService
from entity_store.application.warehouse_service import WarehouseManager
from entity_store.domain.exceptions import EntityStoreException, InvalidValueException
from entity_store.domain.models import ElectronicItem, InventoryItem, Transaction
from entity_store.infrastructure.database import SqliteSnapshotStore
from entity_store.infrastructure.json_store import JsonFileStore

logger = logging.getLogger(__name__)

DEFAULT_STORE_PATH = os.path.join("data", "inventory.json")
DEFAULT_STUDENTS_PATH = os.path.join("data", "students.txt")
DEFAULT_GRADES_REPORT_PATH = os.path.join("data", "report.txt")
BACKENDS = ("json", "sqlite")


def configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def build_store(backend: str, path: str):
    if backend == "sqlite":
        return SqliteSnapshotStore(InventoryItem, path)
    return JsonFileStore(InventoryItem, path)


def log_lines(lines) -> None:
    for line in lines:
        logger.info(line)


def run_grading(input_path: str, report_path: str) -> bool:
    """Grades the student records file, if there is one. Returns True when a report was written."""
    if not os.path.exists(input_path):
        logger.warning(f"No student records at {input_path}; skipping grading.")
        return False

    grading = GradingService()
    grading.load_students(input_path)
    grading.write_report(report_path)
    log_lines(grading.report_lines())
    return True


def run_finance(today: date) -> TransactionLedger:
    account = SavingsAccount("SA-001-2025", Decimal("1000"))
    ledger = TransactionLedger()
    payments = [
        (BankTransferProcessor(), Transaction(id=1, posted_on=today, amount=Decimal("150.75"), category="Groceries")),
        (MobileMoneyProcessor(), Transaction(id=2, posted_on=today, amount=Decimal("300.00"), category="Utilities")),
        (CryptoWalletProcessor(), Transaction(id=3, posted_on=today, amount=Decimal("600.50"), category="Entertainment")),
    ]

    for processor, transaction in payments:
        try:
            processor.process(transaction)
            account.apply(transaction)
        except InvalidValueException as e:
            logger.warning(f"Transaction {transaction.id} rejected: {e}")
            continue
        ledger.record(transaction)

    for category, total in ledger.totals_by_category().items():
        logger.info(f"Total for {category}: {total}")
    log_lines(ledger.category_report("Groceries"))
    logger.info(f"Final balance of {account.account_number}: {account.balance}")
    return ledger


def main() -> int:
    # Load environment variables from .env file
    load_dotenv()

    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    store_path = os.getenv("ENTITY_STORE_PATH", DEFAULT_STORE_PATH)
    backend = os.getenv("ENTITY_STORE_BACKEND", "json").lower()

    if backend not in BACKENDS:
        logger.error(f"ENTITY_STORE_BACKEND must be one of {', '.join(BACKENDS)}, got '{backend}'.")
        return 1

    students_path = os.getenv("STUDENTS_INPUT_PATH", DEFAULT_STUDENTS_PATH)
    grades_report_path = os.getenv("GRADES_REPORT_PATH", DEFAULT_GRADES_REPORT_PATH)

    logger.info(f"Data file: {os.path.abspath(store_path)} ({backend})")

    try:
        # Inventory records: seed -> save -> clear -> load -> print
        records = InventoryRecordsService(build_store(backend, store_path))
        records.seed_sample_data()
        records.save()
        records.clear()
        records.load()
        log_lines(records.report())

        # Warehouse: the duplicate, missing and negative cases are reported, not fatal
        warehouse = WarehouseManager()
        warehouse.seed_data()
        warehouse.add_item(
            warehouse.electronics,
            ElectronicItem(id=1, name="Laptop Pro", quantity=5, brand="Dell", warranty_months=36),
        )
        warehouse.remove_item(warehouse.groceries, 999)
        warehouse.increase_stock(warehouse.electronics, 2, -5)
        log_lines(warehouse.report())

        health = HealthSystem()
        health.seed_data()
        health.build_prescription_map()
        log_lines(f"Patient: {patient}" for patient in health.patients.get_all())
        log_lines(health.patient_report(2))

        run_grading(students_path, grades_report_path)
        run_finance(date.today())
    except EntityStoreException as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1

    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
