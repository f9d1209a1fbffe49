"""
Tests for the TransferService.
"""

import threading
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from admin_ledger.exceptions import (
    AccountFrozen,
    Busy,
    InsufficientFunds,
    InvalidArgument,
    NotFound,
    StorageError,
)
from admin_ledger.models.enums import ActivityAction, TransferStatus
from admin_ledger.services.account_store import AccountStore
from admin_ledger.services.activity_log import ActivityLog
from admin_ledger.services.locking import AccountLockRegistry
from admin_ledger.services.reconciliation_service import ReconciliationService
from admin_ledger.services.transfer_ledger import TransferLedger
from admin_ledger.services.transfer_service import TransferService


def balance_of(db_session, user_id):
    db_session.expire_all()
    return AccountStore(db_session).get(user_id).balance


def history_size(db_session):
    return ActivityLog(db_session).count(), TransferLedger(db_session).count()


# --- Successful transfers ---

class TestTransfer:

    def test_transfer_moves_funds(self, db_session, admin, make_account):
        make_account("a", balance="100.00")
        make_account("b", balance="5.00")
        service = TransferService(db_session)

        transfer = service.transfer(admin.id, "a", "b", Decimal("40.00"), "refund")

        assert transfer.status == TransferStatus.COMPLETED
        assert transfer.amount == Decimal("40.00")
        assert transfer.currency == "USD"
        assert balance_of(db_session, "a") == Decimal("60.00")
        assert balance_of(db_session, "b") == Decimal("45.00")

    def test_transfer_of_entire_balance(self, db_session, admin, make_account):
        make_account("a", balance="10.00")
        make_account("b")

        TransferService(db_session).transfer(admin.id, "a", "b", "10.00")

        assert balance_of(db_session, "a") == Decimal("0.00")
        assert balance_of(db_session, "b") == Decimal("10.00")

    def test_transfer_records_activity(self, db_session, admin, make_account):
        make_account("a", balance="100.00")
        make_account("b")

        transfer = TransferService(db_session).transfer(
            admin.id, "a", "b", Decimal("12.34")
        )

        records, total = ActivityLog(db_session).list_records(
            limit=10, action=ActivityAction.TRANSFER_CREATED,
        )
        assert total == 1
        record = records[0]
        assert record.admin_id == admin.id
        assert record.target_user_id == "a"
        assert record.details == {
            "from_user_id": "a",
            "to_user_id": "b",
            "amount": "12.34",
            "currency": "USD",
            "transfer_id": transfer.id,
        }

    def test_transfer_conserves_total(self, db_session, admin, make_account):
        make_account("a", balance="70.00")
        make_account("b", balance="30.00")
        service = TransferService(db_session)

        service.transfer(admin.id, "a", "b", Decimal("25.00"))
        service.transfer(admin.id, "b", "a", Decimal("5.50"))

        total = balance_of(db_session, "a") + balance_of(db_session, "b")
        assert total == Decimal("100.00")

    def test_round_trip_restores_balances(self, db_session, admin, make_account):
        make_account("a", balance="80.00")
        make_account("b", balance="20.00")
        service = TransferService(db_session)

        service.transfer(admin.id, "a", "b", Decimal("33.33"))
        service.transfer(admin.id, "b", "a", Decimal("33.33"))

        assert balance_of(db_session, "a") == Decimal("80.00")
        assert balance_of(db_session, "b") == Decimal("20.00")
        assert TransferLedger(db_session).count() == 2

    def test_rebate_scenario(self, db_session, admin, make_account):
        make_account("a", balance="100.00")
        make_account("b")
        log = ActivityLog(db_session)
        before = log.count(ActivityAction.TRANSFER_CREATED)

        transfer = TransferService(db_session).transfer(
            admin.id, "a", "b", Decimal("40.00"), "rebate"
        )

        assert balance_of(db_session, "a") == Decimal("60.00")
        assert balance_of(db_session, "b") == Decimal("40.00")
        assert transfer.description == "rebate"
        assert transfer.status == TransferStatus.COMPLETED
        assert log.count(ActivityAction.TRANSFER_CREATED) == before + 1
        assert TransferLedger(db_session).count() == 1


# --- Rejections ---

class TestTransferValidation:

    def test_same_account_rejected(self, db_session, admin, make_account):
        make_account("a", balance="100.00")
        before = history_size(db_session)

        with pytest.raises(InvalidArgument, match="same account"):
            TransferService(db_session).transfer(admin.id, "a", "a", Decimal("5"))

        assert history_size(db_session) == before
        assert balance_of(db_session, "a") == Decimal("100.00")

    def test_same_account_checked_before_amount(self, db_session, admin, make_account):
        make_account("a", balance="100.00")

        with pytest.raises(InvalidArgument, match="same account"):
            TransferService(db_session).transfer(admin.id, "a", "a", Decimal("-5"))

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1.00")])
    def test_non_positive_amount_rejected(self, db_session, admin, make_account, amount):
        make_account("a", balance="100.00")
        make_account("b")
        before = history_size(db_session)

        with pytest.raises(InvalidArgument, match="positive"):
            TransferService(db_session).transfer(admin.id, "a", "b", amount)

        assert history_size(db_session) == before
        assert balance_of(db_session, "a") == Decimal("100.00")
        assert balance_of(db_session, "b") == Decimal("0.00")

    def test_float_amount_rejected(self, db_session, admin, make_account):
        make_account("a", balance="100.00")
        make_account("b")

        with pytest.raises(InvalidArgument):
            TransferService(db_session).transfer(admin.id, "a", "b", 0.1)

    def test_unknown_destination(self, db_session, admin, make_account):
        make_account("a", balance="100.00")
        before = history_size(db_session)

        with pytest.raises(NotFound):
            TransferService(db_session).transfer(admin.id, "a", "ghost", Decimal("1"))

        assert history_size(db_session) == before
        assert balance_of(db_session, "a") == Decimal("100.00")

    def test_frozen_source(self, db_session, admin, make_account):
        make_account("c", balance="10.00", frozen=True)
        make_account("a")
        before = history_size(db_session)

        with pytest.raises(AccountFrozen) as excinfo:
            TransferService(db_session).transfer(admin.id, "c", "a", Decimal("5.00"))

        assert excinfo.value.user_id == "c"
        assert history_size(db_session) == before
        assert balance_of(db_session, "c") == Decimal("10.00")
        assert balance_of(db_session, "a") == Decimal("0.00")

    def test_frozen_destination(self, db_session, admin, make_account):
        make_account("a", balance="10.00")
        make_account("c", frozen=True)

        with pytest.raises(AccountFrozen) as excinfo:
            TransferService(db_session).transfer(admin.id, "a", "c", Decimal("5.00"))

        assert excinfo.value.user_id == "c"

    def test_frozen_checked_before_funds(self, db_session, admin, make_account):
        make_account("c", balance="1.00", frozen=True)
        make_account("a")

        with pytest.raises(AccountFrozen):
            TransferService(db_session).transfer(admin.id, "c", "a", Decimal("500"))

    def test_currency_mismatch(self, db_session, admin, make_account):
        make_account("a", balance="10.00")
        make_account("e", currency="EUR")

        with pytest.raises(InvalidArgument, match="Currency mismatch"):
            TransferService(db_session).transfer(admin.id, "a", "e", Decimal("1.00"))

    def test_insufficient_funds(self, db_session, admin, make_account):
        make_account("a", balance="30.00")
        make_account("b")
        before = history_size(db_session)

        with pytest.raises(InsufficientFunds) as excinfo:
            TransferService(db_session).transfer(admin.id, "a", "b", Decimal("30.01"))

        assert excinfo.value.available == Decimal("30.00")
        assert excinfo.value.requested == Decimal("30.01")
        assert history_size(db_session) == before
        assert balance_of(db_session, "a") == Decimal("30.00")

    def test_credit_past_maximum_balance_rejected(
        self, db_session, admin, make_account
    ):
        make_account("a", balance="10.00")
        make_account("b", balance="9999999999999999.00")
        before = history_size(db_session)

        with pytest.raises(InvalidArgument, match="exceed the maximum"):
            TransferService(db_session).transfer(admin.id, "a", "b", Decimal("5.00"))

        assert history_size(db_session) == before
        assert balance_of(db_session, "a") == Decimal("10.00")
        assert balance_of(db_session, "b") == Decimal("9999999999999999.00")

# --- Atomicity ---

class TestTransferAtomicity:

    def test_storage_failure_rolls_back_everything(
        self, db_session, admin, make_account, monkeypatch
    ):
        make_account("a", balance="100.00")
        make_account("b")
        before = history_size(db_session)
        service = TransferService(db_session)

        def broken_record(*args, **kwargs):
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(service.activity, "record", broken_record)

        with pytest.raises(StorageError) as excinfo:
            service.transfer(admin.id, "a", "b", Decimal("40.00"))

        assert "disk" not in str(excinfo.value)
        assert history_size(db_session) == before
        assert balance_of(db_session, "a") == Decimal("100.00")
        assert balance_of(db_session, "b") == Decimal("0.00")
        assert ReconciliationService(db_session).check_integrity()["is_consistent"]

    def test_database_lock_becomes_busy(
        self, db_session, admin, make_account, monkeypatch
    ):
        make_account("a", balance="100.00")
        make_account("b")
        service = TransferService(db_session)

        def locked(*args, **kwargs):
            raise OperationalError("UPDATE", {}, Exception("database is locked"))

        monkeypatch.setattr(service.ledger, "record", locked)

        with pytest.raises(Busy):
            service.transfer(admin.id, "a", "b", Decimal("1.00"))

        assert balance_of(db_session, "a") == Decimal("100.00")

    def test_lock_timeout_raises_busy(self, db_session, admin, make_account):
        make_account("a", balance="100.00")
        make_account("b")
        locks = AccountLockRegistry(timeout=0.05)
        service = TransferService(db_session, locks=locks)

        with locks.hold(["b"]):
            with pytest.raises(Busy):
                service.transfer(admin.id, "a", "b", Decimal("1.00"))

        assert balance_of(db_session, "a") == Decimal("100.00")


# --- Idempotency ---

class TestTransferIdempotency:

    def test_retry_with_same_key_returns_original(
        self, db_session, admin, make_account
    ):
        make_account("a", balance="100.00")
        make_account("b")
        service = TransferService(db_session)

        first = service.transfer(
            admin.id, "a", "b", Decimal("10.00"), idempotency_key="k-1"
        )
        second = service.transfer(
            admin.id, "a", "b", Decimal("10.00"), idempotency_key="k-1"
        )

        assert first.id == second.id
        assert TransferLedger(db_session).count() == 1
        assert balance_of(db_session, "a") == Decimal("90.00")

    def test_different_keys_are_separate_transfers(
        self, db_session, admin, make_account
    ):
        make_account("a", balance="100.00")
        make_account("b")
        service = TransferService(db_session)

        service.transfer(admin.id, "a", "b", Decimal("10.00"), idempotency_key="k-1")
        service.transfer(admin.id, "a", "b", Decimal("10.00"), idempotency_key="k-2")

        assert TransferLedger(db_session).count() == 2
        assert balance_of(db_session, "a") == Decimal("80.00")


# --- Concurrency ---

def run_concurrently(session_factory, jobs):
    """
    Run each job on its own thread and session, released together.

    Each job is the positional arguments of transfer(). Returns the list of
    outcomes: the transfer id or the exception raised.
    """
    barrier = threading.Barrier(len(jobs))
    outcomes = [None] * len(jobs)

    def worker(index, job):
        session = session_factory()
        try:
            barrier.wait()
            outcomes[index] = TransferService(session).transfer(*job).id
        except Exception as e:
            outcomes[index] = e
        finally:
            session.close()

    threads = [
        threading.Thread(target=worker, args=(i, job))
        for i, job in enumerate(jobs)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return outcomes


class TestTransferConcurrency:

    def test_no_overdraft_under_contention(
        self, db_session, admin, make_account, session_factory
    ):
        make_account("a", balance="50.00")
        make_account("b")
        jobs = [(admin.id, "a", "b", Decimal("10.00"))] * 8

        outcomes = run_concurrently(session_factory, jobs)

        succeeded = [o for o in outcomes if isinstance(o, int)]
        rejected = [o for o in outcomes if isinstance(o, InsufficientFunds)]
        assert len(succeeded) == 5
        assert len(rejected) == 3
        assert balance_of(db_session, "a") == Decimal("0.00")
        assert balance_of(db_session, "b") == Decimal("50.00")
        assert ReconciliationService(db_session).check_integrity()["is_consistent"]

    def test_opposite_directions_do_not_deadlock(
        self, db_session, admin, make_account, session_factory
    ):
        make_account("a", balance="100.00")
        make_account("b", balance="100.00")
        jobs = [
            (admin.id, "a", "b", Decimal("1.00")),
            (admin.id, "b", "a", Decimal("2.00")),
        ] * 4

        outcomes = run_concurrently(session_factory, jobs)

        assert all(isinstance(o, int) for o in outcomes)
        assert balance_of(db_session, "a") == Decimal("104.00")
        assert balance_of(db_session, "b") == Decimal("96.00")

    def test_exactly_n_transfers_drain_the_source(
        self, db_session, admin, make_account, session_factory
    ):
        n = 8
        make_account("a", balance="100.00")
        make_account("b")
        jobs = [(admin.id, "a", "b", Decimal("12.50"))] * n

        outcomes = run_concurrently(session_factory, jobs)

        assert all(isinstance(o, int) for o in outcomes)
        assert len(set(outcomes)) == n
        assert balance_of(db_session, "a") == Decimal("0.00")
        assert balance_of(db_session, "b") == Decimal("100.00")
        assert TransferLedger(db_session).count() == n
        assert ActivityLog(db_session).count(ActivityAction.TRANSFER_CREATED) == n

    def test_shared_key_on_different_accounts_moves_funds_once(
        self, db_session, admin, make_account, session_factory
    ):
        for user_id in ("a", "c"):
            make_account(user_id, balance="50.00")
        for user_id in ("b", "d"):
            make_account(user_id)
        jobs = [
            (admin.id, "a", "b", Decimal("10.00"), None, "shared-key"),
            (admin.id, "c", "d", Decimal("10.00"), None, "shared-key"),
        ]

        outcomes = run_concurrently(session_factory, jobs)

        assert all(isinstance(o, int) for o in outcomes), outcomes
        assert outcomes[0] == outcomes[1]
        assert TransferLedger(db_session).count() == 1
        assert ActivityLog(db_session).count(ActivityAction.TRANSFER_CREATED) == 1
        moved = [balance_of(db_session, user_id) for user_id in ("b", "d")]
        assert sorted(moved) == [Decimal("0.00"), Decimal("10.00")]
        assert ReconciliationService(db_session).check_integrity()["is_consistent"]
