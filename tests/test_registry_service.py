"""
Receipt registry orchestration tests.

Covers the registry properties:
1. Uniqueness of payment references, including after revocation
2. Monotonic ids, allocated only on success
3. Immutability of proof fields
4. Soulbound holders
5. Gate enforcement with no state change on rejection
6. Pause scope (issuance only)
7. The same properties under concurrent issuance and reads
and the end-to-end issuance scenarios.
"""
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from conftest import ADMIN, OUTSIDER, issue_kwargs
from models import MAX_AMOUNT, HolderState, ImmutableFieldError, RegistryEvent
from services.errors import (
    DuplicateReference,
    NotFound,
    SystemPaused,
    TransferForbidden,
    Unauthorized,
    ValidationFailed,
)


def _snapshot(registry):
    """Observable state used to assert that a rejected call changed nothing."""
    with registry._read() as db:
        event_count = db.query(RegistryEvent).count()
    return registry.status(), event_count


class TestScenarios:

    def test_issue_then_query(self, registry):
        receipt = registry.issue(ADMIN, **issue_kwargs())

        assert receipt.id == 1
        assert registry.get(1).amount == 1_000000
        assert registry.is_used("tx123") is True

    def test_duplicate_reference_leaves_counter(self, registry):
        registry.issue(ADMIN, **issue_kwargs())

        with pytest.raises(DuplicateReference):
            registry.issue(ADMIN, **issue_kwargs(buyer="0xB2"))

        assert registry.peek_next() == 2

    def test_pause_then_unpause(self, registry):
        registry.pause(ADMIN)
        with pytest.raises(SystemPaused):
            registry.issue(ADMIN, **issue_kwargs())

        registry.unpause(ADMIN)
        assert registry.issue(ADMIN, **issue_kwargs()).id == 1

    def test_revoke_keeps_reference_used(self, registry):
        registry.issue(ADMIN, **issue_kwargs())
        registry.revoke(ADMIN, 1)

        with pytest.raises(NotFound):
            registry.get(1)
        assert registry.is_used("tx123") is True


class TestUniqueness:

    def test_reference_never_recycled_after_revoke(self, registry):
        registry.issue(ADMIN, **issue_kwargs())
        registry.revoke(ADMIN, 1)

        with pytest.raises(DuplicateReference):
            registry.issue(ADMIN, **issue_kwargs())

    def test_reference_status_remembers_id(self, registry):
        registry.issue(ADMIN, **issue_kwargs(payment_reference="a"))
        registry.issue(ADMIN, **issue_kwargs(payment_reference="b"))
        registry.revoke(ADMIN, 2)

        assert registry.reference_status("b") == (True, 2)
        assert registry.reference_status("zzz") == (False, None)

    def test_distinct_references_coexist(self, registry):
        ids = [registry.issue(ADMIN, **issue_kwargs(payment_reference=f"tx{i}")).id for i in range(5)]
        refs = {registry.get(i).payment_reference for i in ids}
        assert len(refs) == 5

    def test_reference_stored_normalized(self, registry):
        registry.issue(ADMIN, **issue_kwargs(payment_reference="  tx123  "))
        assert registry.get(1).payment_reference == "tx123"
        with pytest.raises(DuplicateReference):
            registry.issue(ADMIN, **issue_kwargs(payment_reference="tx123"))


class TestMonotonicIdentity:

    def test_ids_strictly_increase(self, registry):
        ids = [registry.issue(ADMIN, **issue_kwargs(payment_reference=f"r{i}")).id for i in range(4)]
        assert ids == [1, 2, 3, 4]

    def test_failed_issue_allocates_nothing(self, registry):
        registry.issue(ADMIN, **issue_kwargs(payment_reference="r1"))
        with pytest.raises(ValidationFailed):
            registry.issue(ADMIN, **issue_kwargs(payment_reference="r2", amount=0))
        assert registry.issue(ADMIN, **issue_kwargs(payment_reference="r3")).id == 2

    def test_revoked_id_not_reissued(self, registry):
        registry.issue(ADMIN, **issue_kwargs(payment_reference="r1"))
        registry.revoke(ADMIN, 1)
        assert registry.issue(ADMIN, **issue_kwargs(payment_reference="r2")).id == 2


class TestValidation:

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"buyer": ""}, "buyer"),
            ({"buyer": "   "}, "buyer"),
            ({"buyer": None}, "buyer"),
            ({"issuer": ""}, "issuer"),
            ({"amount": 0}, "amount"),
            ({"amount": -5}, "amount"),
            ({"amount": True}, "amount"),
            ({"amount": 1.5}, "amount"),
            ({"amount": 2 ** 64}, "amount"),
            ({"amount": MAX_AMOUNT + 1}, "amount"),
            ({"payment_reference": ""}, "payment_reference"),
            ({"payment_reference": "  "}, "payment_reference"),
            ({"payment_reference": "x" * 256}, "payment_reference"),
            ({"metadata_pointer": "x" * 1025}, "metadata_pointer"),
        ],
    )
    def test_invalid_fields_rejected(self, registry, overrides, field):
        before = _snapshot(registry)
        with pytest.raises(ValidationFailed) as excinfo:
            registry.issue(ADMIN, **issue_kwargs(**overrides))
        assert excinfo.value.field == field
        assert _snapshot(registry) == before
        assert registry.is_used(issue_kwargs(**overrides)["payment_reference"] or "tx123") is False

    def test_largest_amount_accepted(self, registry):
        receipt = registry.issue(ADMIN, **issue_kwargs(amount=MAX_AMOUNT))
        assert registry.get(receipt.id).amount == MAX_AMOUNT

    def test_order_reference_optional(self, registry):
        receipt = registry.issue(ADMIN, **issue_kwargs(order_reference=None))
        assert registry.get(receipt.id).order_reference is None


class TestImmutability:

    def test_amend_changes_only_metadata(self, registry):
        original = registry.issue(ADMIN, **issue_kwargs())
        registry.amend(ADMIN, 1, "ipfs://b")
        registry.amend(ADMIN, 1, "ipfs://c")

        stored = registry.get(1)
        assert stored.metadata_pointer == "ipfs://c"
        for field in ("buyer", "issuer", "amount", "payment_reference", "order_reference", "issued_at"):
            assert getattr(stored, field) == getattr(original, field)

    def test_returned_receipt_rejects_proof_changes(self, registry):
        receipt = registry.issue(ADMIN, **issue_kwargs())
        with pytest.raises(ImmutableFieldError):
            receipt.buyer = "0xB2"
        assert registry.get(1).buyer == "0xB1"

    def test_amend_unknown_raises(self, registry):
        with pytest.raises(NotFound):
            registry.amend(ADMIN, 99, "ipfs://b")


class TestSoulbound:

    def test_holder_assigned_at_issue(self, registry):
        registry.issue(ADMIN, **issue_kwargs())
        assert registry.holder_of(1) == ("0xB1", HolderState.HELD)
        assert registry.balance_of("0xB1") == 1

    def test_transfer_forbidden(self, registry):
        registry.issue(ADMIN, **issue_kwargs())

        with pytest.raises(TransferForbidden):
            registry.transfer("0xB1", 1, "0xB2")
        with pytest.raises(TransferForbidden):
            registry.transfer(ADMIN, 1, "0xB2")

        assert registry.holder_of(1) == ("0xB1", HolderState.HELD)
        assert registry.balance_of("0xB2") == 0

    def test_transfer_unknown_raises_not_found(self, registry):
        with pytest.raises(NotFound):
            registry.transfer("0xB1", 5, "0xB2")

    def test_revoke_clears_holder(self, registry):
        registry.issue(ADMIN, **issue_kwargs())
        registry.revoke(ADMIN, 1)

        assert registry.holder_of(1) == (None, HolderState.REVOKED)
        assert registry.balance_of("0xB1") == 0

    def test_never_issued_holder(self, registry):
        assert registry.holder_of(3) == (None, HolderState.NEVER_ISSUED)

    def test_revoke_twice_raises_not_found(self, registry):
        registry.issue(ADMIN, **issue_kwargs())
        registry.revoke(ADMIN, 1)
        with pytest.raises(NotFound):
            registry.revoke(ADMIN, 1)


class TestGateEnforcement:

    def test_non_admin_mutations_rejected(self, registry):
        registry.issue(ADMIN, **issue_kwargs())
        before = _snapshot(registry)

        calls = [
            lambda: registry.issue(OUTSIDER, **issue_kwargs(payment_reference="tx999")),
            lambda: registry.amend(OUTSIDER, 1, "ipfs://evil"),
            lambda: registry.revoke(OUTSIDER, 1),
            lambda: registry.pause(OUTSIDER),
            lambda: registry.unpause(OUTSIDER),
            lambda: registry.transfer_admin(OUTSIDER, OUTSIDER),
        ]
        for call in calls:
            with pytest.raises(Unauthorized):
                call()

        assert _snapshot(registry) == before
        assert registry.get(1).metadata_pointer == "ipfs://a"
        assert registry.is_used("tx999") is False

    def test_gate_checked_before_pause(self, registry):
        registry.pause(ADMIN)
        with pytest.raises(Unauthorized):
            registry.issue(OUTSIDER, **issue_kwargs())

    def test_transfer_admin_hands_over_gate(self, registry):
        assert registry.transfer_admin(ADMIN, "0xNEW") == "0xNEW"
        with pytest.raises(Unauthorized):
            registry.issue(ADMIN, **issue_kwargs())
        assert registry.issue("0xNEW", **issue_kwargs()).id == 1


class TestPauseScope:

    def test_admin_operations_allowed_while_paused(self, registry):
        registry.issue(ADMIN, **issue_kwargs(payment_reference="r1"))
        registry.issue(ADMIN, **issue_kwargs(payment_reference="r2"))
        registry.pause(ADMIN)

        registry.amend(ADMIN, 1, "ipfs://b")
        registry.revoke(ADMIN, 2)
        registry.pause(ADMIN)
        assert registry.status()["paused"] is True

        registry.unpause(ADMIN)
        registry.unpause(ADMIN)
        assert registry.status()["paused"] is False

    def test_paused_issue_changes_nothing(self, registry):
        registry.pause(ADMIN)
        before = _snapshot(registry)
        with pytest.raises(SystemPaused):
            registry.issue(ADMIN, **issue_kwargs())
        assert _snapshot(registry) == before
        assert registry.is_used("tx123") is False


class TestQueries:

    def test_verify(self, registry):
        registry.issue(ADMIN, **issue_kwargs())
        assert registry.verify(1, "0xB1") is True
        assert registry.verify(1, "0xB2") is False

    def test_verify_unknown_raises(self, registry):
        with pytest.raises(NotFound):
            registry.verify(1, "0xB1")

    def test_receipts_of_excludes_revoked(self, registry):
        registry.issue(ADMIN, **issue_kwargs(payment_reference="r1"))
        registry.issue(ADMIN, **issue_kwargs(payment_reference="r2"))
        registry.revoke(ADMIN, 1)

        receipts, total = registry.receipts_of("0xB1")
        assert total == 1
        assert receipts[0].id == 2

    def test_status(self, registry):
        assert registry.status() == {"admin": ADMIN, "paused": False, "next_id": 1}

    def test_initialize_is_restart_safe(self, registry):
        registry.issue(ADMIN, **issue_kwargs())
        assert registry.initialize("0xOTHER") == ADMIN
        assert registry.peek_next() == 2


class TestConcurrency:

    def test_concurrent_issuance_keeps_invariants(self, file_registry):
        references = [f"tx{i % 10}" for i in range(40)]
        issued, rejected, unexpected = [], [], []
        peeks, reader_errors = [], []
        done = threading.Event()

        def issue(reference):
            try:
                issued.append(file_registry.issue(ADMIN, **issue_kwargs(payment_reference=reference)).id)
            except DuplicateReference:
                rejected.append(reference)
            except Exception as exc:
                unexpected.append(exc)

        def read():
            try:
                while not done.is_set():
                    peeks.append(file_registry.peek_next())
                    file_registry.is_used("tx0")
            except Exception as exc:
                reader_errors.append(exc)

        readers = [threading.Thread(target=read) for _ in range(2)]
        for reader in readers:
            reader.start()
        with ThreadPoolExecutor(max_workers=4) as pool:
            list(pool.map(issue, references))
        done.set()
        for reader in readers:
            reader.join()

        assert unexpected == []
        assert reader_errors == []
        assert sorted(issued) == list(range(1, 11))
        assert len(rejected) == 30
        assert all(1 <= value <= 11 for value in peeks)
        assert file_registry.peek_next() == 11
        assert all(file_registry.is_used(f"tx{i}") for i in range(10))
        assert file_registry.verify_event_chain()[0] is True
