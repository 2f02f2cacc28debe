"""Tests for LoyaltyEngine: rewards, order processing and persistence."""

import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from storefront.errors import PersistenceError
from storefront.loyalty import EntryKind, LedgerEntry, LoyaltyEngine, TierName
from storefront.loyalty import rules
from storefront.loyalty.codec import dump_ledger
from storefront.orders import OrderRecord
from storefront.persistence import BackgroundPersister
from storefront.storage import MemoryStorage

from .fixtures import DEEPLY_NESTED_JSON, FIXED_NOW

POINTS_KEY = "loyaltyPoints"
LEDGER_KEY = "loyaltyTransactions"


def _seed(engine, points):
    engine.add_bonus_points(points, "Opening balance")
    return engine


def _engine(storage, clock=lambda: FIXED_NOW):
    persister = BackgroundPersister(storage, name="test")
    engine = LoyaltyEngine(persister, clock=clock)
    assert engine.wait_until_ready(timeout=5)
    return engine, persister


class TestApplyReward:
    def test_shortfall_scenario(self, loyalty):
        _seed(loyalty, 300)

        applied = loyalty.apply_reward("discount-5", 200)

        assert applied is False
        assert "200" in loyalty.error
        assert loyalty.applied_reward is None
        assert loyalty.applied_discount == Decimal(0)

    def test_apply_sets_reward_and_discount(self, loyalty):
        _seed(loyalty, 600)

        assert loyalty.apply_reward("discount-5", 1000)

        assert loyalty.applied_reward.id == "discount-5"
        assert loyalty.applied_discount == Decimal("50")
        assert loyalty.error is None

    def test_reapplying_reprices_the_discount(self, loyalty):
        _seed(loyalty, 600)
        loyalty.apply_reward("discount-5", 1000)

        loyalty.apply_reward("discount-5", 2000)

        assert loyalty.applied_discount == Decimal("100")

    def test_rejected_apply_keeps_previous_reward(self, loyalty):
        _seed(loyalty, 600)
        loyalty.apply_reward("discount-5", 1000)

        assert not loyalty.apply_reward("discount-10", 1000)

        assert loyalty.applied_reward.id == "discount-5"
        assert loyalty.error == "You need 400 more points for this reward"

    def test_unknown_reward(self, loyalty):
        assert not loyalty.apply_reward("nope", 100)
        assert loyalty.error == "Reward not found"
        assert loyalty.validate_reward("nope", 100).reason == "Reward not found"

    def test_remove_reward_clears_state(self, loyalty):
        _seed(loyalty, 600)
        loyalty.apply_reward("discount-5", 1000)

        loyalty.remove_reward()

        assert loyalty.applied_reward is None
        assert loyalty.applied_discount == Decimal(0)
        assert loyalty.error is None


class TestProcessOrder:
    def test_bronze_earning(self, loyalty):
        assert loyalty.process_order(OrderRecord("ORD-1", Decimal("500")))

        assert loyalty.points_earned == 50
        assert loyalty.points == 50
        entry = loyalty.transactions[-1]
        assert entry.kind is EntryKind.EARNED
        assert entry.description == "Purchase: Order ORD-1"
        assert entry.order_id == "ORD-1"
        assert entry.expires_at == datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_tier_crossing_scenario(self, loyalty):
        _seed(loyalty, 900)
        assert loyalty.tier.name is TierName.BRONZE

        assert loyalty.process_order(OrderRecord("ORD-2", Decimal("2000")))

        kinds = [(entry.kind, entry.points) for entry in loyalty.transactions]
        assert kinds == [
            (EntryKind.BONUS, 900),
            (EntryKind.EARNED, 200),
            (EntryKind.BONUS, 100),
        ]
        assert loyalty.transactions[-1].description == "Tier Upgrade Bonus: Welcome to SILVER!"
        assert loyalty.tier.name is TierName.SILVER
        assert loyalty.points == 1200

    def test_no_bonus_without_tier_change(self, loyalty):
        _seed(loyalty, 1100)

        loyalty.process_order(OrderRecord("ORD-3", Decimal("100")))

        assert [entry.kind for entry in loyalty.transactions] == [
            EntryKind.BONUS,
            EntryKind.EARNED,
        ]

    def test_earns_at_tier_held_before_order(self, loyalty):
        _seed(loyalty, 990)

        loyalty.process_order(OrderRecord("ORD-4", Decimal("1000")))

        # BRONZE multiplier: 100 points, not the 120 SILVER would give.
        assert loyalty.points_earned == 100

    def test_redemption_then_earn(self, loyalty):
        _seed(loyalty, 600)
        loyalty.apply_reward("discount-5", 200)

        assert loyalty.process_order(OrderRecord("ORD-5", Decimal("200"), Decimal("10")))

        redeemed, earned = loyalty.transactions[-2:]
        assert redeemed.kind is EntryKind.REDEEMED
        assert redeemed.points == -500
        assert redeemed.description == "Redeemed: 5% Discount"
        assert earned.points == 20
        assert loyalty.points == 120
        assert loyalty.applied_reward is None
        assert loyalty.applied_discount == Decimal(0)

    def test_zero_subtotal_posts_no_earn_entry(self, loyalty):
        assert loyalty.process_order(OrderRecord("ORD-6", Decimal("5")))

        assert loyalty.transactions == ()
        assert loyalty.points_earned == 0

    def test_internal_failure_leaves_ledger_untouched(self, loyalty, monkeypatch):
        _seed(loyalty, 600)
        loyalty.apply_reward("discount-5", 200)
        before = loyalty.transactions

        def boom(*args, **kwargs):
            raise RuntimeError("calculator offline")

        monkeypatch.setattr(rules, "points_earned", boom)

        assert loyalty.process_order(OrderRecord("ORD-7", Decimal("200"))) is False
        assert loyalty.transactions == before
        assert loyalty.points == 600
        assert loyalty.applied_reward.id == "discount-5"
        assert loyalty.error == "Failed to process loyalty rewards"


class TestBonusAndQueries:
    def test_bonus_points_are_credited(self, loyalty):
        loyalty.add_bonus_points(250, "Birthday bonus")

        entry = loyalty.transactions[-1]
        assert entry.kind is EntryKind.BONUS
        assert entry.description == "Birthday bonus"
        assert loyalty.points == 250

    def test_non_positive_bonus_raises(self, loyalty):
        with pytest.raises(ValueError, match="positive"):
            loyalty.add_bonus_points(0, "nothing")

    def test_earning_preview_uses_current_tier(self, loyalty):
        _seed(loyalty, 1000)

        assert loyalty.earning_preview(1000) == 120

    def test_available_rewards(self, loyalty):
        _seed(loyalty, 600)

        ids = [reward.id for reward in loyalty.available_rewards]

        assert ids == ["discount-5", "fixed-25", "free-shipping"]

    def test_tier_progress_properties(self, loyalty):
        _seed(loyalty, 3000)

        assert loyalty.next_tier.name is TierName.GOLD
        assert loyalty.points_to_next_tier == 2000
        assert loyalty.tier_progress == Decimal(50)

    def test_history_is_newest_first(self, persister):
        ticks = iter(FIXED_NOW + timedelta(minutes=n) for n in range(10))
        engine = LoyaltyEngine(persister, clock=lambda: next(ticks))
        engine.wait_until_ready(timeout=5)
        engine.add_bonus_points(10, "first")
        engine.add_bonus_points(20, "second")

        history = engine.transaction_history()

        assert [entry.description for entry in history] == ["second", "first"]

    def test_export_data(self, loyalty):
        _seed(loyalty, 1500)

        document = json.loads(loyalty.export_data())

        assert document["points"] == 1500
        assert document["tier"] == "SILVER"
        assert document["transactions"][0]["type"] == "BONUS"
        assert document["exportDate"] == "2024-01-15T10:30:00.000Z"


class TestPersistence:
    def test_round_trip(self, storage):
        first, persister = _engine(storage)
        _seed(first, 900)
        first.process_order(OrderRecord("ORD-8", Decimal("2000")))
        persister.close()

        assert json.loads(storage.get_item(POINTS_KEY)) == 1200
        records = json.loads(storage.get_item(LEDGER_KEY))
        assert records[1]["expiryDate"] == "2025-01-15T10:30:00.000Z"

        second, persister = _engine(storage)
        try:
            assert second.transactions == first.transactions
            assert second.points == 1200
            assert second.tier.name is TierName.SILVER
        finally:
            persister.close()

    def test_ledger_wins_over_stored_balance(self):
        engine, persister = _engine(MemoryStorage({POINTS_KEY: "5000", LEDGER_KEY: "[]"}))
        try:
            assert engine.points == 0
        finally:
            persister.close()

    def test_malformed_ledger_starts_empty(self):
        engine, persister = _engine(MemoryStorage({LEDGER_KEY: '[{"id": 1}]'}))
        try:
            assert engine.ready
            assert engine.transactions == ()
        finally:
            persister.close()

    def test_undecodable_ledger_still_becomes_ready(self):
        engine, persister = _engine(MemoryStorage({LEDGER_KEY: DEEPLY_NESTED_JSON}))
        try:
            assert engine.ready
            assert engine.transactions == ()

            _seed(engine, 40)
            engine.flush(timeout=5)

            assert persister.storage.get_item(POINTS_KEY) == "40"
        finally:
            persister.close()

    def test_refresh_reloads_from_storage(self, loyalty, storage):
        _seed(loyalty, 100)
        loyalty.flush(timeout=5)

        other, persister = _engine(storage)
        other.add_bonus_points(400, "Promotion")
        persister.close()

        assert loyalty.refresh().result(timeout=5) is True
        assert loyalty.points == 500
        assert loyalty.error is None

    def test_refresh_failure_sets_error(self):
        class BrokenStorage(MemoryStorage):
            def get_item(self, key):
                raise PersistenceError(key, OSError("gone"))

        engine, persister = _engine(BrokenStorage())
        try:
            assert engine.ready
            assert engine.refresh().result(timeout=5) is False
            assert engine.error == "Failed to refresh loyalty data"
        finally:
            persister.close()

    def test_refresh_after_close_resolves_false(self, storage):
        engine, persister = _engine(storage)
        persister.close()

        assert engine.refresh().result(timeout=5) is False
        assert engine.ready

    def test_restored_ledger_is_chronological(self):
        newer = FIXED_NOW + timedelta(days=1)
        engine, persister = _engine(MemoryStorage())
        engine.add_bonus_points(5, "older")
        persister.close()
        older = engine.transactions[0]

        newest_first = dump_ledger(
            (
                LedgerEntry(
                    id="bonus-2",
                    kind=EntryKind.BONUS,
                    points=7,
                    description="newer",
                    timestamp=newer,
                ),
                older,
            )
        )
        restored, persister = _engine(MemoryStorage({LEDGER_KEY: newest_first}))
        try:
            assert [entry.description for entry in restored.transactions] == ["older", "newer"]
            assert restored.points == 12
        finally:
            persister.close()
