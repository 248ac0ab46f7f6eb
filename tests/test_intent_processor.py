"""Tests for the intent processor: ordering, move handling, isolation, commits."""

from datetime import date, datetime
from unittest.mock import AsyncMock, MagicMock, patch
from zoneinfo import ZoneInfo

import pytest

from kota.chains.intent_processor import IntentProcessor, build_move_record, build_record
from kota.core.schemas_entities import EntityKind
from kota.core.schemas_intents import (
    AssetExtraction,
    BillExtraction,
    DeletionExtraction,
    EventExtraction,
    IntentOperation,
    MemoryExtraction,
    MoveExtraction,
    ProjectExtraction,
    SubscriptionExtraction,
    TaskExtraction,
)

OWNER = "pat@example.com"
NOW = datetime(2026, 10, 17, 9, 30, tzinfo=ZoneInfo("America/Chicago"))
TODAY = NOW.date()

MODULE = "kota.chains.intent_processor"


class _Store:
    """Patches the processor's extraction and store functions."""

    def __init__(self, records=None):
        self.records = records or {}
        self.calls = []
        self.extract_deletion = AsyncMock(side_effect=self._track("extract_deletion"))
        self.extract_move = AsyncMock(side_effect=self._track("extract_move"))
        self.extract_creation_fields = AsyncMock(side_effect=self._track("extract_creation"))
        self.create_record = MagicMock(side_effect=self._create)
        self.delete_record = MagicMock(side_effect=self._delete)
        self.list_records = MagicMock(
            side_effect=lambda kind, owner, **kw: self.records.get(kind, [])
        )
        self.results = {}
        self._created = 0

    def _track(self, name):
        def _side_effect(*args, **kwargs):
            key = name if name != "extract_creation" else (name, args[0])
            self.calls.append(key)
            result = self.results.get(key)
            if isinstance(result, Exception):
                raise result
            return result
        return _side_effect

    def _create(self, kind, owner, data):
        self._created += 1
        self.calls.append(("create", kind))
        return {"id": f"new-{self._created}", **data}

    def _delete(self, kind, owner, record_id):
        self.calls.append(("delete", kind))

    def patches(self):
        return [
            patch(f"{MODULE}.extract_deletion", self.extract_deletion),
            patch(f"{MODULE}.extract_move", self.extract_move),
            patch(f"{MODULE}.extract_creation_fields", self.extract_creation_fields),
            patch(f"{MODULE}.create_record", self.create_record),
            patch(f"{MODULE}.delete_record", self.delete_record),
            patch(f"{MODULE}.list_records", self.list_records),
        ]


@pytest.fixture
def store():
    s = _Store()
    for p in s.patches():
        p.start()
    yield s
    patch.stopall()


def _processor(dry_run=False):
    return IntentProcessor(OWNER, dry_run=dry_run, now=NOW)


class TestNoIntent:
    @pytest.mark.asyncio
    async def test_plain_chat_makes_no_calls(self, store):
        result = await _processor().process_message("how are you doing today?")

        assert result.proposals == []
        assert result.created_items == []
        store.extract_deletion.assert_not_awaited()
        store.extract_move.assert_not_awaited()
        store.extract_creation_fields.assert_not_awaited()
        store.create_record.assert_not_called()


class TestCreation:
    @pytest.mark.asyncio
    async def test_task_is_committed_with_label(self, store):
        store.results[("extract_creation", EntityKind.TASK)] = TaskExtraction(
            title="Call John", priority="super urgent"
        )

        result = await _processor().process_message("remind me to call John")

        assert result.created_items == ["Task: Call John"]
        kind, owner, data = store.create_record.call_args.args
        assert kind == EntityKind.TASK
        assert owner == OWNER
        assert data["title"] == "Call John"
        assert data["priority"] == "medium"
        assert data["status"] == "todo"
        proposal = result.proposals[0]
        assert proposal.committed is True
        assert proposal.record_id == "new-1"

    @pytest.mark.asyncio
    async def test_missing_required_field_suppresses_proposal(self, store):
        # Extraction returns None when the required field is null
        store.results[("extract_creation", EntityKind.SUBSCRIPTION)] = None

        result = await _processor().process_message("add a subscription")

        assert result.proposals == []
        store.create_record.assert_not_called()

    @pytest.mark.asyncio
    async def test_context_and_reply_are_passed_to_extraction(self, store):
        store.results[("extract_creation", EntityKind.TASK)] = None

        await _processor().process_message(
            "remind me to order this", "Sure!", "user: Sakura Sushi & Grill looks good"
        )

        kwargs = store.extract_creation_fields.await_args.kwargs
        assert kwargs["assistant_reply"] == "Sure!"
        assert kwargs["context"] == "user: Sakura Sushi & Grill looks good"
        assert kwargs["now"] == NOW
        assert kwargs["owner"] == OWNER

    @pytest.mark.asyncio
    async def test_dry_run_proposes_without_writing(self, store):
        store.results[("extract_creation", EntityKind.TASK)] = TaskExtraction(title="Call John")

        result = await _processor(dry_run=True).process_message("remind me to call John")

        assert len(result.proposals) == 1
        assert result.proposals[0].committed is False
        assert result.created_items == []
        store.create_record.assert_not_called()

    @pytest.mark.asyncio
    async def test_asset_links_property_and_records_valuation(self, store):
        store.records[EntityKind.PROPERTY] = [{"id": "prop-1", "name": "Lake House"}]
        store.results[("extract_creation", EntityKind.ASSET)] = AssetExtraction(
            name="TV", category="electronics", purchase_price=800, property_name="lake house"
        )

        result = await _processor().process_message("track the TV I bought for $800")

        assert result.created_items == ["Asset: TV"]
        assert store.extract_creation_fields.await_args.kwargs["properties"] == ["Lake House"]
        asset_call, valuation_call = store.create_record.call_args_list
        assert asset_call.args[2]["property_id"] == "prop-1"
        assert asset_call.args[2]["current_value"] == 800
        kind, _, valuation = valuation_call.args
        assert kind == EntityKind.VALUATION
        assert valuation["asset_id"] == "new-1"
        assert valuation["amount"] == 800
        assert valuation["as_of_date"] == "2026-10-17"


class TestDeletion:
    @pytest.mark.asyncio
    async def test_deletion_runs_before_creations(self, store):
        store.records[EntityKind.BILL] = [{"id": "bill-9", "name": "Gym Membership"}]
        store.results["extract_deletion"] = DeletionExtraction(entity="bill", item_name="gym")
        store.results[("extract_creation", EntityKind.TASK)] = TaskExtraction(title="Call the gym")

        result = await _processor().process_message(
            "cancel the gym bill and remind me to call the gym"
        )

        assert store.calls.index("extract_deletion") < store.calls.index(
            ("extract_creation", EntityKind.TASK)
        )
        assert [p.operation for p in result.proposals] == [
            IntentOperation.DELETE,
            IntentOperation.CREATE,
        ]
        store.delete_record.assert_called_once_with(EntityKind.BILL, OWNER, "bill-9")
        # Deletions are not reported as created items
        assert result.created_items == ["Task: Call the gym"]

    @pytest.mark.asyncio
    async def test_no_matching_record_means_no_proposal(self, store):
        store.records[EntityKind.SUBSCRIPTION] = [{"id": "s1", "vendor": "Spotify"}]
        store.results["extract_deletion"] = DeletionExtraction(
            entity="subscription", item_name="Netflix"
        )

        result = await _processor().process_message("cancel netflix")

        assert result.proposals == []
        store.delete_record.assert_not_called()

    @pytest.mark.asyncio
    async def test_unsupported_kind_is_ignored(self, store):
        store.results["extract_deletion"] = DeletionExtraction(entity="memory", item_name="x")

        result = await _processor().process_message("delete that memory")

        assert result.proposals == []
        store.delete_record.assert_not_called()


class TestMove:
    MESSAGE = "remove Hulu from bills and add to subscriptions"

    @pytest.mark.asyncio
    async def test_move_is_one_deletion_and_one_creation(self, store):
        store.records[EntityKind.BILL] = [{"id": "bill-1", "name": "Hulu"}]
        store.results["extract_move"] = MoveExtraction(
            item_name="Hulu",
            from_entity="bills",
            to_entity="subscriptions",
            amount=7.99,
            interval="monthly",
        )

        result = await _processor().process_message(self.MESSAGE)

        store.extract_deletion.assert_not_awaited()
        store.extract_creation_fields.assert_not_awaited()
        store.delete_record.assert_called_once_with("bill", OWNER, "bill-1")
        store.create_record.assert_called_once()
        kind, _, data = store.create_record.call_args.args
        assert kind == EntityKind.SUBSCRIPTION
        assert data["vendor"] == "Hulu"
        assert data["amount"] == 7.99
        assert data["interval"] == "monthly"
        assert result.created_items == ["Moved to Subscription: Hulu (from bill)"]
        assert store.calls.index(("create", EntityKind.SUBSCRIPTION)) < store.calls.index(
            ("delete", "bill")
        )

    @pytest.mark.asyncio
    async def test_failed_insert_keeps_the_source(self, store):
        store.records[EntityKind.BILL] = [{"id": "bill-1", "name": "Hulu"}]
        store.results["extract_move"] = MoveExtraction(
            item_name="Hulu", from_entity="bill", to_entity="subscription"
        )
        store.create_record.side_effect = RuntimeError("insert failed")

        result = await _processor().process_message(self.MESSAGE)

        store.delete_record.assert_not_called()
        assert result.proposals[0].committed is False
        assert result.created_items == []

    @pytest.mark.asyncio
    async def test_failed_source_delete_still_counts_as_moved(self, store):
        store.records[EntityKind.BILL] = [{"id": "bill-1", "name": "Hulu"}]
        store.results["extract_move"] = MoveExtraction(
            item_name="Hulu", from_entity="bill", to_entity="subscription"
        )
        store.delete_record.side_effect = RuntimeError("delete failed")

        result = await _processor().process_message(self.MESSAGE)

        store.create_record.assert_called_once()
        assert result.proposals[0].committed is True
        assert result.created_items == ["Moved to Subscription: Hulu (from bill)"]

    @pytest.mark.asyncio
    async def test_unresolved_move_falls_back_to_deletion(self, store):
        store.records[EntityKind.BILL] = [{"id": "bill-1", "name": "Hulu"}]
        store.results["extract_move"] = None
        store.results["extract_deletion"] = DeletionExtraction(entity="bill", item_name="Hulu")

        result = await _processor().process_message(self.MESSAGE)

        store.extract_deletion.assert_awaited_once()
        assert result.proposals[0].operation == IntentOperation.DELETE
        store.delete_record.assert_called_once_with(EntityKind.BILL, OWNER, "bill-1")

    @pytest.mark.asyncio
    async def test_move_without_source_still_creates(self, store):
        store.results["extract_move"] = MoveExtraction(
            item_name="Hulu", from_entity="bill", to_entity="subscription"
        )

        result = await _processor().process_message(self.MESSAGE)

        store.delete_record.assert_not_called()
        assert result.created_items == ["Moved to Subscription: Hulu (from bill)"]


class TestIsolation:
    MESSAGE = "add a new project called Garden and add a task to buy seeds"

    @pytest.mark.asyncio
    async def test_extraction_failure_does_not_suppress_other_kinds(self, store):
        store.results[("extract_creation", EntityKind.TASK)] = RuntimeError("LLM down")
        store.results[("extract_creation", EntityKind.PROJECT)] = ProjectExtraction(name="Garden")

        result = await _processor().process_message(self.MESSAGE)

        assert [p.entity_kind for p in result.proposals] == [EntityKind.PROJECT]
        assert result.created_items == ["Project: Garden"]

    @pytest.mark.asyncio
    async def test_commit_failure_does_not_suppress_other_kinds(self, store):
        store.results[("extract_creation", EntityKind.TASK)] = TaskExtraction(title="Buy seeds")
        store.results[("extract_creation", EntityKind.PROJECT)] = ProjectExtraction(name="Garden")

        def _create(kind, owner, data):
            if kind == EntityKind.TASK:
                raise RuntimeError("insert failed")
            return {"id": "p-1", **data}

        store.create_record.side_effect = _create

        result = await _processor().process_message(self.MESSAGE)

        assert len(result.proposals) == 2
        assert result.proposals[0].committed is False
        assert result.proposals[1].committed is True
        assert result.created_items == ["Project: Garden"]


class TestBuildRecord:
    def test_bill_defaults_due_to_first_of_next_month(self):
        record = build_record(
            EntityKind.BILL, BillExtraction(name="Electric", amount=120), today=TODAY
        )
        assert record["due_date"] == "2026-11-01"
        assert record["category"] == "other"
        assert record["status"] == "pending"

    def test_bill_in_december_rolls_into_next_year(self):
        record = build_record(
            EntityKind.BILL, BillExtraction(name="Rent"), today=date(2026, 12, 20)
        )
        assert record["due_date"] == "2027-01-01"

    def test_project_start_defaults_to_today(self):
        record = build_record(EntityKind.PROJECT, ProjectExtraction(name="Garden"), today=TODAY)
        assert record["start_date"] == "2026-10-17"
        assert record["status"] == "active"

    def test_event_end_defaults_to_start(self):
        record = build_record(
            EntityKind.EVENT,
            EventExtraction(title="Dentist", start_date="2026-10-20T15:00:00-05:00"),
            today=TODAY,
        )
        assert record["end_date"] == "2026-10-20T15:00:00-05:00"
        assert record["all_day"] is False

    def test_subscription_choices_are_coerced(self):
        record = build_record(
            EntityKind.SUBSCRIPTION,
            SubscriptionExtraction(vendor="Netflix", interval="Annually", category="Streaming"),
            today=TODAY,
        )
        assert record["interval"] == "monthly"
        assert record["category"] == "streaming"

    def test_memory_importance_is_clamped_and_keeps_message(self):
        record = build_record(
            EntityKind.MEMORY,
            MemoryExtraction(key="location", value="Austin", importance=9),
            today=TODAY,
            user_message="I live in Austin",
        )
        assert record["importance"] == 5
        assert record["context"] == "I live in Austin"

    def test_asset_value_falls_back_to_purchase_price(self):
        record = build_record(
            EntityKind.ASSET, AssetExtraction(name="Couch", purchase_price=1200), today=TODAY
        )
        assert record["current_value"] == 1200
        assert record["property_id"] is None

    def test_move_to_bill_is_due_today(self):
        record = build_move_record(
            EntityKind.BILL, MoveExtraction(item_name="Hulu", amount=7.99), TODAY
        )
        assert record == {
            "name": "Hulu",
            "amount": 7.99,
            "due_date": "2026-10-17",
            "category": "other",
            "recurring": False,
            "status": "pending",
            "notes": "",
        }
