"""Intent processor: turns one chat turn into committed store records.

Flow for a user message:
1. Keyword gates pick candidate intents (see intent_detection).
2. A move request ("remove Hulu from bills, add to subscriptions") is
   extracted first. When it resolves, it owns the deletion and the creation
   for its two kinds.
3. Otherwise a deletion keyword triggers one deletion lookup.
4. Each creation gate that fired gets one extraction call.
5. Every proposal is committed independently unless running dry.

A failure in any single extraction or commit is logged and only drops that
proposal.

Usage:
    from kota.chains.intent_processor import IntentProcessor

    result = await IntentProcessor(owner).process_message(user_message, reply, context)
"""

from __future__ import annotations

from collections.abc import Awaitable
from datetime import date, datetime
from typing import Any

from kota.chains.extract_intent_fields import (
    extract_creation_fields,
    extract_deletion,
    extract_move,
)
from kota.chains.intent_detection import detect_intents
from kota.core.clock import first_of_next_month, user_now
from kota.core.exceptions import RecordNotFoundError, UnknownEntityKindError
from kota.core.logging import get_logger
from kota.core.schemas_entities import (
    NAME_FIELDS,
    AssetRecord,
    BillRecord,
    ContactRecord,
    EntityKind,
    EventRecord,
    LearningRecord,
    MemoryRecord,
    ProjectRecord,
    SubscriptionRecord,
    TaskRecord,
    ValuationRecord,
    record_name,
)
from kota.core.schemas_intents import (
    DELETABLE_KINDS,
    AssetExtraction,
    ExtractionBase,
    IntentOperation,
    IntentProposal,
    IntentResult,
    MoveExtraction,
)
from kota.db.entities import create_record, delete_record, list_records, resolve_kind

logger = get_logger(__name__)

# Destination kinds a moved item can be rebuilt as, with the field holding its name
MOVE_NAME_FIELDS: dict[EntityKind, str] = {
    EntityKind.SUBSCRIPTION: "vendor",
    EntityKind.BILL: "name",
    EntityKind.TASK: "title",
    EntityKind.PROJECT: "name",
    EntityKind.CONTACT: "name",
    EntityKind.LEARNING: "subject",
    EntityKind.ASSET: "name",
}


# ============================================================================
# Record builders (pure)
# ============================================================================


def build_record(
    kind: EntityKind,
    extraction: ExtractionBase,
    *,
    today: date,
    user_message: str = "",
    properties: list[dict] | None = None,
) -> dict[str, Any]:
    """Apply per-kind defaults to an extraction and return the row to insert."""
    e = extraction
    if kind == EntityKind.TASK:
        record = TaskRecord(
            title=e.title,
            notes=e.notes or "",
            priority=e.priority or "medium",
            due_date=e.due_date or None,
        )
    elif kind == EntityKind.EVENT:
        record = EventRecord(
            title=e.title,
            description=e.description or "",
            start_date=e.start_date,
            end_date=e.end_date or e.start_date,
            location=e.location or "",
            all_day=bool(e.all_day),
        )
    elif kind == EntityKind.PROJECT:
        record = ProjectRecord(
            name=e.name,
            description=e.description or "",
            start_date=e.start_date or today.isoformat(),
            target_date=e.target_date or None,
        )
    elif kind == EntityKind.CONTACT:
        record = ContactRecord(
            name=e.name,
            email=e.email or "",
            phone=e.phone or "",
            company=e.company or "",
            notes=e.notes or "",
        )
    elif kind == EntityKind.BILL:
        record = BillRecord(
            name=e.name,
            amount=e.amount or 0,
            due_date=e.due_date or first_of_next_month(today).isoformat(),
            category=e.category,
            recurring=bool(e.recurring),
            notes=e.notes or "",
        )
    elif kind == EntityKind.SUBSCRIPTION:
        record = SubscriptionRecord(
            vendor=e.vendor,
            amount=e.amount or 0,
            interval=e.interval,
            category=e.category,
            next_renewal=e.next_renewal or None,
        )
    elif kind == EntityKind.LEARNING:
        record = LearningRecord(
            subject=e.subject,
            goal=e.goal or "",
            difficulty=e.difficulty,
            notes=e.notes or "",
        )
    elif kind == EntityKind.ASSET:
        record = AssetRecord(
            name=e.name,
            category=e.category,
            brand=e.brand or "",
            purchase_price=e.purchase_price or None,
            current_value=e.current_value or e.purchase_price or None,
            purchase_date=e.purchase_date or None,
            property_id=match_property_id(e, properties or []),
            notes=e.notes or "",
        )
    elif kind == EntityKind.MEMORY:
        importance = e.importance or 3
        record = MemoryRecord(
            key=e.key,
            value=e.value,
            importance=min(max(importance, 1), 5),
            context=user_message,
        )
    else:
        raise UnknownEntityKindError(kind.value)
    return record.model_dump(mode="json")


def match_property_id(extraction: AssetExtraction, properties: list[dict]) -> str | None:
    """Find the property whose name equals the extracted one (case-insensitive)."""
    if not extraction.property_name:
        return None
    wanted = extraction.property_name.strip().lower()
    for prop in properties:
        if (prop.get("name") or "").strip().lower() == wanted:
            return prop.get("id")
    return None


def build_move_record(kind: EntityKind, move: MoveExtraction, today: date) -> dict[str, Any]:
    """Rebuild a moved item as a minimal record of its destination kind."""
    name = move.item_name
    if kind == EntityKind.SUBSCRIPTION:
        record = SubscriptionRecord(vendor=name, amount=move.amount or 0, interval=move.interval)
    elif kind == EntityKind.BILL:
        record = BillRecord(name=name, amount=move.amount or 0, due_date=today.isoformat())
    elif kind == EntityKind.TASK:
        record = TaskRecord(title=name)
    elif kind == EntityKind.PROJECT:
        record = ProjectRecord(name=name, start_date=today.isoformat())
    elif kind == EntityKind.CONTACT:
        record = ContactRecord(name=name)
    elif kind == EntityKind.LEARNING:
        record = LearningRecord(subject=name)
    elif kind == EntityKind.ASSET:
        record = AssetRecord(name=name, current_value=move.amount or None)
    else:
        raise UnknownEntityKindError(kind.value)
    return record.model_dump(mode="json")


def find_record_by_name(kind: EntityKind, owner: str, item_name: str) -> dict | None:
    """First owner record whose name, vendor, title or subject contains item_name."""
    needle = item_name.strip().lower()
    if not needle:
        return None
    for record in list_records(kind, owner):
        for field in NAME_FIELDS:
            value = record.get(field)
            if value and needle in str(value).lower():
                return record
    return None


# ============================================================================
# Processor
# ============================================================================


class IntentProcessor:
    """Runs detection, extraction and commits for one owner."""

    def __init__(self, owner: str, *, dry_run: bool = False, now: datetime | None = None):
        self.owner = owner
        self.dry_run = dry_run
        self.now = now or user_now()

    async def process_message(
        self,
        user_message: str,
        assistant_reply: str = "",
        recent_context: str = "",
    ) -> IntentResult:
        """
        Process one chat turn.

        Args:
            user_message: What the user typed
            assistant_reply: The assistant's reply to it
            recent_context: Recent conversation text for reference resolution

        Returns:
            IntentResult with proposals in evaluation order and labels of
            committed creations
        """
        result = IntentResult()
        intents = detect_intents(user_message)
        if not intents:
            logger.debug("No intent gates fired")
            return result

        logger.info(
            "Intent gates fired: "
            + ", ".join(
                f"{i.operation.value}:{i.entity_kind.value if i.entity_kind else '*'}"
                for i in intents
            )
        )
        operations = {i.operation for i in intents}
        handled_kinds: set[EntityKind] = set()

        moved = None
        if IntentOperation.MOVE in operations:
            moved = await self._guarded("Move", self._propose_move(user_message))
            if moved:
                self._accept(moved, result)
                handled_kinds.add(moved.entity_kind)
                handled_kinds.add(EntityKind(moved.fields["from_kind"]))

        if IntentOperation.DELETE in operations and moved is None:
            deletion = await self._guarded("Deletion", self._propose_deletion(user_message))
            if deletion:
                self._accept(deletion, result)

        for intent in intents:
            if intent.operation != IntentOperation.CREATE:
                continue
            kind = intent.entity_kind
            if kind in handled_kinds:
                logger.debug(f"Skipping {kind.value} creation, handled by move")
                continue
            proposal = await self._guarded(
                kind.value.title(),
                self._propose_creation(kind, user_message, assistant_reply, recent_context),
            )
            if proposal:
                self._accept(proposal, result)

        return result

    async def _guarded(
        self, label: str, pending: Awaitable[IntentProposal | None]
    ) -> IntentProposal | None:
        try:
            return await pending
        except Exception as e:
            logger.error(f"{label} extraction failed: {e}")
            return None

    def _accept(self, proposal: IntentProposal, result: IntentResult) -> None:
        result.proposals.append(proposal)
        if self.dry_run:
            return
        try:
            self._commit(proposal)
        except Exception as e:
            logger.error(
                f"Failed to commit {proposal.operation.value} {proposal.entity_kind.value}: {e}"
            )
            return
        if proposal.operation in (IntentOperation.CREATE, IntentOperation.MOVE):
            result.created_items.append(proposal.label)

    # ── Proposal builders ─────────────────────────────────────

    async def _propose_deletion(self, user_message: str) -> IntentProposal | None:
        extraction = await extract_deletion(user_message, owner=self.owner)
        if extraction is None:
            return None

        try:
            kind = resolve_kind(extraction.entity)
        except UnknownEntityKindError:
            logger.warning(f"Unsupported entity for deletion: {extraction.entity}")
            return None
        if kind not in DELETABLE_KINDS:
            logger.warning(f"Unsupported entity for deletion: {kind.value}")
            return None

        target = find_record_by_name(kind, self.owner, extraction.item_name)
        if target is None:
            logger.warning(f'Could not find "{extraction.item_name}" in {kind.value} for deletion')
            return None

        return IntentProposal(
            entity_kind=kind,
            operation=IntentOperation.DELETE,
            fields={"item_name": extraction.item_name, "matched_name": record_name(target)},
            record_id=str(target["id"]),
        )

    async def _propose_move(self, user_message: str) -> IntentProposal | None:
        move = await extract_move(user_message, owner=self.owner)
        if move is None:
            return None

        try:
            from_kind = resolve_kind(move.from_entity)
            to_kind = resolve_kind(move.to_entity)
        except UnknownEntityKindError as e:
            logger.warning(f"Unsupported entity in move request: {e.kind}")
            return None
        if to_kind not in MOVE_NAME_FIELDS:
            logger.warning(f'Moving to entity "{to_kind.value}" is not supported')
            return None

        source = None
        if from_kind in DELETABLE_KINDS:
            source = find_record_by_name(from_kind, self.owner, move.item_name)
        if source is None:
            logger.warning(f'Could not find "{move.item_name}" in {from_kind.value} to move')

        return IntentProposal(
            entity_kind=to_kind,
            operation=IntentOperation.MOVE,
            fields={
                "item_name": move.item_name,
                "from_kind": from_kind.value,
                "source_record_id": str(source["id"]) if source else None,
                "record": build_move_record(to_kind, move, self.now.date()),
            },
        )

    async def _propose_creation(
        self,
        kind: EntityKind,
        user_message: str,
        assistant_reply: str,
        recent_context: str,
    ) -> IntentProposal | None:
        properties: list[dict] = []
        if kind == EntityKind.ASSET:
            properties = list_records(EntityKind.PROPERTY, self.owner)

        extraction = await extract_creation_fields(
            kind,
            user_message,
            now=self.now,
            assistant_reply=assistant_reply,
            context=recent_context,
            properties=[p["name"] for p in properties if p.get("name")],
            owner=self.owner,
        )
        if extraction is None:
            return None

        return IntentProposal(
            entity_kind=kind,
            operation=IntentOperation.CREATE,
            fields=build_record(
                kind,
                extraction,
                today=self.now.date(),
                user_message=user_message,
                properties=properties,
            ),
        )

    # ── Commit ────────────────────────────────────────────────

    def _commit(self, proposal: IntentProposal) -> None:
        if proposal.operation == IntentOperation.DELETE:
            delete_record(proposal.entity_kind, self.owner, proposal.record_id)
        elif proposal.operation == IntentOperation.MOVE:
            # Destination first: a failed insert must leave the source in place
            created = create_record(proposal.entity_kind, self.owner, proposal.fields["record"])
            proposal.record_id = created.get("id")
            source_id = proposal.fields.get("source_record_id")
            if source_id:
                self._delete_move_source(proposal.fields["from_kind"], source_id)
        else:
            created = create_record(proposal.entity_kind, self.owner, proposal.fields)
            proposal.record_id = created.get("id")
            if proposal.entity_kind == EntityKind.ASSET:
                self._record_initial_valuation(created, proposal.fields)

        proposal.committed = True
        logger.info(
            f"Committed {proposal.operation.value} {proposal.entity_kind.value} "
            f"{proposal.record_id}"
        )

    def _delete_move_source(self, from_kind: str, source_id: str) -> None:
        try:
            delete_record(from_kind, self.owner, source_id)
        except RecordNotFoundError:
            logger.warning(f"Move source {source_id} already gone")
        except Exception as e:
            # The destination already exists, so the move stands
            logger.error(f"Failed to delete move source {from_kind} {source_id}: {e}")

    def _record_initial_valuation(self, asset: dict, fields: dict[str, Any]) -> None:
        value = fields.get("current_value")
        if not value or not asset.get("id"):
            return
        valuation = ValuationRecord(
            asset_id=str(asset["id"]),
            amount=value,
            as_of_date=self.now.date().isoformat(),
            source="Initial value from creation",
        )
        create_record(EntityKind.VALUATION, self.owner, valuation.model_dump(mode="json"))
