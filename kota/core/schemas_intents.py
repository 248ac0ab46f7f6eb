"""Pydantic schemas for intent detection, extraction and proposals."""

from enum import Enum
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field

from kota.core.schemas_entities import EntityKind


class IntentOperation(str, Enum):
    """What a proposal does to the entity store."""
    CREATE = "create"
    DELETE = "delete"
    MOVE = "move"


# Kinds a deletion request may target
DELETABLE_KINDS: tuple[EntityKind, ...] = (
    EntityKind.BILL,
    EntityKind.SUBSCRIPTION,
    EntityKind.TASK,
    EntityKind.EVENT,
    EntityKind.CONTACT,
    EntityKind.ASSET,
    EntityKind.PROJECT,
    EntityKind.LEARNING,
)


# ============================================================================
# Detection
# ============================================================================


class DetectedIntent(BaseModel):
    """A keyword gate that fired for a message."""
    operation: IntentOperation
    entity_kind: Optional[EntityKind] = None  # None for delete/move until extracted
    trigger: str = ""


# ============================================================================
# Extraction results (raw LLM output, every field nullable)
# ============================================================================


class ExtractionBase(BaseModel):
    """Base for extraction payloads. Subclasses list their required fields."""
    model_config = ConfigDict(extra="ignore")

    REQUIRED: ClassVar[tuple[str, ...]] = ()

    def missing_required(self) -> list[str]:
        """Names of required fields that are null or blank."""
        missing = []
        for name in self.REQUIRED:
            value = getattr(self, name, None)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        return missing


class DeletionExtraction(ExtractionBase):
    REQUIRED: ClassVar[tuple[str, ...]] = ("entity", "item_name")
    entity: Optional[str] = None
    item_name: Optional[str] = None


class MoveExtraction(ExtractionBase):
    REQUIRED: ClassVar[tuple[str, ...]] = ("item_name", "from_entity", "to_entity")
    item_name: Optional[str] = None
    from_entity: Optional[str] = None
    to_entity: Optional[str] = None
    amount: Optional[float] = None
    interval: Optional[str] = None


class TaskExtraction(ExtractionBase):
    REQUIRED: ClassVar[tuple[str, ...]] = ("title",)
    title: Optional[str] = None
    notes: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[str] = None


class EventExtraction(ExtractionBase):
    REQUIRED: ClassVar[tuple[str, ...]] = ("title", "start_date")
    title: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    location: Optional[str] = None
    all_day: Optional[bool] = None


class ProjectExtraction(ExtractionBase):
    REQUIRED: ClassVar[tuple[str, ...]] = ("name",)
    name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[str] = None
    target_date: Optional[str] = None


class ContactExtraction(ExtractionBase):
    REQUIRED: ClassVar[tuple[str, ...]] = ("name",)
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    notes: Optional[str] = None


class BillExtraction(ExtractionBase):
    REQUIRED: ClassVar[tuple[str, ...]] = ("name",)
    name: Optional[str] = None
    amount: Optional[float] = None
    due_date: Optional[str] = None
    category: Optional[str] = None
    recurring: Optional[bool] = None
    notes: Optional[str] = None


class SubscriptionExtraction(ExtractionBase):
    REQUIRED: ClassVar[tuple[str, ...]] = ("vendor",)
    vendor: Optional[str] = None
    amount: Optional[float] = None
    interval: Optional[str] = None
    category: Optional[str] = None
    next_renewal: Optional[str] = None


class LearningExtraction(ExtractionBase):
    REQUIRED: ClassVar[tuple[str, ...]] = ("subject",)
    subject: Optional[str] = None
    goal: Optional[str] = None
    difficulty: Optional[str] = None
    notes: Optional[str] = None


class AssetExtraction(ExtractionBase):
    REQUIRED: ClassVar[tuple[str, ...]] = ("name",)
    name: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    purchase_price: Optional[float] = None
    current_value: Optional[float] = None
    purchase_date: Optional[str] = None
    property_name: Optional[str] = None
    notes: Optional[str] = None


class MemoryExtraction(ExtractionBase):
    REQUIRED: ClassVar[tuple[str, ...]] = ("key", "value")
    key: Optional[str] = None
    value: Optional[str] = None
    importance: Optional[int] = None


# ============================================================================
# Proposals
# ============================================================================


class IntentProposal(BaseModel):
    """A candidate create/delete/move action with its extracted fields."""
    entity_kind: EntityKind
    operation: IntentOperation
    fields: dict[str, Any] = Field(default_factory=dict)
    record_id: Optional[str] = None
    committed: bool = False

    @property
    def label(self) -> str:
        """Human-readable summary, e.g. 'Task: Call John'."""
        kind = self.entity_kind.value.replace("_", " ").title()
        name = (
            self.fields.get("title")
            or self.fields.get("name")
            or self.fields.get("vendor")
            or self.fields.get("subject")
            or self.fields.get("key")
            or self.fields.get("item_name")
            or ""
        )
        if self.operation == IntentOperation.DELETE:
            return f"Removed {kind}: {name}"
        if self.operation == IntentOperation.MOVE:
            source = self.fields.get("from_kind", "")
            return f"Moved to {kind}: {name}" + (f" (from {source})" if source else "")
        return f"{kind}: {name}"


class IntentResult(BaseModel):
    """Outcome of processing one chat turn."""
    proposals: list[IntentProposal] = Field(default_factory=list)
    created_items: list[str] = Field(default_factory=list)


class IntentProcessRequest(BaseModel):
    """Request body for running the pipeline on a chat turn."""
    user_message: str
    assistant_reply: str = ""
    recent_context: str = ""
    dry_run: bool = False


class IntentDetectRequest(BaseModel):
    user_message: str
