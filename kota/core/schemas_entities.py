"""Pydantic schemas for entity store records."""

from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# Entity kinds
# ============================================================================


class EntityKind(str, Enum):
    """Every record type held in the entity store."""
    TASK = "task"
    EVENT = "event"
    PROJECT = "project"
    CONTACT = "contact"
    BILL = "bill"
    SUBSCRIPTION = "subscription"
    LEARNING = "learning"
    ASSET = "asset"
    MEMORY = "memory"
    VALUATION = "valuation"
    PROPERTY = "property"
    CONVERSATION = "conversation"
    PROFILE = "profile"
    EMAIL_DRAFT = "email_draft"
    NOTIFICATION = "notification"


ENTITY_TABLES: dict[EntityKind, str] = {
    EntityKind.TASK: "tasks",
    EntityKind.EVENT: "events",
    EntityKind.PROJECT: "projects",
    EntityKind.CONTACT: "contacts",
    EntityKind.BILL: "bills",
    EntityKind.SUBSCRIPTION: "subscriptions",
    EntityKind.LEARNING: "learning_goals",
    EntityKind.ASSET: "assets",
    EntityKind.MEMORY: "memories",
    EntityKind.VALUATION: "valuations",
    EntityKind.PROPERTY: "properties",
    EntityKind.CONVERSATION: "conversations",
    EntityKind.PROFILE: "profiles",
    EntityKind.EMAIL_DRAFT: "email_drafts",
    EntityKind.NOTIFICATION: "notifications",
}

# Fields that carry a record's human-readable name, checked in this order
NAME_FIELDS = ("name", "vendor", "title", "subject")


# ============================================================================
# Choice enums
# ============================================================================


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class SubscriptionInterval(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class SubscriptionCategory(str, Enum):
    SOFTWARE = "software"
    STREAMING = "streaming"
    UTILITIES = "utilities"
    INSURANCE = "insurance"
    MEMBERSHIP = "membership"
    EDUCATION = "education"
    FITNESS = "fitness"
    OTHER = "other"


class BillCategory(str, Enum):
    UTILITIES = "utilities"
    RENT = "rent"
    INSURANCE = "insurance"
    CREDIT_CARD = "credit_card"
    LOAN = "loan"
    TAX = "tax"
    MEDICAL = "medical"
    OTHER = "other"


class BillStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class AssetCategory(str, Enum):
    ELECTRONICS = "electronics"
    FURNITURE = "furniture"
    JEWELRY = "jewelry"
    VEHICLE = "vehicle"
    ART = "art"
    REAL_ESTATE = "real_estate"
    OTHER = "other"


class LearningDifficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


def _coerce_choice(value: Any, enum_cls: type[Enum], default: Enum) -> Enum:
    """Map free-form LLM output onto an enum member, falling back to default."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower().replace(" ", "_").replace("-", "_")
        for member in enum_cls:
            if member.value == normalized:
                return member
    return default


# ============================================================================
# Record schemas
# ============================================================================


class RecordBase(BaseModel):
    """Common record config: unknown columns pass through untouched."""
    model_config = ConfigDict(extra="allow", use_enum_values=True)


class TaskRecord(RecordBase):
    title: str
    notes: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    project_id: Optional[str] = None

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, v: Any) -> TaskPriority:
        return _coerce_choice(v, TaskPriority, TaskPriority.MEDIUM)


class EventRecord(RecordBase):
    title: str
    description: str = ""
    start_date: str
    end_date: Optional[str] = None
    location: str = ""
    all_day: bool = False


class ProjectRecord(RecordBase):
    name: str
    description: str = ""
    start_date: Optional[str] = None
    target_date: Optional[str] = None
    status: str = "active"


class ContactRecord(RecordBase):
    name: str
    email: str = ""
    phone: str = ""
    company: str = ""
    notes: str = ""


class BillRecord(RecordBase):
    name: str
    amount: float = 0
    due_date: Optional[str] = None
    category: BillCategory = BillCategory.OTHER
    recurring: bool = False
    status: BillStatus = BillStatus.PENDING
    notes: str = ""

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, v: Any) -> BillCategory:
        return _coerce_choice(v, BillCategory, BillCategory.OTHER)


class SubscriptionRecord(RecordBase):
    vendor: str
    amount: float = 0
    interval: SubscriptionInterval = SubscriptionInterval.MONTHLY
    category: SubscriptionCategory = SubscriptionCategory.OTHER
    next_renewal: Optional[str] = None
    status: str = "active"

    @field_validator("interval", mode="before")
    @classmethod
    def _interval(cls, v: Any) -> SubscriptionInterval:
        return _coerce_choice(v, SubscriptionInterval, SubscriptionInterval.MONTHLY)

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, v: Any) -> SubscriptionCategory:
        return _coerce_choice(v, SubscriptionCategory, SubscriptionCategory.OTHER)


class LearningRecord(RecordBase):
    subject: str
    goal: str = ""
    difficulty: LearningDifficulty = LearningDifficulty.BEGINNER
    notes: str = ""
    status: str = "active"
    progress: int = 0
    streak: int = 0

    @field_validator("difficulty", mode="before")
    @classmethod
    def _difficulty(cls, v: Any) -> LearningDifficulty:
        return _coerce_choice(v, LearningDifficulty, LearningDifficulty.BEGINNER)


class AssetRecord(RecordBase):
    name: str
    category: AssetCategory = AssetCategory.OTHER
    brand: str = ""
    purchase_price: Optional[float] = None
    current_value: Optional[float] = None
    purchase_date: Optional[str] = None
    property_id: Optional[str] = None
    notes: str = ""
    condition: str = "good"

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, v: Any) -> AssetCategory:
        return _coerce_choice(v, AssetCategory, AssetCategory.OTHER)


class ValuationRecord(RecordBase):
    asset_id: str
    amount: float
    valuation_type: str = "manual"
    as_of_date: str = Field(default_factory=lambda: date.today().isoformat())
    source: str = ""


class MemoryRecord(RecordBase):
    key: str
    value: str
    importance: int = Field(default=3, ge=1, le=5)
    context: str = ""


class ConversationRecord(RecordBase):
    role: str
    message: str


class EmailDraftRecord(RecordBase):
    to: str = ""
    subject: str
    body: str = ""
    tone: str = "professional"
    status: str = "draft"


# Record schemas used to validate writes; kinds not listed accept any payload
RECORD_SCHEMAS: dict[EntityKind, type[RecordBase]] = {
    EntityKind.TASK: TaskRecord,
    EntityKind.EVENT: EventRecord,
    EntityKind.PROJECT: ProjectRecord,
    EntityKind.CONTACT: ContactRecord,
    EntityKind.BILL: BillRecord,
    EntityKind.SUBSCRIPTION: SubscriptionRecord,
    EntityKind.LEARNING: LearningRecord,
    EntityKind.ASSET: AssetRecord,
    EntityKind.VALUATION: ValuationRecord,
    EntityKind.MEMORY: MemoryRecord,
    EntityKind.CONVERSATION: ConversationRecord,
    EntityKind.EMAIL_DRAFT: EmailDraftRecord,
}


def record_name(record: dict[str, Any]) -> str | None:
    """Return the first populated name-like field of a record."""
    for field in NAME_FIELDS:
        value = record.get(field)
        if value:
            return str(value)
    return None
