"""Domain exceptions raised by the store, LLM and email layers."""


class KotaError(Exception):
    """Base class for engine errors."""


class UnknownEntityKindError(KotaError, ValueError):
    """Raised when an entity kind has no backing table."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Unknown entity kind: {kind}")


class RecordNotFoundError(KotaError, LookupError):
    """Raised when a record does not exist or belongs to another owner."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} record {record_id} not found")


class LLMResponseError(KotaError):
    """Raised when the LLM returns nothing usable."""


class EmailDeliveryError(KotaError):
    """Raised when an outbound email cannot be sent."""
