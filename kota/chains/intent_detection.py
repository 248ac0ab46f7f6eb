"""Keyword gates that pick candidate intents from a user chat message.

Pure regex matching, no LLM or store access. The gates are deliberately
liberal: a gate firing only means an extraction call is worth making, and the
extraction decides whether a real proposal exists.

Usage:
    from kota.chains.intent_detection import detect_intents

    for intent in detect_intents("remind me to call John"):
        ...
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from re import Pattern

from kota.core.schemas_entities import EntityKind
from kota.core.schemas_intents import DetectedIntent, IntentOperation


def _words(*alternatives: str) -> Pattern[str]:
    return re.compile(r"\b(?:" + "|".join(alternatives) + r")\b", re.IGNORECASE)


# Verb stems anchored at a word start, so "cancelling" and "deleted" count
DELETION_PATTERN = re.compile(r"\b(?:remov|delet|cancel)\w*|\bget rid of\b", re.IGNORECASE)
MOVE_REMOVE_PATTERN = re.compile(r"\b(?:remov|delet)\w*", re.IGNORECASE)
# Spelled out so "address" and "movie" do not count
MOVE_ADD_PATTERN = _words("add", "adds", "added", "adding", "move", "moves", "moved", "moving")


@dataclass(frozen=True)
class IntentGate:
    """Creation gate for one entity kind.

    Fires when any phrase matches, or when both `verb` and `noun` match
    somewhere in the message.
    """

    kind: EntityKind
    verb: Pattern[str] | None = None
    noun: Pattern[str] | None = None
    phrases: tuple[Pattern[str], ...] = field(default_factory=tuple)

    def match(self, text: str) -> str | None:
        """Return the matched trigger text, or None."""
        for phrase in self.phrases:
            m = phrase.search(text)
            if m:
                return m.group(0)
        if self.verb is not None and self.noun is not None:
            verb_match = self.verb.search(text)
            noun_match = self.noun.search(text)
            if verb_match and noun_match:
                return f"{verb_match.group(0)} + {noun_match.group(0)}"
        return None


# Creation gates, in evaluation order
CREATION_GATES: tuple[IntentGate, ...] = (
    IntentGate(
        EntityKind.TASK,
        verb=_words("add", "create", "new", "track"),
        noun=_words("tasks?", "to do", "todos?"),
        phrases=(_words("remind me"),),
    ),
    IntentGate(
        EntityKind.EVENT,
        verb=_words("add", "create", "schedule"),
        noun=_words("events?", "appointments?", "meetings?", "calendar"),
        phrases=(
            _words(
                "schedule",
                "add to (?:my )?calendar",
                "create event",
                "book",
                "add appointment",
                "set up meeting",
            ),
        ),
    ),
    IntentGate(
        EntityKind.PROJECT,
        verb=_words("create", "new", "start", "add", "track"),
        noun=_words("projects?"),
    ),
    IntentGate(
        EntityKind.CONTACT,
        verb=_words("add", "save", "new", "create", "track"),
        noun=_words("contacts?"),
    ),
    IntentGate(
        EntityKind.BILL,
        verb=_words("add", "track", "create", "new"),
        noun=_words("bills?", "payments?"),
        phrases=(_words("add to (?:my )?bills"),),
    ),
    IntentGate(
        EntityKind.SUBSCRIPTION,
        verb=_words("add", "track", "create", "new"),
        noun=_words("subscriptions?"),
        phrases=(_words("add to (?:my )?subscriptions"),),
    ),
    IntentGate(
        EntityKind.LEARNING,
        verb=_words("add", "track", "new", "start", "create"),
        noun=_words("learning", "learn", "study"),
    ),
    IntentGate(
        EntityKind.ASSET,
        verb=_words("add", "track", "new", "create"),
        noun=_words("assets?", "purchase", "bought"),
    ),
    # Any "my" is enough; the memory extraction decides whether a fact was shared
    IntentGate(
        EntityKind.MEMORY,
        phrases=(_words("my name is", "i live", "i work", r"i am an?", r"i'm an?", "my", "mine"),),
    ),
)


def has_move_intent(message: str) -> bool:
    """'remove X from bills and add to subscriptions' style requests."""
    return bool(MOVE_REMOVE_PATTERN.search(message) and MOVE_ADD_PATTERN.search(message))


def detect_intents(message: str) -> list[DetectedIntent]:
    """Run every gate over a user message.

    Args:
        message: The user's chat message

    Returns:
        Candidate intents in evaluation order: delete, move, then creations
        in gate order. Empty when nothing fires.
    """
    if not message or not message.strip():
        return []

    intents: list[DetectedIntent] = []

    deletion = DELETION_PATTERN.search(message)
    if deletion:
        intents.append(
            DetectedIntent(operation=IntentOperation.DELETE, trigger=deletion.group(0))
        )

    if has_move_intent(message):
        intents.append(DetectedIntent(operation=IntentOperation.MOVE, trigger="remove + add"))

    for gate in CREATION_GATES:
        trigger = gate.match(message)
        if trigger:
            intents.append(
                DetectedIntent(
                    operation=IntentOperation.CREATE,
                    entity_kind=gate.kind,
                    trigger=trigger,
                )
            )

    return intents
