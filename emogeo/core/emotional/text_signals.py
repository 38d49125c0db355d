# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Text signal extraction from chat messages.

Three independent extractors work on the tail of the conversation:

- extract_personal_info: name, job and set-valued personal details
- classify_response_type: whether the last reply is a minimal one
- assess_trauma_indicators: keyword and emotion-threshold trauma flags

Scalar extraction is a chain of (pattern, field) rules evaluated in a
fixed priority; the first accepted candidate wins and a rejected candidate
(a stop word) passes control to the next match or rule. Only messages from
the user are scanned; assistant turns would otherwise feed the companion's
own phrasing ("I'm here for you") back into the context.

All matching is regex and keyword based. Nothing here is a clinical
assessment.
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from emogeo.core.emotional.constants import (
    EmotionDimension,
    ResponseCategory,
    TraumaIndicator,
)
from emogeo.core.emotional.context import (
    ChatMessage,
    EmotionVector,
    PersonalContext,
    ResponseTypeSignal,
    TraumaIndicators,
)
from emogeo.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PERSONAL_INFO_WINDOW = 5
DEFAULT_TRAUMA_MESSAGE_WINDOW = 3

_WORD = r"([a-z][a-z'-]*)"
_PHRASE = r"([a-z][a-z'-]*(?: (?!and\b|but\b|because\b|so\b|i\b|i'm\b)[a-z][a-z'-]*){0,3})"


@dataclass(frozen=True)
class ExtractionRule:
    """One step of a first-match extraction chain.

    Attributes:
        field: PersonalContext field the capture is written to.
        pattern: Compiled regex; group 1 is the candidate.
    """

    field: str
    pattern: re.Pattern[str]


def _rule(field: str, pattern: str) -> ExtractionRule:
    return ExtractionRule(field=field, pattern=re.compile(pattern))


# =============================================================================
# Extraction tables
# =============================================================================

NAME_RULES: tuple[ExtractionRule, ...] = (
    _rule("name", rf"\bmy name is {_WORD}"),
    _rule("name", rf"\bcall me {_WORD}"),
    _rule("name", rf"\bi'm {_WORD}"),
    _rule("name", rf"\bi am {_WORD}"),
)

JOB_RULES: tuple[ExtractionRule, ...] = (
    _rule("job", rf"\bi work as (?:an? )?{_WORD}"),
    _rule("job", rf"\bmy job is (?:an? )?{_WORD}"),
    _rule("job", rf"\bi'm an? {_WORD}"),
    _rule("job", rf"\bi am an? {_WORD}"),
    _rule("job", rf"\bi work at (?:the )?{_WORD}"),
)

INTEREST_RULES: tuple[ExtractionRule, ...] = (
    _rule("interests", rf"\bi love (?:to )?{_WORD}"),
    _rule("interests", rf"\bi enjoy {_WORD}"),
    _rule("interests", rf"\bi like (?:to )?{_WORD}"),
    _rule("interests", rf"\bmy hobby is {_WORD}"),
)

GOAL_RULES: tuple[ExtractionRule, ...] = (
    _rule("goals", rf"\bmy goal is to {_PHRASE}"),
    _rule("goals", rf"\bi want to {_PHRASE}"),
    _rule("goals", rf"\bi(?:'m| am) trying to {_PHRASE}"),
    _rule("goals", rf"\bi hope to {_PHRASE}"),
)

RELATIONSHIP_KEYWORDS: tuple[str, ...] = (
    "husband",
    "wife",
    "partner",
    "boyfriend",
    "girlfriend",
    "spouse",
    "kids",
    "children",
    "family",
    "parents",
    "mom",
    "dad",
    "sister",
    "brother",
)

# label -> alternatives, matched on word boundaries
CHALLENGE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "anxiety": ("anxious", "anxiety", "panic attacks?", "worrying"),
    "sleep problems": ("can't sleep", "insomnia", "not sleeping", "nightmares?"),
    "work stress": ("deadlines?", "burnout", "burned out", "overworked", "my boss"),
    "loneliness": ("lonely", "isolated", "no friends", "all alone"),
    "grief": ("grief", "grieving", "passed away", "funeral"),
    "relationship conflict": ("breakup", "broke up", "divorce", "fighting with", "argument"),
    "low mood": ("depressed", "depression", "hopeless", "empty inside"),
}

TOPIC_KEYWORDS: dict[str, tuple[str, ...]] = {
    "work": ("work", "job", "boss", "office", "career", "coworkers?"),
    "family": ("family", "mom", "dad", "parents", "kids", "children", "sister", "brother"),
    "relationships": ("partner", "boyfriend", "girlfriend", "husband", "wife", "dating", "breakup"),
    "health": ("sick", "doctor", "pain", "health", "illness", "hospital"),
    "sleep": ("sleep", "tired", "insomnia", "exhausted"),
    "school": ("school", "exams?", "homework", "college", "university", "classes"),
    "money": ("money", "rent", "bills", "debt", "finances"),
}

# Words that follow "i'm" / "i am" / "call me" but are not names
NAME_STOPWORDS: frozenset[str] = frozenset({
    "a", "an", "the", "not", "so", "just", "really", "very", "too", "also",
    "still", "always", "never", "here", "there", "sorry", "sure", "glad",
    "fine", "ok", "okay", "good", "bad", "well", "great", "alright",
    "feeling", "doing", "going", "having", "being", "getting", "trying",
    "working", "looking", "thinking", "talking", "struggling", "living",
    "tired", "sad", "happy", "angry", "mad", "scared", "afraid", "worried",
    "stressed", "anxious", "depressed", "lonely", "upset", "nervous", "numb",
    "overwhelmed", "exhausted", "frustrated", "confused", "lost", "done",
    "in", "at", "on", "from", "with", "about", "like", "kind", "sort",
    "back", "home", "busy", "alone", "now", "currently", "literally",
    "what", "who", "how", "why", "when", "that", "this", "it", "and", "but",
})

JOB_STOPWORDS: frozenset[str] = frozenset({
    "feeling", "doing", "going", "having", "bit", "little", "lot", "mess",
    "wreck", "total", "person", "very", "really", "good", "bad", "new",
    "big", "huge", "complete", "nervous", "failure", "burden", "home",
    "loss", "state",
})

INTEREST_STOPWORDS: frozenset[str] = frozenset({
    "it", "that", "this", "you", "him", "her", "them", "me", "my", "your",
    "the", "a", "an", "when", "how", "what", "being", "feeling", "to",
    "not", "so", "just", "really", "nothing", "anything",
})

GOAL_STOPWORDS: frozenset[str] = frozenset({
    "die", "kill", "hurt", "disappear", "give up", "end it", "sleep forever",
})

FILLER_RESPONSES: frozenset[str] = frozenset({
    "ok", "okay", "k", "mhm", "mm", "mmm", "yeah", "yep", "yes", "no",
    "nah", "sure", "fine", "whatever", "idk", "i don't know", "maybe",
    "i guess", "uh huh", "uh-huh", "right", "true", "exactly", "yup", "nope",
})

RESPONSE_CATEGORIES: tuple[tuple[ResponseCategory, frozenset[str]], ...] = (
    (ResponseCategory.DISMISSIVE, frozenset({"ok", "okay", "k", "fine", "whatever"})),
    (ResponseCategory.ACKNOWLEDGMENT, frozenset({"mhm", "mm", "uh huh", "yeah"})),
    (ResponseCategory.UNCERTAIN, frozenset({"idk", "i don't know", "maybe", "i guess"})),
)

MINIMAL_RESPONSE_MAX_LENGTH = 3

# keyword -> alternatives and the indicators it raises
TRAUMA_KEYWORDS: tuple[tuple[str, str, tuple[TraumaIndicator, ...]], ...] = (
    ("numb", r"numb", (TraumaIndicator.DISSOCIATION,)),
    ("unreal", r"unreal|not real", (TraumaIndicator.DISSOCIATION,)),
    ("detached", r"detached", (TraumaIndicator.DISSOCIATION,)),
    ("out of body", r"out of (?:my )?body", (TraumaIndicator.DISSOCIATION,)),
    ("spaced out", r"spac(?:ed|ing) out|zon(?:ed|ing) out", (TraumaIndicator.DISSOCIATION,)),
    ("on edge", r"on edge", (TraumaIndicator.HYPERVIGILANCE,)),
    ("can't relax", r"can'?t relax|cannot relax", (TraumaIndicator.HYPERVIGILANCE,)),
    ("jumpy", r"jumpy|startle[ds]?", (TraumaIndicator.HYPERVIGILANCE,)),
    ("paranoid", r"paranoid", (TraumaIndicator.HYPERVIGILANCE,)),
    ("unsafe", r"unsafe|not safe", (TraumaIndicator.HYPERVIGILANCE,)),
    ("panic", r"panic(?:king)?", (TraumaIndicator.HYPERVIGILANCE,)),
    ("avoid", r"avoid(?:ing|s|ed)?", (TraumaIndicator.AVOIDANCE,)),
    (
        "can't talk about",
        r"can'?t talk about|don'?t want to talk",
        (TraumaIndicator.AVOIDANCE,),
    ),
    ("stay away", r"stay(?:ing)? away", (TraumaIndicator.AVOIDANCE,)),
    ("flashback", r"flashbacks?", (TraumaIndicator.INTRUSION,)),
    ("nightmare", r"nightmares?", (TraumaIndicator.INTRUSION,)),
    ("replaying", r"replay(?:s|ing)?|keeps? replaying", (TraumaIndicator.INTRUSION,)),
    ("can't stop thinking", r"can'?t stop thinking", (TraumaIndicator.INTRUSION,)),
    ("memories", r"memories", (TraumaIndicator.INTRUSION,)),
    (
        "triggered",
        r"triggered",
        (TraumaIndicator.INTRUSION, TraumaIndicator.HYPERVIGILANCE),
    ),
)

DISSOCIATION_FEAR_THRESHOLD = 7.0
DISSOCIATION_SADNESS_THRESHOLD = 6.0


def _keyword_pattern(alternatives: str) -> re.Pattern[str]:
    return re.compile(rf"\b(?:{alternatives})\b")


_RELATIONSHIP_PATTERNS = [(k, _keyword_pattern(k)) for k in RELATIONSHIP_KEYWORDS]
_CHALLENGE_PATTERNS = [
    (label, _keyword_pattern("|".join(alts))) for label, alts in CHALLENGE_KEYWORDS.items()
]
_TOPIC_PATTERNS = [
    (label, _keyword_pattern("|".join(alts))) for label, alts in TOPIC_KEYWORDS.items()
]
_TRAUMA_PATTERNS = [
    (keyword, _keyword_pattern(alts), indicators) for keyword, alts, indicators in TRAUMA_KEYWORDS
]


# =============================================================================
# Helpers
# =============================================================================

def normalize_text(text: str) -> str:
    """Lower-case, trim and unify apostrophes."""
    return text.replace("’", "'").replace("‘", "'").strip().lower()


def _messages(messages: Iterable[Any] | None) -> list[ChatMessage]:
    return [ChatMessage.from_raw(m) for m in messages or []]


def recent_user_text(messages: Iterable[Any] | None, window: int) -> str:
    """Join the normalized user messages among the last ``window`` messages."""
    recent = _messages(messages)[-window:] if window > 0 else []
    return " ".join(normalize_text(m.content) for m in recent if m.role == "user").strip()


def _accepted(candidate: str, stopwords: frozenset[str]) -> bool:
    """A candidate is rejected when it is one character or starts with a stop word."""
    if len(candidate) <= 1:
        return False
    return not any(candidate == s or candidate.startswith(f"{s} ") for s in stopwords)


def first_match(
    text: str,
    rules: Sequence[ExtractionRule],
    stopwords: frozenset[str],
) -> str | None:
    """Run a first-match extraction chain.

    Rules are tried in order; within a rule, matches are tried left to
    right. A rejected candidate moves on to the next match.

    Args:
        text: Normalized text to scan.
        rules: Ordered extraction rules.
        stopwords: Candidates that must not be accepted.

    Returns:
        The first accepted candidate, or None.
    """
    for rule in rules:
        for match in rule.pattern.finditer(text):
            candidate = match.group(1).strip(" '-")
            if _accepted(candidate, stopwords):
                return candidate
    return None


def all_matches(
    text: str,
    rules: Sequence[ExtractionRule],
    stopwords: frozenset[str],
) -> list[str]:
    """Collect every accepted candidate of every rule, in rule order."""
    found: list[str] = []
    for rule in rules:
        for match in rule.pattern.finditer(text):
            candidate = match.group(1).strip(" '-")
            if _accepted(candidate, stopwords) and candidate not in found:
                found.append(candidate)
    return found


def _union(existing: Sequence[str], new: Iterable[str]) -> list[str]:
    merged = list(existing)
    for value in new:
        if value not in merged:
            merged.append(value)
    return merged


# =============================================================================
# Extractors
# =============================================================================

def extract_personal_info(
    messages: Iterable[Any] | None,
    existing_context: PersonalContext | None = None,
    window: int = DEFAULT_PERSONAL_INFO_WINDOW,
) -> PersonalContext:
    """Extract personal details from the recent conversation.

    Scalars (name, job) are only filled when still empty. Set-valued fields
    are unioned with what the existing context already holds. The input
    context is not modified, and running the extractor again over the same
    messages yields the same context.

    Args:
        messages: Chat messages, oldest first.
        existing_context: Context remembered from earlier invocations.
        window: Number of most recent messages to scan.

    Returns:
        A new PersonalContext.
    """
    existing = existing_context or PersonalContext()
    text = recent_user_text(messages, window)

    if not text:
        return PersonalContext.from_dict(existing.to_dict())

    name = existing.name
    if not name:
        candidate = first_match(text, NAME_RULES, NAME_STOPWORDS)
        name = candidate.capitalize() if candidate else None

    job = existing.job or first_match(text, JOB_RULES, JOB_STOPWORDS)

    context = PersonalContext(
        name=name,
        job=job,
        relationships=_union(
            existing.relationships,
            (k for k, p in _RELATIONSHIP_PATTERNS if p.search(text)),
        ),
        interests=_union(existing.interests, all_matches(text, INTEREST_RULES, INTEREST_STOPWORDS)),
        previous_topics=_union(
            existing.previous_topics,
            (label for label, p in _TOPIC_PATTERNS if p.search(text)),
        ),
        challenges=_union(
            existing.challenges,
            (label for label, p in _CHALLENGE_PATTERNS if p.search(text)),
        ),
        goals=_union(existing.goals, all_matches(text, GOAL_RULES, GOAL_STOPWORDS)),
    )

    if context.name != existing.name or context.job != existing.job:
        logger.debug(
            "personal_info_extracted",
            name_found=context.name is not None,
            job_found=context.job is not None,
        )
    return context


def classify_response_type(messages: Iterable[Any] | None) -> ResponseTypeSignal:
    """Classify the last message as a minimal or normal reply.

    A reply is minimal when it is a filler token or at most three characters
    long. Trailing punctuation is ignored when matching fillers.

    Args:
        messages: Chat messages, oldest first.

    Returns:
        ResponseTypeSignal; not minimal when there are no messages.
    """
    history = _messages(messages)
    if not history:
        return ResponseTypeSignal()

    text = normalize_text(history[-1].content)
    token = text.rstrip(".!?,;: ")

    is_minimal = token in FILLER_RESPONSES or len(text) <= MINIMAL_RESPONSE_MAX_LENGTH

    category = ResponseCategory.NORMAL
    if is_minimal:
        for candidate, keywords in RESPONSE_CATEGORIES:
            if token in keywords:
                category = candidate
                break

    return ResponseTypeSignal(is_minimal=is_minimal, category=category, original_text=text)


def assess_trauma_indicators(
    emotions: EmotionVector,
    messages: Iterable[Any] | None = None,
    window: int = DEFAULT_TRAUMA_MESSAGE_WINDOW,
) -> TraumaIndicators:
    """Raise trauma indicators from emotions and recent messages.

    High fear together with high sadness raises dissociation. Each keyword
    found in the last ``window`` user messages raises its indicators.

    Args:
        emotions: Clamped intensities.
        messages: Chat messages, oldest first.
        window: Number of most recent messages to scan.

    Returns:
        TraumaIndicators.
    """
    raised: set[TraumaIndicator] = set()

    emotion_rule = (
        emotions.get(EmotionDimension.FEAR) >= DISSOCIATION_FEAR_THRESHOLD
        and emotions.get(EmotionDimension.SADNESS) >= DISSOCIATION_SADNESS_THRESHOLD
    )
    if emotion_rule:
        raised.add(TraumaIndicator.DISSOCIATION)

    text = recent_user_text(messages, window)
    matched: list[str] = []
    if text:
        for keyword, pattern, indicators in _TRAUMA_PATTERNS:
            if pattern.search(text):
                matched.append(keyword)
                raised.update(indicators)

    result = TraumaIndicators(
        dissociation=TraumaIndicator.DISSOCIATION in raised,
        hypervigilance=TraumaIndicator.HYPERVIGILANCE in raised,
        avoidance=TraumaIndicator.AVOIDANCE in raised,
        intrusion=TraumaIndicator.INTRUSION in raised,
        matched_keywords=matched,
        emotion_rule_triggered=emotion_rule,
    )

    if result.any:
        logger.info(
            "trauma_indicators_raised",
            indicators=[i.value for i in result.active],
            keywords=len(matched),
        )
    return result
