"""Confidence tiers for item suggestions and the suggestion flow state machine.

The model reports both a confidence and an action, and the two often disagree
("confidence 0.35, action accept"). The action exposed to callers is always
recomputed from the confidence band:

    confidence > 0.8          accept   exactly one suggestion
    0.4 <= confidence <= 0.8  choose   two to four suggestions
    confidence < 0.4          specify  no suggestions, guidance instead

When the model did not supply enough suggestions for its band the result is
demoted to specify so the cardinality promise still holds.
"""

from enum import Enum
from typing import Dict, Tuple

from pantry_ai.models.models import ConfidenceResult, Guidance, SuggestionAction, SuggestionCandidate
from pantry_ai.pipeline.normalizer import DEFAULT_GUIDANCE_MESSAGE, DEFAULT_GUIDANCE_REASONING
from pantry_ai.utils.errors import InvalidTransitionError
from pantry_ai.utils.logger import logger

HIGH_CONFIDENCE = 0.8
LOW_CONFIDENCE = 0.4
MAX_CHOICES = 4
# Demoted results are capped just below the specify boundary
DEMOTED_CONFIDENCE_CAP = 0.39

DEFAULT_GUIDANCE_EXAMPLES = ["Whole milk, 1 gallon", "Large eggs, dozen", "Cheddar cheese block, 8 oz"]


def action_for_confidence(confidence: float) -> SuggestionAction:
    if confidence > HIGH_CONFIDENCE:
        return SuggestionAction.ACCEPT
    if confidence >= LOW_CONFIDENCE:
        return SuggestionAction.CHOOSE
    return SuggestionAction.SPECIFY


def _specify(candidate: SuggestionCandidate, confidence: float) -> ConfidenceResult:
    guidance = candidate.guidance
    # Names the model did offer are still useful as examples
    offered = [s.name for s in candidate.suggestions]
    if guidance is None:
        guidance = Guidance(
            message=DEFAULT_GUIDANCE_MESSAGE,
            examples=offered or list(DEFAULT_GUIDANCE_EXAMPLES),
            reasoning=DEFAULT_GUIDANCE_REASONING,
        )
    elif offered:
        examples = guidance.examples + [name for name in offered if name not in guidance.examples]
        guidance = guidance.model_copy(update={"examples": examples})

    return ConfidenceResult(
        confidence=confidence,
        action=SuggestionAction.SPECIFY,
        suggestions=[],
        guidance=guidance,
    )


def classify(candidate: SuggestionCandidate) -> ConfidenceResult:
    """Force a normalized suggestion into the tier its confidence implies.

    Args:
        candidate: Normalized model response (confidence, suggestions, guidance).

    Returns:
        ConfidenceResult: action consistent with confidence, suggestions
        trimmed to the tier's cardinality, guidance always set for specify.
    """
    action = action_for_confidence(candidate.confidence)

    if candidate.reported_action is not None and candidate.reported_action != action:
        logger.debug(
            f"Model reported action '{candidate.reported_action.value}' for confidence "
            f"{candidate.confidence:.2f}, using '{action.value}'"
        )

    count = len(candidate.suggestions)
    if action == SuggestionAction.ACCEPT and count >= 1:
        return ConfidenceResult(
            confidence=candidate.confidence,
            action=action,
            suggestions=candidate.suggestions[:1],
            guidance=candidate.guidance,
        )
    if action == SuggestionAction.CHOOSE and count >= 2:
        return ConfidenceResult(
            confidence=candidate.confidence,
            action=action,
            suggestions=candidate.suggestions[:MAX_CHOICES],
            guidance=candidate.guidance,
        )

    if action != SuggestionAction.SPECIFY:
        logger.warning(
            f"Only {count} suggestion(s) for '{action.value}' at confidence "
            f"{candidate.confidence:.2f}, demoting to 'specify'"
        )
    return _specify(candidate, min(candidate.confidence, DEMOTED_CONFIDENCE_CAP))


# ============================================================================
# Suggestion flow state machine
# ============================================================================


class SuggestionState(str, Enum):
    PENDING = "pending"
    ACCEPT = "accept"
    CHOOSE = "choose"
    SPECIFY = "specify"
    DETECTING = "detecting"
    RESOLVED = "resolved"


class SuggestionEvent(str, Enum):
    """User or pipeline events driving the suggestion flow."""

    CLASSIFIED_ACCEPT = "classified_accept"
    CLASSIFIED_CHOOSE = "classified_choose"
    CLASSIFIED_SPECIFY = "classified_specify"
    CUSTOMIZE = "customize"
    SELECT = "select"
    RETRY = "retry"
    ESCALATE = "escalate"
    MANUAL = "manual"


TRANSITIONS: Dict[Tuple[SuggestionState, SuggestionEvent], SuggestionState] = {
    (SuggestionState.PENDING, SuggestionEvent.CLASSIFIED_ACCEPT): SuggestionState.ACCEPT,
    (SuggestionState.PENDING, SuggestionEvent.CLASSIFIED_CHOOSE): SuggestionState.CHOOSE,
    (SuggestionState.PENDING, SuggestionEvent.CLASSIFIED_SPECIFY): SuggestionState.SPECIFY,
    (SuggestionState.ACCEPT, SuggestionEvent.CUSTOMIZE): SuggestionState.ACCEPT,
    (SuggestionState.ACCEPT, SuggestionEvent.SELECT): SuggestionState.RESOLVED,
    (SuggestionState.CHOOSE, SuggestionEvent.SELECT): SuggestionState.RESOLVED,
    (SuggestionState.CHOOSE, SuggestionEvent.RETRY): SuggestionState.PENDING,
    (SuggestionState.CHOOSE, SuggestionEvent.ESCALATE): SuggestionState.DETECTING,
    (SuggestionState.SPECIFY, SuggestionEvent.RETRY): SuggestionState.PENDING,
    (SuggestionState.SPECIFY, SuggestionEvent.ESCALATE): SuggestionState.DETECTING,
    (SuggestionState.SPECIFY, SuggestionEvent.MANUAL): SuggestionState.RESOLVED,
    (SuggestionState.DETECTING, SuggestionEvent.SELECT): SuggestionState.RESOLVED,
    (SuggestionState.DETECTING, SuggestionEvent.RETRY): SuggestionState.PENDING,
}

CLASSIFIED_EVENTS = {
    SuggestionAction.ACCEPT: SuggestionEvent.CLASSIFIED_ACCEPT,
    SuggestionAction.CHOOSE: SuggestionEvent.CLASSIFIED_CHOOSE,
    SuggestionAction.SPECIFY: SuggestionEvent.CLASSIFIED_SPECIFY,
}


def transition(state: SuggestionState, event: SuggestionEvent) -> SuggestionState:
    """Next state of the suggestion flow.

    Raises:
        InvalidTransitionError: If ``event`` is not allowed in ``state``.
    """
    try:
        return TRANSITIONS[(state, event)]
    except KeyError:
        raise InvalidTransitionError(
            f"Cannot apply '{event.value}' in state '{state.value}'",
            details={"state": state.value, "event": event.value},
        ) from None


def event_for_result(result: ConfidenceResult) -> SuggestionEvent:
    """Event that moves a pending flow into the result's tier."""
    return CLASSIFIED_EVENTS[result.action]
