"""Unit tests for the confidence classifier and suggestion flow."""

import pytest

from pantry_ai.models.models import (
    Guidance,
    PantryItemSuggestion,
    StorageLocation,
    SuggestionAction,
    SuggestionCandidate,
)
from pantry_ai.pipeline.confidence import (
    SuggestionEvent,
    SuggestionState,
    TRANSITIONS,
    action_for_confidence,
    classify,
    event_for_result,
    transition,
)
from pantry_ai.utils.errors import InvalidTransitionError


def suggestions(count):
    return [
        PantryItemSuggestion(
            name=f"Chocolate {i}", quantity="1 bar", shelf_life="180 days", location=StorageLocation.PANTRY,
            days_until_expiry=180,
        )
        for i in range(count)
    ]


def candidate(confidence, count=0, action=None, guidance=None):
    return SuggestionCandidate(
        confidence=confidence, reported_action=action, suggestions=suggestions(count), guidance=guidance
    )


class TestActionForConfidence:
    @pytest.mark.parametrize(
        "confidence,action",
        [
            (1.0, SuggestionAction.ACCEPT),
            (0.81, SuggestionAction.ACCEPT),
            (0.8, SuggestionAction.CHOOSE),
            (0.4, SuggestionAction.CHOOSE),
            (0.39, SuggestionAction.SPECIFY),
            (0.0, SuggestionAction.SPECIFY),
        ],
    )
    def test_band_boundaries(self, confidence, action):
        assert action_for_confidence(confidence) == action


class TestClassify:
    """Test that the exposed action always follows the confidence band."""

    def test_low_confidence_overrides_reported_accept(self):
        """confidence 0.35 with action "accept" becomes specify."""
        result = classify(candidate(0.35, count=1, action=SuggestionAction.ACCEPT))

        assert result.action == SuggestionAction.SPECIFY
        assert result.suggestions == []
        assert result.guidance is not None
        assert "Chocolate 0" in result.guidance.examples

    def test_accept_trims_to_one(self):
        result = classify(candidate(0.95, count=3))

        assert result.action == SuggestionAction.ACCEPT
        assert [s.name for s in result.suggestions] == ["Chocolate 0"]

    def test_choose_trims_to_four(self):
        result = classify(candidate(0.6, count=6, action=SuggestionAction.CHOOSE))

        assert result.action == SuggestionAction.CHOOSE
        assert len(result.suggestions) == 4

    def test_high_confidence_without_suggestions_demoted(self):
        result = classify(candidate(0.9, count=0))

        assert result.action == SuggestionAction.SPECIFY
        assert result.confidence < 0.4

    def test_choose_with_single_suggestion_demoted(self):
        result = classify(candidate(0.7, count=1))

        assert result.action == SuggestionAction.SPECIFY
        assert result.confidence == 0.39
        assert result.guidance.examples == ["Chocolate 0"]

    def test_specify_keeps_model_guidance(self):
        guidance = Guidance(message="Be specific", examples=["Dark chocolate 70%"], reasoning="Too vague")

        result = classify(candidate(0.1, guidance=guidance))

        assert result.confidence == 0.1
        assert result.guidance == guidance

    def test_specify_gets_default_guidance(self):
        result = classify(candidate(0.2))

        assert result.guidance.message
        assert result.guidance.examples

    @pytest.mark.parametrize("confidence", [0.0, 0.2, 0.39, 0.4, 0.5, 0.8, 0.81, 1.0])
    @pytest.mark.parametrize("count", [0, 1, 2, 5])
    def test_action_and_confidence_always_consistent(self, confidence, count):
        result = classify(candidate(confidence, count=count))

        assert result.action == action_for_confidence(result.confidence)


class TestTransitions:
    """Test the suggestion flow state machine."""

    def test_classified_result_enters_its_tier(self):
        result = classify(candidate(0.6, count=2))

        assert transition(SuggestionState.PENDING, event_for_result(result)) == SuggestionState.CHOOSE

    @pytest.mark.parametrize(
        "state,event,expected",
        [
            (SuggestionState.ACCEPT, SuggestionEvent.CUSTOMIZE, SuggestionState.ACCEPT),
            (SuggestionState.ACCEPT, SuggestionEvent.SELECT, SuggestionState.RESOLVED),
            (SuggestionState.CHOOSE, SuggestionEvent.ESCALATE, SuggestionState.DETECTING),
            (SuggestionState.SPECIFY, SuggestionEvent.MANUAL, SuggestionState.RESOLVED),
            (SuggestionState.SPECIFY, SuggestionEvent.RETRY, SuggestionState.PENDING),
            (SuggestionState.DETECTING, SuggestionEvent.SELECT, SuggestionState.RESOLVED),
        ],
    )
    def test_allowed_transitions(self, state, event, expected):
        assert transition(state, event) == expected

    @pytest.mark.parametrize(
        "state,event",
        [
            (SuggestionState.RESOLVED, SuggestionEvent.RETRY),
            (SuggestionState.ACCEPT, SuggestionEvent.ESCALATE),
            (SuggestionState.PENDING, SuggestionEvent.SELECT),
            (SuggestionState.CHOOSE, SuggestionEvent.MANUAL),
        ],
    )
    def test_invalid_transitions_raise(self, state, event):
        with pytest.raises(InvalidTransitionError) as exc_info:
            transition(state, event)

        assert exc_info.value.details == {"state": state.value, "event": event.value}

    def test_resolved_is_terminal(self):
        assert not [key for key in TRANSITIONS if key[0] == SuggestionState.RESOLVED]
