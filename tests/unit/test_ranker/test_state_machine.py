"""Unit tests for the ranking request state machine."""

import pytest

from feedrank.ranker.state_machine import (
    RankerState,
    RankerStateMachine,
    RankerStateTransitionError,
)


class TestRankerStateMachine:
    """Tests for RankerStateMachine."""

    @pytest.mark.unit
    def test_initial_state(self) -> None:
        """New requests start at CANDIDATES_READY."""
        machine = RankerStateMachine("req-1")
        assert machine.state == RankerState.CANDIDATES_READY
        assert not machine.is_terminal

    @pytest.mark.unit
    def test_full_lifecycle(self) -> None:
        """Stages advance in order to the terminal state."""
        machine = RankerStateMachine("req-1")
        machine.to_filtered()
        machine.to_scored()
        machine.to_reranked()
        machine.to_normalized()
        assert machine.state == RankerState.NORMALIZED
        assert machine.is_terminal

    @pytest.mark.unit
    def test_skipping_a_stage_raises(self) -> None:
        """Scoring before filtering is rejected."""
        machine = RankerStateMachine("req-1")
        with pytest.raises(RankerStateTransitionError) as exc_info:
            machine.to_scored()
        assert exc_info.value.from_state == RankerState.CANDIDATES_READY
        assert exc_info.value.to_state == RankerState.SCORED
        assert "req-1" in str(exc_info.value)

    @pytest.mark.unit
    def test_terminal_has_no_transitions(self) -> None:
        """Nothing follows NORMALIZED."""
        machine = RankerStateMachine("req-1", initial_state=RankerState.NORMALIZED)
        for state in RankerState:
            assert not machine.can_transition_to(state)
