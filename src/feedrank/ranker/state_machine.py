"""State machine for one feed ranking request."""

from enum import Enum

import structlog


logger = structlog.get_logger()


class RankerState(str, Enum):
    """State of a ranking request.

    - CANDIDATES_READY: Candidates and user signals are loaded
    - FILTERED: Suppressed candidates have been removed
    - SCORED: Remaining candidates carry raw scores
    - RERANKED: Order has been diversified
    - NORMALIZED: Adjusted scores are assigned; terminal
    """

    CANDIDATES_READY = "CANDIDATES_READY"
    FILTERED = "FILTERED"
    SCORED = "SCORED"
    RERANKED = "RERANKED"
    NORMALIZED = "NORMALIZED"


_VALID_TRANSITIONS: dict[RankerState, set[RankerState]] = {
    RankerState.CANDIDATES_READY: {RankerState.FILTERED},
    RankerState.FILTERED: {RankerState.SCORED},
    RankerState.SCORED: {RankerState.RERANKED},
    RankerState.RERANKED: {RankerState.NORMALIZED},
    RankerState.NORMALIZED: set(),
}


class RankerStateTransitionError(Exception):
    """Raised when an illegal state transition is attempted."""

    def __init__(
        self,
        request_id: str,
        from_state: RankerState,
        to_state: RankerState,
    ) -> None:
        """Initialize the transition error.

        Args:
            request_id: Identifier of the ranking request.
            from_state: Current state.
            to_state: Attempted target state.
        """
        self.request_id = request_id
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Illegal ranker state transition for request '{request_id}': "
            f"{from_state.value} -> {to_state.value}"
        )


class RankerStateMachine:
    """Enforces the stage order of a ranking request."""

    def __init__(
        self,
        request_id: str,
        initial_state: RankerState = RankerState.CANDIDATES_READY,
    ) -> None:
        """Initialize the state machine.

        Args:
            request_id: Identifier of the ranking request.
            initial_state: Starting state.
        """
        self._request_id = request_id
        self._state = initial_state
        self._log = logger.bind(
            component="ranker",
            request_id=request_id,
        )

    @property
    def state(self) -> RankerState:
        """Get the current state."""
        return self._state

    @property
    def is_terminal(self) -> bool:
        """Check if current state is terminal."""
        return self._state == RankerState.NORMALIZED

    def can_transition_to(self, target: RankerState) -> bool:
        """Check if a transition to the target state is valid."""
        return target in _VALID_TRANSITIONS.get(self._state, set())

    def transition_to(self, target: RankerState) -> None:
        """Transition to a new state.

        Args:
            target: The target state.

        Raises:
            RankerStateTransitionError: If the transition is invalid.
        """
        if not self.can_transition_to(target):
            self._log.error(
                "illegal_ranker_state_transition",
                from_state=self._state.value,
                to_state=target.value,
            )
            raise RankerStateTransitionError(
                request_id=self._request_id,
                from_state=self._state,
                to_state=target,
            )

        old_state = self._state
        self._state = target
        self._log.debug(
            "ranker_state_transition",
            from_state=old_state.value,
            to_state=target.value,
        )

    def to_filtered(self) -> None:
        """Transition to FILTERED state."""
        self.transition_to(RankerState.FILTERED)

    def to_scored(self) -> None:
        """Transition to SCORED state."""
        self.transition_to(RankerState.SCORED)

    def to_reranked(self) -> None:
        """Transition to RERANKED state."""
        self.transition_to(RankerState.RERANKED)

    def to_normalized(self) -> None:
        """Transition to NORMALIZED state."""
        self.transition_to(RankerState.NORMALIZED)
