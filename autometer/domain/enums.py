"""Domain enumerations and state-transition rules."""

import enum


class SessionState(str, enum.Enum):
    IDLE = "IDLE"
    TRACKING = "TRACKING"


# State machine: maps current state -> set of valid next states.
# Samples and ticks mutate a TRACKING session without a transition.
SESSION_TRANSITIONS: dict[SessionState, set[SessionState]] = {
    SessionState.IDLE: {SessionState.TRACKING},
    SessionState.TRACKING: {SessionState.IDLE},
}


class DistanceSource(str, enum.Enum):
    GPS = "GPS"
    MANUAL = "MANUAL"


class PositionAccuracy(str, enum.Enum):
    LOW = "low"
    BALANCED = "balanced"
    HIGH = "high"
