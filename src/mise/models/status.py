"""
Mise - Request Status.

RequestStatus is the single orchestrator-owned value describing where the
current attempt is. Each variant is tagged by `state`.

Allowed moves within one attempt:
    idle -> validating -> {error | connecting} -> {error | streaming} -> {error | completed}
A new attempt may start from any state; cancel/reset always return to idle.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from mise.core.errors import APIError


class Idle(BaseModel):
    state: Literal["idle"] = "idle"


class Validating(BaseModel):
    state: Literal["validating"] = "validating"
    message: str = ""


class Connecting(BaseModel):
    state: Literal["connecting"] = "connecting"
    provider: str


class Streaming(BaseModel):
    state: Literal["streaming"] = "streaming"
    tokens: int  # Running size counter (characters received)
    content: str  # Empty for flavors that only expose counters


class Completed(BaseModel):
    state: Literal["completed"] = "completed"
    duration: float  # Seconds
    content: str


class Error(BaseModel):
    state: Literal["error"] = "error"
    error: APIError


RequestStatus = Annotated[
    Union[Idle, Validating, Connecting, Streaming, Completed, Error],
    Field(discriminator="state"),
]

StateName = Literal["idle", "validating", "connecting", "streaming", "completed", "error"]

# Forward moves permitted inside one attempt
TRANSITIONS: dict[str, set[str]] = {
    "idle": {"validating"},
    "validating": {"connecting", "error"},
    "connecting": {"streaming", "completed", "error"},
    "streaming": {"streaming", "completed", "error"},
    "completed": set(),
    "error": set(),
}


def can_transition(current: str, target: str) -> bool:
    """
    Check a move against the attempt lifecycle.

    Starting an attempt (-> validating) and returning to idle are always allowed.
    """
    if target in ("validating", "idle"):
        return True
    return target in TRANSITIONS.get(current, set())


def is_active(status: BaseModel) -> bool:
    return status.state in ("validating", "connecting", "streaming")
