from enum import Enum

from pydantic import BaseModel, Field


class Decision(str, Enum):
    ACCEPT = "Accept"
    REJECT = "Reject"


class TransitionState(str, Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    FAILED = "failed"


class DecisionRequest(BaseModel):
    email: str = Field(..., min_length=1)
    decision: Decision


class TransitionOut(BaseModel):
    email: str
    name: str
    decision: Decision
    state: TransitionState
    message: str
    completed_steps: list[str] = Field(default_factory=list)
    failed_step: str | None = None
    roster_entry_existed: bool = False
    refresh_errors: list[str] = Field(default_factory=list)


class ProcessingOut(BaseModel):
    emails: list[str] = Field(default_factory=list)


class RefreshOut(BaseModel):
    selection_count: int | None = None
    roster_count: int | None = None
    errors: list[str] = Field(default_factory=list)
