"""
Data models and status constants for the human-in-the-loop flow.
Based on the HIT lifecycle: Assignable → Unassignable → Reviewable → Disposed
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class HITStatus:
    """MTurk HIT statuses (owned by the marketplace)."""
    ASSIGNABLE = 'Assignable'
    UNASSIGNABLE = 'Unassignable'  # Fully assigned
    REVIEWABLE = 'Reviewable'
    REVIEWING = 'Reviewing'
    DISPOSED = 'Disposed'


class AssignmentStatus:
    """MTurk assignment statuses."""
    SUBMITTED = 'Submitted'
    APPROVED = 'Approved'
    REJECTED = 'Rejected'


# Statuses polled while waiting for an answer
POLL_STATUSES = [AssignmentStatus.SUBMITTED, AssignmentStatus.APPROVED]

# Statuses reported by a status check
ALL_STATUSES = [
    AssignmentStatus.SUBMITTED,
    AssignmentStatus.APPROVED,
    AssignmentStatus.REJECTED,
]

APPROVAL_FEEDBACK = 'Thank you for your response!'
ERROR_PREFIX = 'Error: '


@dataclass
class PollSession:
    """Ephemeral state of one wait for an assignment."""
    hit_id: str
    start: float
    deadline: float
    interval: float
    attempts: int = 0
    assignment: Optional[Dict[str, Any]] = None

    @property
    def timed_out(self) -> bool:
        return self.assignment is None


# =============================================================================
# Ask outcomes: Answered | InvalidAnswer | Pending | Failed
# =============================================================================

@dataclass(frozen=True)
class Answered:
    """A worker answered and the free text was extracted."""
    hit_id: str
    assignment_id: str
    text: str

    def to_text(self) -> str:
        return f"Human response: {self.text}"


@dataclass(frozen=True)
class InvalidAnswer:
    """An assignment arrived but its answer payload could not be read."""
    hit_id: str
    assignment_id: str
    diagnostic: str = ''

    def to_text(self) -> str:
        return (
            "Assignment received but answer format was invalid. "
            f"Assignment ID: {self.assignment_id}, HIT ID: {self.hit_id}"
        )


@dataclass(frozen=True)
class Pending:
    """No answer within the wait budget; the HIT id is the ticket."""
    hit_id: str

    def to_text(self) -> str:
        return (
            "No response received within the maximum wait time. "
            "Your question is still available for workers on MTurk. "
            f"HIT ID: {self.hit_id} - You can check its status later "
            "with the checkHITStatus tool."
        )


@dataclass(frozen=True)
class Failed:
    """The request could not be completed."""
    reason: str
    hit_id: Optional[str] = None

    def to_text(self) -> str:
        return f"{ERROR_PREFIX}{self.reason}"


# =============================================================================
# Status snapshots
# =============================================================================

@dataclass
class AssignmentSummary:
    id: str
    status: str
    submit_time: Any
    answer: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'status': self.status,
            'submitTime': self.submit_time,
            'answer': self.answer,
        }


@dataclass
class StatusSnapshot:
    """Point-in-time view of a HIT and its assignments."""
    hit_id: str
    title: Optional[str]
    status: Optional[str]
    creation_time: Any
    expiration: Any
    sandbox: bool
    assignments: List[AssignmentSummary] = field(default_factory=list)

    @property
    def assignments_count(self) -> int:
        return len(self.assignments)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'hitId': self.hit_id,
            'title': self.title,
            'status': self.status,
            'creationTime': self.creation_time,
            'expiration': self.expiration,
            'assignmentsCount': self.assignments_count,
            'assignments': [a.to_dict() for a in self.assignments],
            'sandbox': self.sandbox,
        }
