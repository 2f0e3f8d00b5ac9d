"""
Check HIT Status Handler.
Re-enters a previously created HIT: approves submitted assignments and reports
every assignment with its normalized answer. This is how a caller holding a
Pending ticket picks up the answer later without re-submitting the question.
"""
from shared.approval import approve_submitted
from shared.answers import parse_answer
from shared.config import config
from shared.errors import HumanLoopError
from shared.logging import logger
from shared.models import (
    ALL_STATUSES,
    AssignmentStatus,
    AssignmentSummary,
    Failed,
    Pending,
    StatusSnapshot,
)
from shared.mturk import get_hit, list_assignments
from shared.utils import format_tool_result, get_arg, to_json
from handlers.hits.ask_human import normalize_assignment

NO_ANSWER = 'No answer content'
INVALID_ANSWER = 'Answer format was invalid'


def summarize_answer(payload) -> str:
    """Best-effort answer text for a status report."""
    if not payload:
        return NO_ANSWER
    parsed = parse_answer(payload)
    return parsed.text if parsed.ok else INVALID_ANSWER


def check_status(hit_id: str, client=None) -> StatusSnapshot:
    """
    Build a status snapshot for a HIT.

    Args:
        hit_id: Ticket returned by an earlier askHuman call
        client: Optional MTurk client

    Returns:
        StatusSnapshot of the HIT and all of its assignments

    Raises:
        NotFoundError: if the HIT does not exist
        MarketplaceError: if the HIT lookup fails
        TransientPollError: if the assignment listing fails
    """
    hit = get_hit(hit_id, client=client)
    assignments = list_assignments(hit_id, ALL_STATUSES, client=client)

    # Approve any submitted assignments
    approve_submitted(assignments, client=client)

    return StatusSnapshot(
        hit_id=hit.get('HITId', hit_id),
        title=hit.get('Title'),
        status=hit.get('HITStatus'),
        creation_time=hit.get('CreationTime'),
        expiration=hit.get('Expiration'),
        sandbox=config.USE_SANDBOX,
        assignments=[
            AssignmentSummary(
                id=a.get('AssignmentId'),
                status=a.get('AssignmentStatus'),
                submit_time=a.get('SubmitTime'),
                answer=summarize_answer(a.get('Answer')),
            )
            for a in assignments
        ],
    )


def resume(hit_id: str, client=None):
    """
    Resolve a Pending ticket into a typed outcome.

    Library entry point for callers that want a typed result instead of the
    checkHITStatus JSON report. Approval follows the same rule as check_status:
    every submitted assignment gets one attempt.

    Returns:
        Answered or InvalidAnswer once a worker has responded, Pending while the
        HIT is still open, Failed if the HIT cannot be checked
    """
    try:
        get_hit(hit_id, client=client)
        assignments = list_assignments(hit_id, ALL_STATUSES, client=client)
    except HumanLoopError as e:
        return Failed(reason=str(e), hit_id=hit_id)

    approve_submitted(assignments, client=client)

    answered = [a for a in assignments if a.get('AssignmentStatus') != AssignmentStatus.REJECTED]
    if not answered:
        return Pending(hit_id=hit_id)
    return normalize_assignment(hit_id, answered[0])


def handler(event, context=None):
    """
    Tool handler for checkHITStatus.
    Arguments: { "hitId" }
    """
    hit_id = None
    try:
        hit_id = get_arg(event, 'hitId')
        if not hit_id or not isinstance(hit_id, str):
            return format_tool_result(Failed(reason='Missing hitId').to_text())

        snapshot = check_status(hit_id)
    except HumanLoopError as e:
        logger.error(f"Error in checkHITStatus tool: {e}")
        return format_tool_result(Failed(reason=str(e), hit_id=hit_id).to_text())
    except Exception as e:
        logger.exception("Error in checkHITStatus tool")
        return format_tool_result(Failed(reason=str(e), hit_id=hit_id).to_text())

    return format_tool_result(to_json(snapshot.to_dict()))
