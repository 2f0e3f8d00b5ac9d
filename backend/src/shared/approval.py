"""
Auto-approval of submitted assignments.

Runs alongside the 24h AutoApprovalDelayInSeconds safety net set on every HIT.
Approval is attempted at least once per observed submission; the marketplace
is assumed to treat a repeated approval as a no-op or a harmless error.
"""
from typing import Any, Dict, List
from .errors import ApprovalError
from .logging import logger
from .models import APPROVAL_FEEDBACK, AssignmentStatus
from .mturk import approve_assignment


def approve_if_submitted(assignment: Dict[str, Any], client=None) -> bool:
    """
    Approve an assignment if it is still in Submitted status.

    A failed approval is logged and not retried; the answer stays usable.

    Returns:
        True if the approval call succeeded
    """
    assignment_id = assignment.get('AssignmentId')
    if not assignment_id or assignment.get('AssignmentStatus') != AssignmentStatus.SUBMITTED:
        return False

    try:
        approve_assignment(assignment_id, APPROVAL_FEEDBACK, client=client)
    except ApprovalError as e:
        logger.error(f"Error auto-approving assignment {assignment_id}: {e}")
        return False

    logger.info(f"Auto-approved assignment {assignment_id}")
    return True


def approve_submitted(assignments: List[Dict[str, Any]], client=None) -> List[str]:
    """Approve every submitted assignment in the list; returns the approved ids."""
    return [
        a['AssignmentId']
        for a in assignments
        if approve_if_submitted(a, client=client)
    ]
