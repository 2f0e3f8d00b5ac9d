"""
Ask Human Handler.
Creates a HIT for a question, waits a bounded time for a worker's answer and
auto-approves it. Returns a resumable ticket when the wait budget runs out.
"""
import time
from typing import Optional, Union
from shared.approval import approve_if_submitted
from shared.answers import parse_answer
from shared.config import config
from shared.errors import HumanLoopError
from shared.external_question import build_hit_params, validate_request
from shared.logging import logger
from shared.models import Answered, Failed, InvalidAnswer, Pending
from shared.mturk import create_hit
from shared.polling import wait_for_assignment
from shared.utils import format_tool_result, get_arg

AskOutcome = Union[Answered, InvalidAnswer, Pending, Failed]


def outcome_for_assignment(hit_id: str, assignment: dict, client=None) -> AskOutcome:
    """
    Normalize an observed assignment's answer, then approve it if submitted.

    Approval strictly follows observing the assignment and never changes the outcome.
    """
    outcome = normalize_assignment(hit_id, assignment)
    approve_if_submitted(assignment, client=client)
    return outcome


def normalize_assignment(hit_id: str, assignment: dict) -> AskOutcome:
    """Turn an assignment's answer payload into Answered or InvalidAnswer."""
    assignment_id = assignment.get('AssignmentId', '')
    parsed = parse_answer(assignment.get('Answer'))

    if parsed.ok:
        return Answered(hit_id=hit_id, assignment_id=assignment_id, text=parsed.text)

    logger.warning(f"Unreadable answer on assignment {assignment_id}: {parsed.diagnostic}")
    return InvalidAnswer(hit_id=hit_id, assignment_id=assignment_id, diagnostic=parsed.diagnostic)


def ask_human(
    question: str,
    reward: Optional[str] = None,
    title: Optional[str] = None,
    description: Optional[str] = None,
    hit_validity_seconds: Optional[int] = None,
    max_wait_seconds: Optional[float] = None,
    client=None,
    clock=time.monotonic,
    sleep=time.sleep
) -> AskOutcome:
    """
    Ask a human worker a question through MTurk.

    Flow:
    1. Validate the request and build the CreateHIT parameters
    2. Create the HIT (MaxAssignments=1, 24h auto-approval safety net)
    3. Poll every POLL_INTERVAL_SECONDS until an assignment appears or max wait elapses
    4. Normalize the answer and approve the assignment

    Returns:
        Answered, InvalidAnswer, Pending (HIT id is the ticket) or Failed
    """
    reward = reward if reward is not None else config.DEFAULT_REWARD
    if hit_validity_seconds is None:
        hit_validity_seconds = config.DEFAULT_HIT_VALIDITY_SECONDS
    if max_wait_seconds is None:
        max_wait_seconds = config.DEFAULT_MAX_WAIT_SECONDS

    try:
        validate_request(question, reward, hit_validity_seconds, max_wait_seconds)
    except ValueError as e:
        return Failed(reason=str(e))

    params = build_hit_params(
        question,
        reward,
        title=title,
        description=description,
        hit_validity_seconds=hit_validity_seconds
    )

    try:
        hit_id = create_hit(params, client=client)
    except HumanLoopError as e:
        return Failed(reason=str(e))

    try:
        session = wait_for_assignment(
            hit_id,
            max_wait_seconds,
            client=client,
            clock=clock,
            sleep=sleep
        )
        if session.assignment is None:
            return Pending(hit_id=hit_id)
        return outcome_for_assignment(hit_id, session.assignment, client=client)
    except HumanLoopError as e:
        return Failed(reason=f"{e} (HIT ID: {hit_id})", hit_id=hit_id)


def handler(event, context=None):
    """
    Tool handler for askHuman.
    Arguments: { "question", "reward"?, "title"?, "description"?,
                 "hitValiditySeconds"?, "maxWaitSeconds"? }
    """
    try:
        outcome = ask_human(
            question=get_arg(event, 'question'),
            reward=get_arg(event, 'reward'),
            title=get_arg(event, 'title'),
            description=get_arg(event, 'description'),
            hit_validity_seconds=get_arg(event, 'hitValiditySeconds'),
            max_wait_seconds=get_arg(event, 'maxWaitSeconds')
        )
    except Exception as e:
        logger.exception("Error in askHuman tool")
        outcome = Failed(reason=str(e))

    if isinstance(outcome, Failed):
        logger.error(f"askHuman failed: {outcome.reason}")
    return format_tool_result(outcome.to_text())
