"""
HIT request construction.
Builds the externally hosted form URL, the ExternalQuestion document and
the CreateHIT parameters, and validates the caller's request.
"""
import math
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit
from xml.sax.saxutils import escape
from .config import config
from .utils import format_reward, parse_reward

EXTERNAL_QUESTION_SCHEMA = (
    'http://mechanicalturk.amazonaws.com/'
    'AWSMechanicalTurkDataSchemas/2006-07-14/ExternalQuestion.xsd'
)
DEFAULT_TITLE = 'Answer a question from an AI assistant'
DEFAULT_DESCRIPTION = 'Please provide your human perspective on this question'
FRAME_HEIGHT = 600

# MTurk limits for AssignmentDurationInSeconds / LifetimeInSeconds
MIN_VALIDITY_SECONDS = 30
MAX_VALIDITY_SECONDS = 31536000


def build_form_url(
    question: str,
    form_url: Optional[str] = None,
    callback_url: Optional[str] = None,
    turk_submit_to: Optional[str] = None
) -> str:
    """
    Build the form URL a worker sees, with the question in the query string.

    assignmentId and hitId are appended by MTurk itself.
    """
    base = urlsplit(form_url or config.FORM_URL)
    query = parse_qsl(base.query, keep_blank_values=True)
    query.append(('question', question))

    callback_url = callback_url if callback_url is not None else config.CALLBACK_URL
    if callback_url:
        query.append(('callbackUrl', callback_url))

    query.append(('turkSubmitTo', turk_submit_to or config.TURK_SUBMIT_TO))
    return urlunsplit(base._replace(query=urlencode(query)))


def render_external_question(url: str, frame_height: int = FRAME_HEIGHT) -> str:
    """Render the ExternalQuestion XML referencing the form URL."""
    return (
        f'<ExternalQuestion xmlns="{EXTERNAL_QUESTION_SCHEMA}">'
        f'<ExternalURL>{escape(url)}</ExternalURL>'
        f'<FrameHeight>{frame_height}</FrameHeight>'
        '</ExternalQuestion>'
    )


def validate_request(
    question: Any,
    reward: Any,
    hit_validity_seconds: Any,
    max_wait_seconds: Any
) -> None:
    """
    Validate an ask request.

    Raises:
        ValueError: describing the first invalid field
    """
    if not isinstance(question, str) or not question.strip():
        raise ValueError('Question must be a non-empty string')

    if parse_reward(reward) is None:
        raise ValueError(f'Invalid reward amount: {reward!r} (expected a positive USD amount like "0.05")')

    if isinstance(hit_validity_seconds, bool) or not isinstance(hit_validity_seconds, int):
        raise ValueError('hitValiditySeconds must be an integer')
    if not MIN_VALIDITY_SECONDS <= hit_validity_seconds <= MAX_VALIDITY_SECONDS:
        raise ValueError(
            f'hitValiditySeconds must be between {MIN_VALIDITY_SECONDS} and {MAX_VALIDITY_SECONDS}'
        )

    if isinstance(max_wait_seconds, bool) or not isinstance(max_wait_seconds, (int, float)):
        raise ValueError('maxWaitSeconds must be a number')
    if not math.isfinite(max_wait_seconds):
        raise ValueError('maxWaitSeconds must be a finite number')


def build_hit_params(
    question: str,
    reward: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
    hit_validity_seconds: int = 3600,
    form_url: Optional[str] = None,
    callback_url: Optional[str] = None
) -> Dict[str, Any]:
    """
    Build the CreateHIT request.

    Args:
        question: Question shown to the worker
        reward: Reward in USD as a decimal string
        title: HIT title, defaults to DEFAULT_TITLE
        description: HIT description, defaults to DEFAULT_DESCRIPTION
        hit_validity_seconds: Used for both assignment duration and lifetime
        form_url: Form base URL, defaults to config.FORM_URL
        callback_url: Optional callback, defaults to config.CALLBACK_URL

    Returns:
        Keyword arguments for mturk.create_hit
    """
    url = build_form_url(question, form_url=form_url, callback_url=callback_url)
    return {
        'Title': title or DEFAULT_TITLE,
        'Description': description or DEFAULT_DESCRIPTION,
        'Question': render_external_question(url),
        'Reward': format_reward(reward),
        'MaxAssignments': 1,
        'AssignmentDurationInSeconds': hit_validity_seconds,
        'LifetimeInSeconds': hit_validity_seconds,
        'AutoApprovalDelayInSeconds': config.AUTO_APPROVAL_DELAY_SECONDS,
    }
