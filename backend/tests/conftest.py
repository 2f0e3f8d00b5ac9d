"""
Shared fixtures: a mocked MTurk client and a controllable clock.
"""
import pytest
from unittest.mock import MagicMock


class FakeClock:
    """Monotonic clock that only moves when sleep() is called."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mturk():
    """MagicMock standing in for a boto3 'mturk' client."""
    client = MagicMock()
    client.create_hit.return_value = {'HIT': {'HITId': 'HIT123'}}
    client.list_assignments_for_hit.return_value = {'Assignments': []}
    client.approve_assignment.return_value = {}
    return client


def make_assignment(assignment_id='ASSIGN1', status='Submitted', answer=None, hit_id='HIT123'):
    """Build an assignment record shaped like ListAssignmentsForHIT output."""
    assignment = {
        'AssignmentId': assignment_id,
        'WorkerId': 'WORKER1',
        'HITId': hit_id,
        'AssignmentStatus': status,
        'SubmitTime': '2024-05-01T12:00:00Z',
    }
    if answer is not None:
        assignment['Answer'] = answer
    return assignment


def free_text_answer(text, namespaced=True):
    """Build a QuestionFormAnswers document with one FreeText answer."""
    xmlns = (
        ' xmlns="http://mechanicalturk.amazonaws.com/'
        'AWSMechanicalTurkDataSchemas/2005-10-01/QuestionFormAnswers.xsd"'
        if namespaced else ''
    )
    return (
        '<?xml version="1.0" encoding="ASCII"?>'
        f'<QuestionFormAnswers{xmlns}>'
        '<Answer><QuestionIdentifier>answer</QuestionIdentifier>'
        f'<FreeText>{text}</FreeText></Answer>'
        '</QuestionFormAnswers>'
    )
