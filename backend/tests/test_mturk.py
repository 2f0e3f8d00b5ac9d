"""
Tests for the MTurk gateway against a stubbed boto3 client.
"""
import boto3
import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch
from botocore.exceptions import ProfileNotFound
from botocore.stub import Stubber

from shared import mturk
from shared.errors import (
    ApprovalError,
    MarketplaceError,
    NotFoundError,
    TaskCreationError,
    TransientPollError,
)


@pytest.fixture
def stubbed():
    client = boto3.client(
        'mturk',
        region_name='us-east-1',
        aws_access_key_id='testing',
        aws_secret_access_key='testing'
    )
    with Stubber(client) as stubber:
        yield client, stubber
        stubber.assert_no_pending_responses()


HIT_PARAMS = {
    'Title': 'Answer a question from an AI assistant',
    'Description': 'Please provide your human perspective on this question',
    'Question': '<ExternalQuestion/>',
    'Reward': '0.05',
    'MaxAssignments': 1,
    'AssignmentDurationInSeconds': 3600,
    'LifetimeInSeconds': 3600,
    'AutoApprovalDelayInSeconds': 86400,
}


class TestCreateHIT:

    def test_returns_hit_id(self, stubbed):
        client, stubber = stubbed
        stubber.add_response('create_hit', {'HIT': {'HITId': 'HIT123'}}, HIT_PARAMS)

        assert mturk.create_hit(HIT_PARAMS, client=client) == 'HIT123'

    def test_missing_hit_id(self, stubbed):
        client, stubber = stubbed
        stubber.add_response('create_hit', {}, HIT_PARAMS)

        with pytest.raises(TaskCreationError):
            mturk.create_hit(HIT_PARAMS, client=client)

    def test_service_error(self, stubbed):
        client, stubber = stubbed
        stubber.add_client_error(
            'create_hit',
            service_error_code='RequestError',
            service_message='This Requester has insufficient funds'
        )

        with pytest.raises(TaskCreationError) as exc_info:
            mturk.create_hit(HIT_PARAMS, client=client)

        assert 'insufficient funds' in str(exc_info.value)


class TestGetHIT:

    def test_found(self, stubbed):
        client, stubber = stubbed
        created = datetime(2024, 5, 1, tzinfo=timezone.utc)
        stubber.add_response(
            'get_hit',
            {'HIT': {'HITId': 'HIT123', 'Title': 'T', 'HITStatus': 'Assignable', 'CreationTime': created}},
            {'HITId': 'HIT123'}
        )

        hit = mturk.get_hit('HIT123', client=client)

        assert hit['HITStatus'] == 'Assignable'

    def test_does_not_exist(self, stubbed):
        client, stubber = stubbed
        stubber.add_client_error(
            'get_hit',
            service_error_code='RequestError',
            service_message='Hit NOPE does not exist. (1714560000000)'
        )

        with pytest.raises(NotFoundError) as exc_info:
            mturk.get_hit('NOPE', client=client)

        assert str(exc_info.value) == 'HIT with ID NOPE not found'

    def test_other_error(self, stubbed):
        client, stubber = stubbed
        stubber.add_client_error('get_hit', service_error_code='ServiceFault', service_message='Oops')

        with pytest.raises(MarketplaceError):
            mturk.get_hit('HIT123', client=client)


class TestAssignments:

    def test_list(self, stubbed):
        client, stubber = stubbed
        stubber.add_response(
            'list_assignments_for_hit',
            {'Assignments': [{'AssignmentId': 'A1', 'AssignmentStatus': 'Submitted', 'Answer': '<x/>'}]},
            {'HITId': 'HIT123', 'AssignmentStatuses': ['Submitted', 'Approved'], 'MaxResults': 100}
        )

        assignments = mturk.list_assignments('HIT123', ['Submitted', 'Approved'], client=client)

        assert [a['AssignmentId'] for a in assignments] == ['A1']

    def test_list_empty(self, stubbed):
        client, stubber = stubbed
        stubber.add_response('list_assignments_for_hit', {'NumResults': 0})

        assert mturk.list_assignments('HIT123', ['Submitted'], client=client) == []

    def test_list_failure_is_transient(self, stubbed):
        client, stubber = stubbed
        stubber.add_client_error('list_assignments_for_hit', service_error_code='ServiceFault')

        with pytest.raises(TransientPollError):
            mturk.list_assignments('HIT123', ['Submitted'], client=client)

    def test_approve(self, stubbed):
        client, stubber = stubbed
        stubber.add_response(
            'approve_assignment',
            {},
            {'AssignmentId': 'A1', 'RequesterFeedback': 'Thank you for your response!'}
        )

        mturk.approve_assignment('A1', 'Thank you for your response!', client=client)

    def test_approve_failure(self, stubbed):
        client, stubber = stubbed
        stubber.add_client_error(
            'approve_assignment',
            service_error_code='RequestError',
            service_message='This operation can be called with a status of: Submitted'
        )

        with pytest.raises(ApprovalError):
            mturk.approve_assignment('A1', 'thanks', client=client)


class TestAccount:

    def test_balance(self, stubbed):
        client, stubber = stubbed
        stubber.add_response('get_account_balance', {'AvailableBalance': '10000.00'})

        assert mturk.get_account_balance(client=client) == '10000.00'

    def test_list_hits(self, stubbed):
        client, stubber = stubbed
        stubber.add_response(
            'list_hits',
            {'HITs': [{'HITId': 'H1'}, {'HITId': 'H2'}]},
            {'MaxResults': 100}
        )

        assert len(mturk.list_hits(client=client)) == 2

    def test_list_hits_failure(self, stubbed):
        client, stubber = stubbed
        stubber.add_client_error('list_hits', service_error_code='ServiceFault')

        with pytest.raises(MarketplaceError):
            mturk.list_hits(client=client)


class TestClientFactory:
    """Tests for get_mturk_client function."""

    def setup_method(self):
        mturk.reset_mturk_client()

    def teardown_method(self):
        mturk.reset_mturk_client()

    def test_sandbox_endpoint(self):
        session = MagicMock()
        with patch('shared.mturk.boto3.Session', return_value=session), \
                patch.object(mturk.config, 'USE_SANDBOX', True):
            client = mturk.get_mturk_client()

        session.client.assert_called_once_with(
            'mturk',
            region_name=mturk.config.AWS_REGION,
            endpoint_url='https://mturk-requester-sandbox.us-east-1.amazonaws.com'
        )
        assert client is session.client.return_value

    def test_production_has_no_endpoint_override(self):
        session = MagicMock()
        with patch('shared.mturk.boto3.Session', return_value=session), \
                patch.object(mturk.config, 'USE_SANDBOX', False):
            mturk.get_mturk_client()

        session.client.assert_called_once_with('mturk', region_name=mturk.config.AWS_REGION)

    def test_client_is_cached(self):
        with patch('shared.mturk.boto3.Session') as mock_session:
            first = mturk.get_mturk_client()
            second = mturk.get_mturk_client()

        assert first is second
        assert mock_session.call_count == 1

    def test_missing_profile_falls_back(self):
        fallback = MagicMock()
        with patch(
            'shared.mturk.boto3.Session',
            side_effect=[ProfileNotFound(profile='mcp-human'), fallback]
        ) as mock_session:
            client = mturk.get_mturk_client()

        assert mock_session.call_args_list[1].kwargs == {}
        assert client is fallback.client.return_value
