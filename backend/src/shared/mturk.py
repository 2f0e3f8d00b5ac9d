"""
MTurk utility functions for HIT and assignment operations.
Wraps the boto3 'mturk' client and maps its failures onto shared.errors.
"""
import boto3
from typing import List, Dict, Any, Optional
from botocore.exceptions import BotoCoreError, ClientError, ProfileNotFound
from .config import config
from .errors import (
    ApprovalError,
    MarketplaceError,
    NotFoundError,
    TaskCreationError,
    TransientPollError,
)
from .logging import logger, log_payload

# Initialize the MTurk client lazily
_mturk_client = None


def get_mturk_client():
    """Get or create the MTurk client."""
    global _mturk_client
    if _mturk_client is None:
        params = {'region_name': config.AWS_REGION}
        if config.MTURK_ENDPOINT:
            params['endpoint_url'] = config.MTURK_ENDPOINT

        try:
            try:
                session = boto3.Session(profile_name=config.AWS_PROFILE)
            except ProfileNotFound:
                logger.warning(
                    f"AWS profile '{config.AWS_PROFILE}' not found, using default credential chain"
                )
                session = boto3.Session()
            _mturk_client = session.client('mturk', **params)
        except BotoCoreError as e:
            logger.error(f"Error creating MTurk client: {e}")
            raise MarketplaceError(f"Could not create MTurk client: {e}") from e

        logger.info(
            f"MTurk client ready (sandbox={config.USE_SANDBOX}, region={config.AWS_REGION})"
        )
    return _mturk_client


def reset_mturk_client() -> None:
    """Drop the cached client so the next call builds a fresh one."""
    global _mturk_client
    _mturk_client = None


def _error_message(e: Exception) -> str:
    if isinstance(e, ClientError):
        error = e.response.get('Error', {})
        return f"{error.get('Code', 'Unknown')}: {error.get('Message', str(e))}"
    return str(e)


def create_hit(params: Dict[str, Any], client=None) -> str:
    """
    Create a HIT.

    Args:
        params: CreateHIT request parameters
        client: Optional MTurk client, defaults to the shared one

    Returns:
        The marketplace-assigned HIT id

    Raises:
        TaskCreationError: if the call fails or returns no HIT id
    """
    client = client or get_mturk_client()
    try:
        response = client.create_hit(**params)
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Error creating HIT: {e}")
        raise TaskCreationError(f"Failed to create HIT: {_error_message(e)}") from e

    log_payload('CreateHIT response', response)
    hit_id = (response.get('HIT') or {}).get('HITId')
    if not hit_id:
        raise TaskCreationError('Failed to create HIT')

    logger.info(f"Created HIT {hit_id}")
    return hit_id


def get_hit(hit_id: str, client=None) -> Dict[str, Any]:
    """
    Get a HIT's metadata.

    Raises:
        NotFoundError: if the marketplace does not know the HIT
        MarketplaceError: for any other failure
    """
    client = client or get_mturk_client()
    try:
        response = client.get_hit(HITId=hit_id)
    except ClientError as e:
        message = e.response.get('Error', {}).get('Message', '')
        if 'does not exist' in message or 'not found' in message.lower():
            raise NotFoundError(f"HIT with ID {hit_id} not found") from e
        logger.error(f"Error getting HIT {hit_id}: {e}")
        raise MarketplaceError(f"Failed to get HIT {hit_id}: {_error_message(e)}") from e
    except BotoCoreError as e:
        logger.error(f"Error getting HIT {hit_id}: {e}")
        raise MarketplaceError(f"Failed to get HIT {hit_id}: {e}") from e

    log_payload('GetHIT response', response)
    hit = response.get('HIT')
    if not hit:
        raise NotFoundError(f"HIT with ID {hit_id} not found")
    return hit


def list_assignments(
    hit_id: str,
    statuses: List[str],
    client=None,
    max_results: int = 100
) -> List[Dict[str, Any]]:
    """
    List assignments for a HIT filtered by status.

    Raises:
        TransientPollError: if the call fails
    """
    client = client or get_mturk_client()
    logger.debug(f"Fetching assignments for HIT ID: {hit_id}")
    try:
        response = client.list_assignments_for_hit(
            HITId=hit_id,
            AssignmentStatuses=statuses,
            MaxResults=max_results
        )
    except (ClientError, BotoCoreError) as e:
        raise TransientPollError(
            f"Failed to list assignments for HIT {hit_id}: {_error_message(e)}"
        ) from e

    log_payload('ListAssignmentsForHIT response', response)
    return response.get('Assignments') or []


def approve_assignment(assignment_id: str, feedback: str, client=None) -> None:
    """
    Approve a submitted assignment.

    Raises:
        ApprovalError: if the call fails
    """
    client = client or get_mturk_client()
    try:
        client.approve_assignment(
            AssignmentId=assignment_id,
            RequesterFeedback=feedback
        )
    except (ClientError, BotoCoreError) as e:
        raise ApprovalError(
            f"Failed to approve assignment {assignment_id}: {_error_message(e)}"
        ) from e


def get_account_balance(client=None) -> Optional[str]:
    """Get the available account balance as a decimal string."""
    client = client or get_mturk_client()
    try:
        response = client.get_account_balance()
    except (ClientError, BotoCoreError) as e:
        raise MarketplaceError(f"Failed to get account balance: {_error_message(e)}") from e
    return response.get('AvailableBalance')


def list_hits(client=None, max_results: int = 100) -> List[Dict[str, Any]]:
    """List the most recent HITs, capped at max_results."""
    client = client or get_mturk_client()
    try:
        response = client.list_hits(MaxResults=max_results)
    except (ClientError, BotoCoreError) as e:
        raise MarketplaceError(f"Failed to list HITs: {_error_message(e)}") from e
    return response.get('HITs') or []
