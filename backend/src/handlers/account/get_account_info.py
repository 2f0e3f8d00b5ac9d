"""
Account Info Handler.
Read-only view of the MTurk account: balance, active HITs and effective config.
"""
from shared.config import config
from shared.errors import HumanLoopError
from shared.logging import logger
from shared.mturk import get_account_balance, list_hits
from shared.utils import format_resource_result, get_arg, to_json

RESOURCE_SCHEME = 'mturk-account://'
MAX_LISTED_HITS = 100
SANDBOX_NOTE = '\n(Note: Using MTurk Sandbox environment)'
INFO_TYPES = ('balance', 'hits', 'config')


def get_balance_text(client=None) -> str:
    balance = get_account_balance(client=client)
    content = f"Account Balance: {balance or 'unknown'}"
    if config.USE_SANDBOX:
        content += SANDBOX_NOTE
    return content


def list_active_hits_text(client=None) -> str:
    """Summarize the most recent HITs, capped at MAX_LISTED_HITS."""
    hits = list_hits(client=client, max_results=MAX_LISTED_HITS)
    hits_list = [
        {
            'id': hit.get('HITId'),
            'title': hit.get('Title'),
            'status': hit.get('HITStatus'),
            'created': hit.get('CreationTime'),
            'expires': hit.get('Expiration'),
            'reward': hit.get('Reward'),
        }
        for hit in hits[:MAX_LISTED_HITS]
    ]
    content = f"Active HITs: {len(hits_list)}\n\n{to_json(hits_list)}"
    if config.USE_SANDBOX:
        content += SANDBOX_NOTE
    return content


def get_config_text() -> str:
    snapshot = config.snapshot()
    return (
        "MTurk Configuration:\n"
        f"- Using Sandbox: {str(snapshot['sandbox']).lower()}\n"
        f"- Form Server URL: {snapshot['formUrl']}\n"
        f"- Region: {snapshot['region']}"
    )


def get_account_info(info: str, client=None) -> str:
    """
    Render one kind of account information as text.

    Errors degrade to an 'Error: ...' message instead of propagating.
    """
    try:
        if info == 'balance':
            return get_balance_text(client=client)
        if info == 'hits':
            return list_active_hits_text(client=client)
        if info == 'config':
            return get_config_text()
    except HumanLoopError as e:
        logger.error(f"Error reading account info '{info}': {e}")
        return f"Error: {e}"

    return "Unknown info type. Try 'balance', 'hits', or 'config'."


def handler(event, context=None):
    """
    Resource handler for mturk-account://{info}.
    Event: { "uri": "mturk-account://balance" }
    """
    uri = get_arg(event, 'uri', '')
    info = uri[len(RESOURCE_SCHEME):] if uri.startswith(RESOURCE_SCHEME) else ''
    return format_resource_result(uri, get_account_info(info))
