"""
Common utility functions for tool handlers.
"""
import json
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

CENT = Decimal('0.01')


class MarketplaceEncoder(json.JSONEncoder):
    """JSON encoder that handles the datetime and Decimal values boto3 returns."""

    def default(self, o):
        if isinstance(o, (datetime, date)):
            return o.isoformat()
        if isinstance(o, Decimal):
            # Keep currency precision
            return str(o)
        return super().default(o)


def to_json(body: Any) -> str:
    """Serialize a tool payload as indented JSON."""
    return json.dumps(body, indent=2, cls=MarketplaceEncoder)


def format_tool_result(text: str) -> Dict[str, Any]:
    """
    Format a standard tool result with a single text content block.

    Args:
        text: Body of the result (answers and errors alike)

    Returns:
        Tool result dict
    """
    return {
        'content': [
            {
                'type': 'text',
                'text': text,
            }
        ]
    }


def format_resource_result(uri: str, text: str) -> Dict[str, Any]:
    """Format a resource read result."""
    return {
        'contents': [
            {
                'uri': uri,
                'text': text,
            }
        ]
    }


def parse_reward(reward: Any) -> Optional[Decimal]:
    """
    Parse a reward amount in USD.

    Args:
        reward: Decimal string such as '0.05'

    Returns:
        Decimal amount quantized to cents, or None if it is not a usable
        currency amount
    """
    try:
        amount = Decimal(str(reward).strip())
        if not amount.is_finite() or amount <= 0:
            return None
        cents = amount.quantize(CENT)
    except (InvalidOperation, ValueError):
        return None
    # MTurk rewards are whole cents
    if cents != amount:
        return None
    return cents


def format_reward(reward: Any) -> str:
    """Format a reward for the CreateHIT request, e.g. '0.50'."""
    amount = parse_reward(reward)
    if amount is None:
        raise ValueError(f'Invalid reward amount: {reward!r}')
    return f'{amount:.2f}'


def get_arg(event: Optional[dict], name: str, default: Any = None) -> Any:
    """Extract a tool argument, treating None as missing."""
    if not isinstance(event, dict):
        return default
    value = event.get(name)
    return default if value is None else value
