"""
Configuration module for the human-in-the-loop tool server.
Loads all environment variables once at startup.
"""
import os


SANDBOX_ENDPOINT = 'https://mturk-requester-sandbox.us-east-1.amazonaws.com'
SANDBOX_SUBMIT_URL = 'https://workersandbox.mturk.com/mturk/externalSubmit'
PRODUCTION_SUBMIT_URL = 'https://www.mturk.com/mturk/externalSubmit'


class Config:
    """Centralized configuration from environment variables."""

    # AWS
    AWS_REGION = os.environ.get('AWS_REGION', 'us-east-1')
    AWS_PROFILE = os.environ.get('AWS_PROFILE', 'mcp-human')

    # Sandbox unless explicitly disabled
    USE_SANDBOX = os.environ.get('MTURK_SANDBOX', 'true').lower() != 'false'

    # HIT defaults
    DEFAULT_REWARD = os.environ.get('DEFAULT_REWARD', '0.05')  # USD
    DEFAULT_HIT_VALIDITY_SECONDS = int(os.environ.get('DEFAULT_HIT_VALIDITY_SECONDS', '3600'))
    DEFAULT_MAX_WAIT_SECONDS = int(os.environ.get('DEFAULT_MAX_WAIT_SECONDS', '300'))
    POLL_INTERVAL_SECONDS = float(os.environ.get('POLL_INTERVAL_SECONDS', '5'))
    AUTO_APPROVAL_DELAY_SECONDS = 86400  # 24 hours

    # Externally hosted answer form
    FORM_URL = os.environ.get('FORM_URL', 'https://syskall.com/mcp-human/')
    CALLBACK_URL = os.environ.get('CALLBACK_URL', '')

    # Development logging
    LOGGING_ENABLED = bool(os.environ.get('MCP_HUMAN_LOGGING'))
    LOG_FILE = os.environ.get('MCP_HUMAN_LOG_FILE', '/tmp/mcp-human.log')

    @property
    def MTURK_ENDPOINT(self):
        """Requester endpoint override; None lets boto3 resolve production."""
        return SANDBOX_ENDPOINT if self.USE_SANDBOX else None

    @property
    def TURK_SUBMIT_TO(self):
        return SANDBOX_SUBMIT_URL if self.USE_SANDBOX else PRODUCTION_SUBMIT_URL

    def snapshot(self) -> dict:
        """Effective configuration exposed to callers (no credentials)."""
        return {
            'sandbox': self.USE_SANDBOX,
            'formUrl': self.FORM_URL,
            'region': self.AWS_REGION,
            'profile': self.AWS_PROFILE,
            'defaultReward': self.DEFAULT_REWARD,
            'callbackUrl': self.CALLBACK_URL or None,
        }


config = Config()
