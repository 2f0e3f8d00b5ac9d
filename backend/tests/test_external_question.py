"""
Tests for HIT request construction and validation.
"""
import pytest
import xml.etree.ElementTree as ET
from urllib.parse import parse_qs, urlsplit

from shared.external_question import (
    EXTERNAL_QUESTION_SCHEMA,
    build_form_url,
    build_hit_params,
    render_external_question,
    validate_request,
)
from shared.utils import format_reward, parse_reward

SANDBOX_SUBMIT = 'https://workersandbox.mturk.com/mturk/externalSubmit'


class TestFormUrl:
    """Tests for build_form_url function."""

    def test_question_is_url_encoded(self):
        url = build_form_url(
            'Is 2 + 2 = 4 & why?',
            form_url='https://forms.example.com/ask/',
            callback_url='',
            turk_submit_to=SANDBOX_SUBMIT
        )

        parts = urlsplit(url)
        params = parse_qs(parts.query)
        assert parts.netloc == 'forms.example.com'
        assert parts.path == '/ask/'
        assert params['question'] == ['Is 2 + 2 = 4 & why?']
        assert params['turkSubmitTo'] == [SANDBOX_SUBMIT]
        assert 'callbackUrl' not in params

    def test_callback_url(self):
        url = build_form_url(
            'Q',
            form_url='https://forms.example.com/',
            callback_url='https://agent.example.com/submit',
            turk_submit_to=SANDBOX_SUBMIT
        )

        assert parse_qs(urlsplit(url).query)['callbackUrl'] == ['https://agent.example.com/submit']

    def test_existing_query_is_kept(self):
        url = build_form_url(
            'Q',
            form_url='https://forms.example.com/?theme=dark',
            callback_url='',
            turk_submit_to=SANDBOX_SUBMIT
        )

        params = parse_qs(urlsplit(url).query)
        assert params['theme'] == ['dark']
        assert params['question'] == ['Q']


class TestExternalQuestion:

    def test_renders_escaped_url(self):
        url = 'https://forms.example.com/?question=a&turkSubmitTo=b'
        document = render_external_question(url)

        root = ET.fromstring(document)
        assert root.tag == f'{{{EXTERNAL_QUESTION_SCHEMA}}}ExternalQuestion'
        assert root.find(f'{{{EXTERNAL_QUESTION_SCHEMA}}}ExternalURL').text == url
        assert root.find(f'{{{EXTERNAL_QUESTION_SCHEMA}}}FrameHeight').text == '600'
        assert '&amp;' in document

    def test_hit_params(self):
        params = build_hit_params(
            'Name it',
            '.5',
            hit_validity_seconds=900,
            form_url='https://forms.example.com/',
            callback_url=''
        )

        assert params['Reward'] == '0.50'
        assert params['MaxAssignments'] == 1
        assert params['AssignmentDurationInSeconds'] == 900
        assert params['LifetimeInSeconds'] == 900
        assert params['AutoApprovalDelayInSeconds'] == 86400
        assert params['Description'] == 'Please provide your human perspective on this question'
        assert 'forms.example.com' in params['Question']


class TestValidation:

    def test_valid(self):
        validate_request('Q?', '0.05', 3600, 300)

    @pytest.mark.parametrize('question, reward, validity, max_wait', [
        ('', '0.05', 3600, 300),
        ('Q', 'abc', 3600, 300),
        ('Q', '0', 3600, 300),
        ('Q', 'NaN', 3600, 300),
        ('Q', '0.05', 10, 300),
        ('Q', '0.05', 31536001, 300),
        ('Q', '0.05', True, 300),
        ('Q', '0.05', 3600, None),
        ('Q', '0.05', 3600, float('nan')),
        ('Q', '0.05', 3600, float('inf')),
    ])
    def test_invalid(self, question, reward, validity, max_wait):
        with pytest.raises(ValueError):
            validate_request(question, reward, validity, max_wait)

    def test_negative_wait_is_allowed(self):
        """A non-positive wait budget still means one poll, so it is accepted."""
        validate_request('Q?', '0.05', 3600, -1)


class TestParseReward:

    @pytest.mark.parametrize('raw, expected', [
        ('0.05', '0.05'),
        (' 1.00 ', '1.00'),
        ('2', '2.00'),
        ('0.050', '0.05'),
        ('.5', '0.50'),
        ('1e1', '10.00'),
    ])
    def test_valid(self, raw, expected):
        assert str(parse_reward(raw)) == expected

    @pytest.mark.parametrize('raw', ['', 'ten', '-0.05', '0.005', '0.0501', 'Infinity', '1e40', None])
    def test_invalid(self, raw):
        assert parse_reward(raw) is None


class TestFormatReward:

    @pytest.mark.parametrize('raw, expected', [
        ('0.05', '0.05'),
        ('1e1', '10.00'),
        ('.5', '0.50'),
        ('0.050', '0.05'),
    ])
    def test_two_decimal_places(self, raw, expected):
        assert format_reward(raw) == expected

    def test_invalid(self):
        with pytest.raises(ValueError):
            format_reward('0.001')
