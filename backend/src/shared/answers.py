"""
Answer normalization.

MTurk hands back a worker's answer as a QuestionFormAnswers XML document.
The payload is produced by a third-party browser form, so every shape is
tolerated: absent, truncated, envelope-only, or carrying several answers.
"""
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Optional
from .errors import MalformedAnswerError


@dataclass(frozen=True)
class ParsedAnswer:
    """Result of a tolerant parse: the free text, or why there is none."""
    text: Optional[str]
    diagnostic: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.text is not None


def _local_name(tag) -> str:
    # '{namespace}Answer' -> 'Answer'
    if not isinstance(tag, str):
        return ''
    return tag.rsplit('}', 1)[-1]


def parse_answer(payload: Optional[str]) -> ParsedAnswer:
    """
    Extract the FreeText of the first Answer element.

    Args:
        payload: Raw answer document from an assignment, or None

    Returns:
        ParsedAnswer with the exact FreeText, or text=None and a diagnostic
    """
    if payload is None or not str(payload).strip():
        return ParsedAnswer(None, 'no answer payload')

    try:
        root = ET.fromstring(str(payload).strip())
    except (ET.ParseError, ValueError) as e:
        return ParsedAnswer(None, f'malformed answer XML: {e}')

    answer = next(
        (el for el in root.iter() if _local_name(el.tag) == 'Answer'),
        None
    )
    if answer is None:
        return ParsedAnswer(None, 'no Answer element in payload')

    free_text = next(
        (el for el in answer if _local_name(el.tag) == 'FreeText'),
        None
    )
    if free_text is None:
        return ParsedAnswer(None, 'Answer element has no FreeText')

    return ParsedAnswer(''.join(free_text.itertext()))


def extract_free_text(payload: Optional[str]) -> str:
    """
    Strict variant of parse_answer().

    Raises:
        MalformedAnswerError: if no free text could be extracted
    """
    parsed = parse_answer(payload)
    if not parsed.ok:
        raise MalformedAnswerError(parsed.diagnostic)
    return parsed.text
