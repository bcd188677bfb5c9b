"""
Response parsing for model replies.
Converts the model's free-text answer into a list of entries, one per card.
"""

import logging
import re
from enum import Enum
from typing import List, Optional

from card_creator.errors import ParseError
from card_creator.structures import DeckMode, Entry

logger = logging.getLogger(__name__)

VOCABULARY_SEPARATOR = ";"
QUESTION_MARKERS = ("F:", "Q:")
ANSWER_MARKERS = ("A:",)

_BLANK_LINE = re.compile(r"\n[ \t]*\n")


class ParsePolicy(Enum):
    """How to treat lines or blocks that do not match the expected format."""
    LENIENT = "lenient"
    STRICT = "strict"


DEFAULT_POLICIES = {
    DeckMode.VOCABULARY: ParsePolicy.LENIENT,
    DeckMode.QA: ParsePolicy.STRICT,
}


def _strip_marker(line: str, markers) -> Optional[str]:
    for marker in markers:
        if line[:len(marker)].upper() == marker:
            return line[len(marker):].strip()
    return None


class ResponseParser:
    """Parses raw model text into entries for a given deck mode."""

    def parse(self, raw_text: str, mode: DeckMode, policy: Optional[ParsePolicy] = None) -> List[Entry]:
        """Parse ``raw_text`` for ``mode`` using ``policy`` or the mode's default."""
        policy = policy or DEFAULT_POLICIES[mode]
        text = (raw_text or "").replace("\r\n", "\n")

        if mode is DeckMode.VOCABULARY:
            return self._parse_vocabulary(text, policy)
        return self._parse_qa(text, policy)

    def _parse_vocabulary(self, text: str, policy: ParsePolicy) -> List[Entry]:
        entries = []

        for line_number, line in enumerate(text.split("\n"), start=1):
            line = line.strip()
            if not line:
                continue

            entry = self._parse_vocabulary_line(line)
            if entry is None:
                if policy is ParsePolicy.STRICT:
                    raise ParseError(f"Line {line_number} is not in 'word;translation' format.")
                logger.debug("Dropping malformed vocabulary line: %r", line)
                continue

            entries.append(entry)

        return entries

    @staticmethod
    def _parse_vocabulary_line(line: str) -> Optional[Entry]:
        if line.count(VOCABULARY_SEPARATOR) != 1:
            return None
        original, translated = (part.strip() for part in line.split(VOCABULARY_SEPARATOR))
        if not original or not translated:
            return None
        return Entry.vocabulary(original, translated)

    def _parse_qa(self, text: str, policy: ParsePolicy) -> List[Entry]:
        entries = []
        blocks = [block.strip() for block in _BLANK_LINE.split(text)]
        blocks = [block for block in blocks if block]

        for block_number, block in enumerate(blocks, start=1):
            entry = self._parse_qa_block(block)
            if entry is None:
                if policy is ParsePolicy.STRICT:
                    raise ParseError(
                        f"Question/answer pair {block_number} is malformed.",
                        block=block_number,
                    )
                logger.debug("Skipping malformed question/answer block: %r", block)
                continue

            entries.append(entry)

        if not entries:
            raise ParseError("The model did not return any question/answer pairs.")

        return entries

    @staticmethod
    def _parse_qa_block(block: str) -> Optional[Entry]:
        lines = [line.strip() for line in block.split("\n") if line.strip()]
        if len(lines) != 2:
            return None

        question = _strip_marker(lines[0], QUESTION_MARKERS)
        answer = _strip_marker(lines[1], ANSWER_MARKERS)
        if not question or not answer:
            return None

        return Entry.qa(question, answer)


def parse_response(raw_text: str, mode: DeckMode, policy: Optional[ParsePolicy] = None) -> List[Entry]:
    """Parse a model reply with a fresh parser."""
    return ResponseParser().parse(raw_text, mode, policy)
