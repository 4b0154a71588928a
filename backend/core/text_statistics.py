import re
import logging
from dataclasses import dataclass
from typing import List

logger = logging.getLogger(__name__)

FORMAL_MARKER_WORDS = (
    "furthermore",
    "moreover",
    "consequently",
    "therefore",
    "nevertheless",
    "subsequently",
)

_SENTENCE_SPLIT_PATTERN = re.compile(r"[.!?]+")
_FORMAL_MARKER_PATTERN = re.compile(r"\b(" + "|".join(FORMAL_MARKER_WORDS) + r")\b", re.IGNORECASE)


@dataclass(frozen=True)
class TextStatistics:
    word_count: int
    sentence_count: int
    avg_words_per_sentence: float
    vocabulary_diversity: float
    formal_word_count: int


class TextStatisticsProcessor:
    """Utility class for the surface statistics used by heuristic AI detection."""

    @staticmethod
    def tokenize_words(text: str) -> List[str]:
        """Whitespace-delimited tokens, punctuation left attached."""
        if not text:
            return []
        return text.split()

    @staticmethod
    def split_sentences(text: str) -> List[str]:
        """Non-blank segments between runs of `.`, `!` or `?`."""
        if not text:
            return []
        return [segment for segment in _SENTENCE_SPLIT_PATTERN.split(text) if segment.strip()]

    @staticmethod
    def count_formal_markers(text: str) -> int:
        if not text:
            return 0
        return len(_FORMAL_MARKER_PATTERN.findall(text))

    @staticmethod
    def compute_statistics(text: str) -> TextStatistics:
        """
        Compute the statistics the heuristic detector scores on.

        Args:
            text (str): Raw essay text.

        Returns:
            TextStatistics: Counts and ratios. Ratios are 0.0 when their
            denominator is zero.
        """
        words = TextStatisticsProcessor.tokenize_words(text)
        sentences = TextStatisticsProcessor.split_sentences(text)

        word_count = len(words)
        sentence_count = len(sentences)
        avg_words_per_sentence = word_count / sentence_count if sentence_count else 0.0
        unique_words = {word.lower() for word in words}
        vocabulary_diversity = len(unique_words) / word_count if word_count else 0.0

        return TextStatistics(
            word_count=word_count,
            sentence_count=sentence_count,
            avg_words_per_sentence=avg_words_per_sentence,
            vocabulary_diversity=vocabulary_diversity,
            formal_word_count=TextStatisticsProcessor.count_formal_markers(text),
        )

    @staticmethod
    def extract_labelled_probability(text: str, label: str) -> float:
        """
        Pull a probability for `label` out of free text such as "AI: 85%" or "human 0.15".

        A value with a decimal point is taken as already fractional; anything
        else is a percentage. Returns 0.0 when the label is not found.
        """
        if not text:
            return 0.0

        match = re.search(re.escape(label) + r"[:\s]*(\d+\.?\d*)%?", text, re.IGNORECASE)
        if not match:
            return 0.0

        raw_value = match.group(1)
        value = float(raw_value)
        if "." not in raw_value:
            value /= 100
        logger.debug(f"Extracted '{label}' probability {value} from text output")
        return value
