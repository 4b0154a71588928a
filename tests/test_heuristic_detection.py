"""
Test: Heuristic AI detection: additive scoring, clamping, jitter injection and analysis text.
"""
import random

import pytest
from conftest import FixedRandom, SequenceRandom
from core.text_statistics import TextStatisticsProcessor
from services.heuristic_detection_service import HeuristicAIDetector


def _two_sentences_of_twenty(first_word="alpha"):
    first = " ".join([first_word] + [f"alpha{i}" for i in range(19)])
    second = " ".join(f"beta{i}" for i in range(20))
    return f"{first}. {second}."


class TestRawProbability:
    def test_base_only(self):
        stats = TextStatisticsProcessor.compute_statistics("Short one. Another short one here.")
        assert HeuristicAIDetector.raw_ai_probability(stats) == pytest.approx(0.30)

    def test_sentence_length_band(self):
        stats = TextStatisticsProcessor.compute_statistics(_two_sentences_of_twenty())
        assert stats.avg_words_per_sentence == pytest.approx(20.0)
        assert HeuristicAIDetector.raw_ai_probability(stats) == pytest.approx(0.50)

    def test_formal_marker_adds_on_top_of_band(self):
        stats = TextStatisticsProcessor.compute_statistics(_two_sentences_of_twenty("Moreover"))
        assert stats.word_count == 40
        assert stats.formal_word_count == 1
        assert HeuristicAIDetector.raw_ai_probability(stats) == pytest.approx(0.30 + 0.20 + 0.15)

    def test_formal_marker_at_two_percent_is_not_counted(self):
        first = " ".join(["Moreover"] + [f"alpha{i}" for i in range(16)])
        second = " ".join(f"beta{i}" for i in range(17))
        third = " ".join(f"gamma{i}" for i in range(16))
        stats = TextStatisticsProcessor.compute_statistics(f"{first}. {second}. {third}.")
        assert stats.word_count == 50
        assert stats.formal_word_count == 1
        assert 15 < stats.avg_words_per_sentence < 25
        assert HeuristicAIDetector.raw_ai_probability(stats) == pytest.approx(0.50)

    def test_low_vocabulary_diversity(self):
        stats = TextStatisticsProcessor.compute_statistics("red blue red blue red blue red blue red blue.")
        assert stats.vocabulary_diversity < 0.4
        assert HeuristicAIDetector.raw_ai_probability(stats) == pytest.approx(0.40)

    def test_jitter_is_added(self):
        stats = TextStatisticsProcessor.compute_statistics("Short one. Another short one here.")
        assert HeuristicAIDetector.raw_ai_probability(stats, jitter=-0.1) == pytest.approx(0.20)

    def test_deterministic_without_jitter(self):
        text = _two_sentences_of_twenty("Therefore")
        first = HeuristicAIDetector.raw_ai_probability(TextStatisticsProcessor.compute_statistics(text))
        second = HeuristicAIDetector.raw_ai_probability(TextStatisticsProcessor.compute_statistics(text))
        assert first == second


class TestDetect:
    def test_zero_jitter_result(self, heuristic):
        result = heuristic.detect(_two_sentences_of_twenty("Moreover"))
        assert result.ai_probability == pytest.approx(0.65)
        assert result.human_probability == pytest.approx(0.35)
        assert result.confidence == pytest.approx(0.30)
        assert result.status == "completed"
        assert result.source == "heuristic"

    def test_synthetic_processing_time(self):
        result = HeuristicAIDetector(rng=FixedRandom(0.5)).detect("Some words here.")
        assert result.processing_time_ms == pytest.approx(2000.0)

    def test_jitter_uses_injected_source(self):
        rng = FixedRandom(1.0)
        result = HeuristicAIDetector(rng=rng).detect("Short one. Another short one here.")
        assert result.ai_probability == pytest.approx(0.45)
        assert rng.calls == 2

    def test_clamped_high(self):
        result = HeuristicAIDetector(rng=FixedRandom(5.0)).detect("Short one. Another short one here.")
        assert result.ai_probability == pytest.approx(0.95)
        assert result.human_probability == pytest.approx(0.05)
        assert result.confidence == pytest.approx(0.90)

    def test_clamped_low(self):
        result = HeuristicAIDetector(rng=SequenceRandom(-5.0, 0.5)).detect("Short one. Another short one here.")
        assert result.ai_probability == pytest.approx(0.05)
        assert result.human_probability == pytest.approx(0.95)
        assert result.processing_time_ms == pytest.approx(2000.0)

    def test_processing_time_never_negative(self):
        result = HeuristicAIDetector(rng=SequenceRandom(0.5, -5.0)).detect("Short one. Another short one here.")
        assert result.processing_time_ms == 0.0

    def test_seeded_source_is_reproducible(self, human_essay):
        first = HeuristicAIDetector(rng=random.Random(42)).detect(human_essay)
        second = HeuristicAIDetector(rng=random.Random(42)).detect(human_essay)
        assert first == second

    def test_probabilities_always_valid(self, human_essay):
        detector = HeuristicAIDetector(rng=random.Random(7))
        for _ in range(200):
            result = detector.detect(human_essay)
            assert 0.05 <= result.ai_probability <= 0.95
            assert abs(result.ai_probability + result.human_probability - 1) < 1e-6

    def test_empty_text(self, heuristic):
        result = heuristic.detect("")
        assert result.ai_probability == pytest.approx(0.30)
        assert "Word Count: 0" in result.analysis


class TestAnalysis:
    def test_reports_statistics_and_disclaimer(self, heuristic):
        result = heuristic.detect(_two_sentences_of_twenty("Moreover"))
        assert "Word Count: 40" in result.analysis
        assert "Sentences: 2" in result.analysis
        assert "Average Words per Sentence: 20.0" in result.analysis
        assert "Formal Language Indicators: 1" in result.analysis
        assert "Moderate likelihood" in result.analysis
        assert "fallback estimate" in result.analysis

    def test_assessment_bands(self):
        assert HeuristicAIDetector.assess(0.71).startswith("High likelihood")
        assert HeuristicAIDetector.assess(0.7).startswith("Moderate likelihood")
        assert HeuristicAIDetector.assess(0.4).startswith("Moderate likelihood")
        assert HeuristicAIDetector.assess(0.39).startswith("Low likelihood")
