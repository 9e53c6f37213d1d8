"""
Unit tests for the Question model and payload normalisation.
"""

import unittest

import pytest

from speakly.exceptions import InvalidQuestionError
from speakly.models.question import (
    Question,
    QuestionOption,
    question_from_dict,
    questions_from_list,
)


class TestQuestionValidation(unittest.TestCase):
    """Test Question integrity checks."""

    def _options(self, correct=("o1",)):
        return [
            QuestionOption("o1", "Alpha", is_correct="o1" in correct),
            QuestionOption("o2", "Beta", is_correct="o2" in correct),
        ]

    def test_valid_question(self):
        question = Question("q1", "vocabulary", "Alpha", self._options())
        self.assertIsInstance(question.options, tuple)
        self.assertEqual(question.correct_option.option_id, "o1")

    def test_rejects_empty_text(self):
        with self.assertRaises(InvalidQuestionError):
            Question("q1", "vocabulary", "  ", self._options())

    def test_rejects_unknown_type(self):
        with self.assertRaises(InvalidQuestionError):
            Question("q1", "essay", "Alpha", self._options())

    def test_rejects_single_option(self):
        with self.assertRaises(InvalidQuestionError):
            Question("q1", "vocabulary", "Alpha", [QuestionOption("o1", "A", True)])

    def test_rejects_no_or_multiple_correct(self):
        with self.assertRaises(InvalidQuestionError):
            Question("q1", "vocabulary", "Alpha", self._options(correct=()))
        with self.assertRaises(InvalidQuestionError):
            Question("q1", "vocabulary", "Alpha", self._options(correct=("o1", "o2")))

    def test_rejects_duplicate_option_ids(self):
        options = [QuestionOption("o1", "A", True), QuestionOption("o1", "B")]
        with self.assertRaises(InvalidQuestionError):
            Question("q1", "vocabulary", "Alpha", options)


class TestQuestionBehaviour:
    """Attempts allowed and displayed text."""

    def _question(self, **kwargs):
        defaults = dict(
            question_id="q1",
            question_type="vocabulary",
            text="Ephemeral",
            options=[QuestionOption("o1", "Lasting"), QuestionOption("o2", "Short-lived", True)],
        )
        defaults.update(kwargs)
        return Question(**defaults)

    def test_one_attempt_without_teaching_material(self):
        assert self._question().max_attempts == 1

    def test_two_attempts_with_translation_or_explanation(self):
        assert self._question(translation="Efímero").max_attempts == 2
        assert self._question(explanation="Lasts a short time.").max_attempts == 2

    def test_single_word_vocabulary_is_phrased_as_question(self):
        assert self._question().display_text == '¿Qué significa "Ephemeral"?'

    def test_sentence_is_shown_verbatim(self):
        question = self._question(text="Which word means short-lived?")
        assert question.display_text == "Which word means short-lived?"

    def test_grammar_word_is_shown_verbatim(self):
        assert self._question(question_type="grammar").display_text == "Ephemeral"

    def test_get_option(self):
        question = self._question()
        assert question.get_option("o2").text == "Short-lived"
        assert question.get_option("missing") is None


class TestQuestionFromDict:
    """Normalisation of every supported payload shape."""

    def test_is_correct_flags(self):
        question = question_from_dict(
            {
                "id": "q1",
                "type": "grammar",
                "text": "Pick one",
                "options": [
                    {"id": "a", "text": "A"},
                    {"id": "b", "text": "B", "isCorrect": True},
                ],
            }
        )
        assert question.question_type == "grammar"
        assert question.correct_option.option_id == "b"

    def test_correct_option_id_reference(self):
        question = question_from_dict(
            {
                "id": "pq1",
                "text": "Pick one",
                "options": [{"id": "o1", "text": "A"}, {"id": "o2", "text": "B"}],
                "correctOptionId": "o2",
            }
        )
        assert question.correct_option.option_id == "o2"
        assert question.question_type == "vocabulary"

    def test_unknown_correct_reference_raises(self):
        with pytest.raises(InvalidQuestionError):
            question_from_dict(
                {
                    "id": "q1",
                    "text": "Pick one",
                    "options": [{"id": "o1", "text": "A"}, {"id": "o2", "text": "B"}],
                    "correctOptionId": "o9",
                }
            )

    def test_generated_shape_first_option_correct(self):
        question = question_from_dict(
            {
                "question": "Capital of France?",
                "options": [
                    {"label": "A", "text": "Paris", "explanation": "Paris is the capital."},
                    {"label": "B", "text": "Rome", "explanation": "Rome is in Italy."},
                ],
            },
            index=3,
        )
        assert question.text == "Capital of France?"
        assert question.correct_option.text == "Paris"
        assert question.question_id.startswith("q3-")
        # Correct option's explanation becomes the question's
        assert question.explanation == "Paris is the capital."
        assert question.max_attempts == 2

    def test_missing_option_ids_are_generated(self):
        question = question_from_dict(
            {"id": "q1", "text": "Pick", "options": [{"text": "A"}, {"text": "B"}]}
        )
        assert [o.option_id for o in question.options] == ["o1", "o2"]

    def test_no_options_raises(self):
        with pytest.raises(InvalidQuestionError):
            question_from_dict({"id": "q1", "text": "Pick", "options": []})

    def test_non_object_raises(self):
        with pytest.raises(InvalidQuestionError):
            question_from_dict(["not", "a", "question"])

    @pytest.mark.parametrize("field", ["text", "question", "translation", "explanation"])
    def test_non_string_text_fields_raise(self, field):
        payload = {"id": "q1", "options": [{"text": "A"}, {"text": "B"}], "text": "Pick"}
        payload[field] = 42
        with pytest.raises(InvalidQuestionError, match=field):
            question_from_dict(payload)

    def test_non_string_option_explanation_raises(self):
        payload = {
            "question": "Pick",
            "options": [{"label": "A", "text": "A", "explanation": ["x"]}, {"label": "B", "text": "B"}],
        }
        with pytest.raises(InvalidQuestionError):
            question_from_dict(payload)

    def test_questions_from_list_preserves_order(self):
        items = [
            {"id": f"q{i}", "text": f"Q{i}", "options": [{"text": "A"}, {"text": "B"}]}
            for i in range(3)
        ]
        assert [q.question_id for q in questions_from_list(items)] == ["q0", "q1", "q2"]


if __name__ == "__main__":
    unittest.main()
