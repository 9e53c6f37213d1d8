"""
Unit tests for the practice question service client.

The HTTP session is mocked; no network access.
"""

import unittest
from unittest.mock import Mock

import requests

from speakly.exceptions import QuestionServiceError
from speakly.practice_settings import PracticeSettings
from speakly.utils.question_service import (
    FALLBACK_PREFIX,
    LOAD_FAILED_PREFIX,
    MOCK_SOURCE_WARNING,
    QuestionServiceClient,
)

GENERATED = {
    "source": "api",
    "questions": [
        {
            "question": "Which word means 'very big'?",
            "options": [
                {"label": "A", "text": "Huge", "explanation": "Huge means very big."},
                {"label": "B", "text": "Tiny", "explanation": "Tiny means very small."},
            ],
        },
        {
            "question": "Opposite of 'early'?",
            "options": [
                {"label": "A", "text": "Late", "explanation": "Late is the opposite."},
                {"label": "B", "text": "Soon", "explanation": "Soon means shortly."},
            ],
        },
    ],
}


def http_response(status_code=200, body=None, invalid_json=False):
    response = Mock()
    response.status_code = status_code
    if invalid_json:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = body
    return response


class TestQuestionServiceClient(unittest.TestCase):
    """Request shape and fallback policy."""

    def setUp(self):
        self.session = Mock()
        self.client = QuestionServiceClient(
            url="http://backend/api/practice/generate-questions", timeout=3, session=self.session
        )
        self.settings = PracticeSettings(level="advanced", topic="viajes", num_questions=5)

    def test_payload(self):
        self.session.post.return_value = http_response(body=GENERATED)
        self.client.load_practice_questions(self.settings)
        self.session.post.assert_called_once_with(
            "http://backend/api/practice/generate-questions",
            json={
                "language": "en",
                "level": "advanced",
                "topic": "viajes",
                "questionCount": 5,
                "questionType": "mix",
            },
            timeout=3,
        )

    def test_api_questions(self):
        self.session.post.return_value = http_response(body=GENERATED)
        result = self.client.load_practice_questions(self.settings)
        self.assertEqual(result.source, "api")
        self.assertIsNone(result.message)
        self.assertEqual(len(result.questions), 2)
        self.assertEqual(result.questions[0].correct_option.text, "Huge")

    def test_mock_source_is_a_warning(self):
        self.session.post.return_value = http_response(body={**GENERATED, "source": "mock"})
        result = self.client.load_practice_questions(self.settings)
        self.assertEqual(result.source, "mock")
        self.assertEqual(result.message, MOCK_SOURCE_WARNING)
        self.assertTrue(result.is_warning)
        self.assertEqual(len(result.questions), 2)

    def test_error_source_uses_fallback(self):
        self.session.post.return_value = http_response(
            body={"source": "error", "questions": [], "message": "quota exceeded"}
        )
        result = self.client.load_practice_questions(self.settings)
        self.assertEqual(result.source, "fallback")
        self.assertEqual(result.message, FALLBACK_PREFIX + "quota exceeded")
        self.assertEqual(
            [q.question_id for q in result.questions], ["mock_q1_local", "mock_q2_local"]
        )

    def test_empty_questions_use_fallback(self):
        self.session.post.return_value = http_response(body={"source": "api", "questions": []})
        result = self.client.load_practice_questions(self.settings)
        self.assertEqual(result.source, "fallback")
        self.assertTrue(result.message.startswith(FALLBACK_PREFIX))

    def test_network_error_uses_fallback(self):
        self.session.post.side_effect = requests.ConnectionError("refused")
        result = self.client.load_practice_questions(self.settings)
        self.assertEqual(result.source, "fallback")
        self.assertTrue(result.message.startswith(LOAD_FAILED_PREFIX))
        self.assertIn("Error de red", result.message)
        self.assertEqual(len(result.questions), 2)

    def test_timeout_uses_fallback(self):
        self.session.post.side_effect = requests.Timeout("slow")
        result = self.client.load_practice_questions(self.settings)
        self.assertEqual(result.source, "fallback")

    def test_http_error_has_no_questions(self):
        self.session.post.return_value = http_response(500, body={"message": "boom"})
        result = self.client.load_practice_questions(self.settings)
        self.assertEqual(result.source, "error")
        self.assertEqual(result.questions, [])
        self.assertEqual(result.message, LOAD_FAILED_PREFIX + "Error del backend: 500 - boom")

    def test_http_error_without_detail(self):
        self.session.post.return_value = http_response(502, invalid_json=True)
        with self.assertRaises(QuestionServiceError) as ctx:
            self.client.generate_questions(self.settings)
        self.assertEqual(ctx.exception.status_code, 502)
        self.assertIn("Respuesta no detallada.", str(ctx.exception))

    def test_malformed_body_uses_fallback(self):
        self.session.post.return_value = http_response(invalid_json=True)
        result = self.client.load_practice_questions(self.settings)
        self.assertEqual(result.source, "fallback")

    def test_schema_mismatch_uses_fallback(self):
        self.session.post.return_value = http_response(body={"source": "martian"})
        result = self.client.load_practice_questions(self.settings)
        self.assertEqual(result.source, "fallback")
        self.assertEqual(len(result.questions), 2)

    def test_question_with_all_options_flagged_wrong_uses_fallback(self):
        body = {
            "source": "api",
            "questions": [
                {
                    "question": "Q?",
                    "options": [
                        {"text": "A", "isCorrect": False},
                        {"text": "B", "isCorrect": False},
                    ],
                }
            ],
        }
        self.session.post.return_value = http_response(body=body)
        result = self.client.load_practice_questions(self.settings)
        self.assertEqual(result.source, "fallback")

    def test_non_string_question_text_uses_fallback(self):
        body = {
            "source": "api",
            "questions": [
                {"question": "Pick", "text": 42, "options": [{"text": "A"}, {"text": "B"}]}
            ],
        }
        self.session.post.return_value = http_response(body=body)
        result = self.client.load_practice_questions(self.settings)
        self.assertEqual(result.source, "fallback")
        self.assertTrue(result.message.startswith(FALLBACK_PREFIX))
        self.assertEqual(len(result.questions), 2)

    def test_non_string_explanation_uses_fallback(self):
        body = {
            "source": "api",
            "questions": [
                {
                    "question": "Pick",
                    "explanation": {"es": "Elegir"},
                    "options": [{"text": "A"}, {"text": "B"}],
                }
            ],
        }
        self.session.post.return_value = http_response(body=body)
        result = self.client.load_practice_questions(self.settings)
        self.assertEqual(result.source, "fallback")


if __name__ == "__main__":
    unittest.main()
