import json
import random
from unittest.mock import Mock, patch

import pytest

from quizify.agents.curator_agent import CuratorAgent
from quizify.agents.explanation_agent import ExplanationAgent
from quizify.agents.question_agent import QuestionAgent
from quizify.config.llm_config import LLMClient, llm_client
from quizify.config.settings import settings
from quizify.core.exceptions import CurationError, ElaborationError, LLMServiceError, MalformedResponseError
from quizify.core.quiz_curation import QuizCurator
from quizify.tests.fakes import make_batch, make_mcq


def _raw_mcq(i):
    return {
        "question": f"What is fact {i}?",
        "options": ["One", "Two", "Three", "Four"],
        "correctAnswerIndex": i % 4,
        "explanation": f"Fact {i} is stated on the page.",
    }


class TestQuestionAgent:
    def setup_method(self):
        """Setup test environment"""
        self.agent = QuestionAgent(batch_size=5)

    @patch.object(llm_client, 'generate_json')
    def test_generate_for_page(self, mock_generate):
        mock_generate.return_value = {
            "mcqs": [_raw_mcq(i) for i in range(5)],
            "pageNotes": "- *Fact 1* matters",
        }

        output = self.agent.generate_for_page("page text", "Biology", 3, 10)

        assert len(output.mcqs) == 5
        assert output.mcqs[2].correct_answer_index == 2
        assert output.mcqs[0].options == ("One", "Two", "Three", "Four")
        assert output.page_notes == "- *Fact 1* matters"

        prompt = mock_generate.call_args.kwargs["prompt"]
        assert "page 3 of a 10-page document" in prompt
        assert "Biology" in prompt
        assert "page text" in prompt

    @patch.object(llm_client, 'generate_json')
    def test_wrong_count_rejected(self, mock_generate):
        mock_generate.return_value = {"mcqs": [_raw_mcq(i) for i in range(4)]}

        with pytest.raises(MalformedResponseError, match="Expected 5 MCQs, got 4"):
            self.agent.generate_for_page("page text", "Biology", 1, 1)

    @patch.object(llm_client, 'generate_json')
    def test_empty_batch_rejected(self, mock_generate):
        mock_generate.return_value = {"mcqs": []}

        with pytest.raises(MalformedResponseError, match="No MCQs returned"):
            self.agent.generate_for_page("page text", "Biology", 1, 1)

    @pytest.mark.parametrize("broken", [
        {"options": ["One", "Two", "Three"]},
        {"correctAnswerIndex": 4},
        {"question": "   "},
        {"explanation": None},
    ])
    @patch.object(llm_client, 'generate_json')
    def test_incomplete_question_rejects_whole_batch(self, mock_generate, broken):
        mcqs = [_raw_mcq(i) for i in range(5)]
        mcqs[1] = {**mcqs[1], **broken}
        mock_generate.return_value = {"mcqs": mcqs}

        with pytest.raises(MalformedResponseError):
            self.agent.generate_for_page("page text", "Biology", 1, 1)

    @patch.object(llm_client, 'generate_json')
    def test_transport_error_propagates(self, mock_generate):
        mock_generate.side_effect = LLMServiceError("Connection refused")

        with pytest.raises(LLMServiceError):
            self.agent.generate_for_page("page text", "Biology", 1, 1)


class TestCuratorAgent:
    @patch.object(llm_client, 'generate_json')
    def test_sends_indexed_pool(self, mock_generate):
        mock_generate.return_value = {"selectedIndices": [1, 0]}
        pool = make_batch(1)

        output = CuratorAgent().select_best(pool, 2)

        assert output.selected_indices == [1, 0]
        prompt = mock_generate.call_args.kwargs["prompt"]
        assert '"index": 4' in prompt
        assert pool[4].question in prompt

    @pytest.mark.parametrize("failure", [
        {"return_value": {"something": "else"}},
        {"side_effect": MalformedResponseError("Response is not valid JSON")},
        {"side_effect": LLMServiceError("Connection refused")},
    ])
    def test_failures_become_curation_error(self, failure):
        with patch.object(llm_client, 'generate_json', **failure):
            with pytest.raises(CurationError):
                CuratorAgent().select_best(make_batch(1), 2)

    @patch.object(llm_client, 'generate_json')
    def test_curation_error_falls_back_to_random_subset(self, mock_generate):
        mock_generate.side_effect = LLMServiceError("rate limited")
        pool = make_batch(1)

        selected = QuizCurator(CuratorAgent(), rng=random.Random(3)).curate(pool, 2)

        assert len(selected) == 2
        assert all(mcq in pool for mcq in selected)


class TestExplanationAgent:
    @patch.object(llm_client, 'generate_json')
    def test_elaborate(self, mock_generate):
        mock_generate.return_value = {"elaboratedExplanation": "A **longer** explanation."}
        mcq = make_mcq("x", correct=2)

        text = ExplanationAgent().elaborate("Biology", mcq, "Because x.")

        assert text == "A **longer** explanation."
        prompt = mock_generate.call_args.kwargs["prompt"]
        assert "Because x." in prompt
        assert mcq.options[2] in prompt

    @pytest.mark.parametrize("failure", [
        {"return_value": {"elaboratedExplanation": ""}},
        {"return_value": {"wrong": "shape"}},
        {"side_effect": LLMServiceError("rate limited")},
    ])
    def test_failures_become_elaboration_error(self, failure):
        with patch.object(llm_client, 'generate_json', **failure):
            with pytest.raises(ElaborationError):
                ExplanationAgent().elaborate("Biology", make_mcq("x"), "Because x.")


class TestLLMClient:
    def _client_returning(self, content):
        client = LLMClient()
        completion = Mock()
        completion.choices = [Mock(message=Mock(content=content))]
        client._client = Mock()
        client._client.chat.completions.create.return_value = completion
        return client

    def test_generate_json_parses_object(self):
        client = self._client_returning(json.dumps({"mcqs": []}))

        assert client.generate_json("prompt") == {"mcqs": []}
        kwargs = client._client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][-1] == {"role": "user", "content": "prompt"}

    @pytest.mark.parametrize("content", ["not json", "[1, 2]", ""])
    def test_generate_json_rejects_non_objects(self, content):
        client = self._client_returning(content)

        with pytest.raises(MalformedResponseError):
            client.generate_json("prompt")

    def test_missing_api_key_fails_on_first_call(self):
        client = LLMClient()

        with patch.object(settings, "OPENAI_API_KEY", ""):
            with pytest.raises(LLMServiceError):
                client.generate("prompt")
