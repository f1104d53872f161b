"""
Tests for the semantic matching client.

The OpenAI client is replaced with a stub object; no network access.
"""

import asyncio
from types import SimpleNamespace

import httpx
import openai
import pytest

from revision_compare.core.errors import CollaboratorFailure
from revision_compare.services.similarity_service import SimilarityService, build_prompt, parse_response


class StubCompletions:

    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = 0

    async def create(self, model, messages):
        self.calls += 1
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _stub_client(completions: StubCompletions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


@pytest.fixture
def service(monkeypatch) -> SimilarityService:
    service = SimilarityService()
    service._ensure_initialized()
    monkeypatch.setattr(service.settings, "max_retries", 2)
    return service


class TestParseResponse:

    def test_fenced_json(self):
        content = '```json\n{"similar_text": "老木匠", "start": 4, "end": 7, "explanation": "同义"}\n```'
        match = parse_response(content)
        assert match.similar_text == "老木匠"
        assert (match.start, match.end) == (4, 7)

    def test_missing_offsets(self):
        match = parse_response('{"similar_text": "abc"}')
        assert match.start is None
        assert match.explanation == ""

    @pytest.mark.parametrize("content", [None, "", "not json", '{"start": "x"}'])
    def test_unparseable(self, content):
        with pytest.raises(CollaboratorFailure):
            parse_response(content)


class TestBuildPrompt:

    def test_contains_inputs(self):
        prompt = build_prompt("源", "目标", "选中")
        assert '源文本: "源"' in prompt
        assert '目标文本: "目标"' in prompt
        assert '在源文本中选中的句子或段落: "选中"' in prompt
        assert '"similar_text"' in prompt


class TestFindSimilar:

    def test_success(self, service, monkeypatch):
        completions = StubCompletions('{"similar_text": "门口", "start": 0, "end": 2, "explanation": "e"}')
        monkeypatch.setattr(service, "client", _stub_client(completions))
        match = asyncio.run(service.find_similar("door", "门口", "door"))
        assert match.similar_text == "门口"
        assert completions.calls == 1

    def test_api_error_becomes_collaborator_failure(self, service, monkeypatch):
        error = openai.APIConnectionError(request=httpx.Request("POST", "https://api.deepseek.com/v1"))
        completions = StubCompletions(error=error)
        monkeypatch.setattr(service, "client", _stub_client(completions))
        with pytest.raises(CollaboratorFailure):
            asyncio.run(service.find_similar("a", "b", "a"))
        assert completions.calls == 2

    def test_missing_credentials(self, service, monkeypatch):
        monkeypatch.setattr(service, "client", None)
        with pytest.raises(CollaboratorFailure):
            asyncio.run(service.find_similar("a", "b", "a"))

    def test_empty_choices(self, service, monkeypatch):
        completions = StubCompletions()

        async def create(model, messages):
            completions.calls += 1
            return SimpleNamespace(choices=[])

        completions.create = create
        monkeypatch.setattr(service, "client", _stub_client(completions))
        with pytest.raises(CollaboratorFailure) as exc_info:
            asyncio.run(service.find_similar("a", "b", "a"))
        assert "empty completion" in exc_info.value.message
        assert completions.calls == 1

    def test_unexpected_error_wrapped(self, service, monkeypatch):
        completions = StubCompletions(error=KeyError("choices"))
        monkeypatch.setattr(service, "client", _stub_client(completions))
        with pytest.raises(CollaboratorFailure) as exc_info:
            asyncio.run(service.find_similar("a", "b", "a"))
        assert "choices" in exc_info.value.details["original_error"]
        assert completions.calls == 1
