from unittest import mock

import pytest
from any_llm import AnyLLM

from django_course_assistant.llm import LLMService


class MockAnyLLM(mock.Mock):
    def __init__(self, **kwargs):
        super().__init__(spec=AnyLLM, **kwargs)
        self.PROVIDER_NAME = "mock-provider"


@pytest.fixture
def mock_any_llm():
    return MockAnyLLM()


def test_llm_service_completion_wraps_anyllm(mock_any_llm):
    messages = [{"role": "user", "content": "Which courses are free?"}]
    service = LLMService(client=mock_any_llm, model="gemma3:4b")
    service.completion(messages)
    mock_any_llm.completion.assert_called_once_with(
        model="gemma3:4b", messages=messages
    )


def test_llm_service_completion_passes_stream_flag(mock_any_llm):
    messages = [{"role": "user", "content": "Which courses are free?"}]
    service = LLMService(client=mock_any_llm, model="gemma3:4b")
    service.completion(messages, stream=True)
    mock_any_llm.completion.assert_called_once_with(
        model="gemma3:4b", messages=messages, stream=True
    )


def test_llm_service_embedding_wraps_anyllm(mock_any_llm):
    service = LLMService(client=mock_any_llm, model="gemma3:4b")
    service.embedding("TypeScript basics")
    mock_any_llm._embedding.assert_called_once_with(
        model="gemma3:4b", inputs="TypeScript basics"
    )


def test_llm_service_id(mock_any_llm):
    service = LLMService(client=mock_any_llm, model="gemma3:4b")
    assert service.service_id == "LLMService:mock-provider:gemma3:4b"


def test_llm_service_create_uses_anyllm_factory(mock_any_llm):
    with mock.patch.object(AnyLLM, "create", return_value=mock_any_llm) as create:
        service = LLMService.create(
            provider="ollama", model="gemma3:4b", api_base="http://127.0.0.1:11434"
        )

    create.assert_called_once_with(
        provider="ollama", api_base="http://127.0.0.1:11434"
    )
    assert service.client is mock_any_llm
    assert service.model == "gemma3:4b"


def test_llm_service_repr(mock_any_llm):
    service = LLMService(client=mock_any_llm, model="gemma3:4b")
    assert repr(service) == "<LLMService LLMService:mock-provider:gemma3:4b>"
