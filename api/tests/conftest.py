"""Shared fixtures: a mocked LLM provider that records every call."""

import json

import pytest

from legallyeasy.core.config import Settings


class MockOpenAIService:
    """Stand-in for OpenAIService returning a canned structured payload."""

    def __init__(self, payload=None, error=None):
        self._payload = payload
        self._error = error
        self.calls = []

    @classmethod
    def returning(cls, **fields):
        return cls(payload=json.dumps(fields))

    @property
    def call_count(self):
        return len(self.calls)

    async def structured_completion(
        self, system_prompt, question, documents, output_field, field_description
    ):
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "question": question,
                "documents": documents,
                "output_field": output_field,
                "field_description": field_description,
            }
        )
        if self._error is not None:
            raise self._error
        return self._payload


@pytest.fixture
def mock_openai():
    """Factory fixture: ``mock_openai(response="...")`` or ``mock_openai(error=exc)``."""

    def _make(error=None, raw=None, **fields):
        if error is not None:
            return MockOpenAIService(error=error)
        if raw is not None:
            return MockOpenAIService(payload=raw)
        return MockOpenAIService.returning(**fields)

    return _make


@pytest.fixture
def settings():
    return Settings(
        azure_openai_endpoint="https://test.openai.azure.com",
        azure_openai_chat_deployment="gpt-4o",
        azure_openai_api_key="test-key",
    )
