"""
Unit tests for the legal chat flow.

The topicality gate is delegated to the model, so these tests run the flow
against a mocked provider and check what the flow sends and returns.
"""

import pytest

from legallyeasy.core.errors import InvalidInputError, UpstreamError
from legallyeasy.models.chat import ChatQuery
from legallyeasy.services.legal_chat import (
    DISCLAIMER,
    REFUSAL_MESSAGE,
    SYSTEM_PROMPT,
    LegalChatFlow,
)

LEGAL_ANSWER = (
    f"{DISCLAIMER} In most jurisdictions a landlord must serve written notice "
    "before starting eviction proceedings."
)


@pytest.mark.asyncio
async def test_off_topic_query_returns_exact_refusal(mock_openai):
    """A non-legal question yields exactly the refusal sentence."""
    openai = mock_openai(response=REFUSAL_MESSAGE)
    flow = LegalChatFlow(openai)

    answer = await flow.legal_chat(query="What is the capital of France?")

    assert answer.response == REFUSAL_MESSAGE
    assert openai.call_count == 1


@pytest.mark.asyncio
async def test_legal_query_starts_with_disclaimer(mock_openai):
    openai = mock_openai(response=LEGAL_ANSWER)
    flow = LegalChatFlow(openai)

    answer = await flow.legal_chat(query="Can my landlord evict me without notice?")

    assert answer.response.startswith(DISCLAIMER)
    assert answer.response[len(DISCLAIMER):].strip()
    assert REFUSAL_MESSAGE not in answer.response


@pytest.mark.asyncio
async def test_prompt_carries_gate_and_disclaimer(mock_openai):
    """The refusal and disclaimer sentences are given to the model verbatim."""
    openai = mock_openai(response=LEGAL_ANSWER)
    flow = LegalChatFlow(openai)

    await flow.legal_chat(query="  Is a verbal contract binding?  ")

    call = openai.calls[0]
    assert REFUSAL_MESSAGE in call["system_prompt"]
    assert DISCLAIMER in call["system_prompt"]
    assert call["system_prompt"] == SYSTEM_PROMPT
    assert call["question"].endswith("Is a verbal contract binding?")
    assert call["documents"] == []
    assert call["output_field"] == "response"


@pytest.mark.asyncio
async def test_document_is_passed_as_context_with_its_name(mock_openai):
    openai = mock_openai(response=LEGAL_ANSWER)
    flow = LegalChatFlow(openai)

    await flow.legal_chat(
        query="Does this lease allow pets?",
        document_data_uri="data:text/plain;base64,SGVsbG8=",
        document_name="lease.txt",
    )

    documents = openai.calls[0]["documents"]
    assert len(documents) == 1
    assert documents[0].name == "lease.txt"
    assert documents[0].mime_type == "text/plain"
    assert documents[0].data == b"Hello"
    assert "attached document" in openai.calls[0]["question"]


@pytest.mark.asyncio
@pytest.mark.parametrize("query", ["", "   ", "\n\t", None])
async def test_blank_query_never_reaches_provider(mock_openai, query):
    openai = mock_openai(response=LEGAL_ANSWER)
    flow = LegalChatFlow(openai)

    with pytest.raises(InvalidInputError, match="Please enter a question"):
        await flow.legal_chat(query=query)
    assert openai.call_count == 0


@pytest.mark.asyncio
async def test_blank_query_with_document_is_rejected(mock_openai):
    """A document alone is not enough: a question is always required."""
    openai = mock_openai(response=LEGAL_ANSWER)
    flow = LegalChatFlow(openai)

    with pytest.raises(InvalidInputError):
        await flow.legal_chat(query=" ", document_data_uri="data:text/plain;base64,SGVsbG8=")
    assert openai.call_count == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "data_uri",
    [
        "",
        "   ",
        "not-a-data-uri",
        "data:text/plain,SGVsbG8=",
        "data:;base64,SGVsbG8=",
        "data:text/plain;base64,",
        "data:text/plain;base64,***",
    ],
)
async def test_malformed_document_is_invalid_input(mock_openai, data_uri):
    openai = mock_openai(response=LEGAL_ANSWER)
    flow = LegalChatFlow(openai)

    with pytest.raises(InvalidInputError):
        await flow.legal_chat(query="Is this clause enforceable?", document_data_uri=data_uri)
    assert openai.call_count == 0


@pytest.mark.asyncio
async def test_provider_failure_is_upstream_error(mock_openai):
    cause = RuntimeError("connection reset")
    openai = mock_openai(error=UpstreamError("The language model request failed", cause=cause))
    flow = LegalChatFlow(openai)

    with pytest.raises(UpstreamError) as exc_info:
        await flow.legal_chat(query="Can I break my lease early?")
    assert exc_info.value.cause is cause
    assert openai.call_count == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw",
    ['{"answer": "wrong field"}', '{"response": ""}', '{"response": "   "}', "not json"],
)
async def test_schema_violation_is_upstream_error(mock_openai, raw):
    openai = mock_openai(raw=raw)
    flow = LegalChatFlow(openai)

    with pytest.raises(UpstreamError):
        await flow.legal_chat(query="What is adverse possession?")


@pytest.mark.asyncio
async def test_off_template_answer_is_returned_unchanged(mock_openai, caplog):
    """The flow trusts the model: it logs but never rewrites an answer."""
    openai = mock_openai(response="Landlords usually need a court order.")
    flow = LegalChatFlow(openai)

    answer = await flow.answer(ChatQuery(query="Can my landlord evict me?"))

    assert answer.response == "Landlords usually need a court order."
    assert "does not follow" in caplog.text


@pytest.mark.asyncio
async def test_calls_are_independent(mock_openai):
    """No history from earlier turns is sent with a later question."""
    openai = mock_openai(response=LEGAL_ANSWER)
    flow = LegalChatFlow(openai)

    await flow.legal_chat(query="What is a tenancy deposit?")
    await flow.legal_chat(query="How long can it be held?")

    assert "tenancy deposit" not in openai.calls[1]["question"]
    assert "tenancy deposit" not in openai.calls[1]["system_prompt"]


def test_template_check():
    assert LegalChatFlow._check_template(REFUSAL_MESSAGE)
    assert LegalChatFlow._check_template(LEGAL_ANSWER)
    assert not LegalChatFlow._check_template(f"{DISCLAIMER} {REFUSAL_MESSAGE}")
    assert not LegalChatFlow._check_template(f"Sure! {REFUSAL_MESSAGE}")
