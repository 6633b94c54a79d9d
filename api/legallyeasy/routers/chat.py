"""
Chat router — POST /chat endpoint.

Receives a legal question with an optional inline document and returns
the assistant's answer.
"""

from fastapi import APIRouter, Depends, Request

from legallyeasy.core.config import Settings, get_settings
from legallyeasy.models.chat import ChatAnswer, LegalChatRequest
from legallyeasy.services.legal_chat import LegalChatFlow
from legallyeasy.services.uploads import check_document_size

router = APIRouter(tags=["chat"])


def get_legal_chat_flow(request: Request) -> LegalChatFlow:
    """
    Dependency injection for the legal chat flow.
    Initialized once in main.py and stored in app.state.
    """
    return request.app.state.legal_chat_flow


@router.post("/chat", response_model=ChatAnswer)
async def chat(
    request: LegalChatRequest,
    flow: LegalChatFlow = Depends(get_legal_chat_flow),
    settings: Settings = Depends(get_settings),
) -> ChatAnswer:
    """
    Ask LegallyEasy AI a question.

    Non-legal questions receive a fixed refusal; legal answers start with
    a fixed disclaimer. Each call is independent: no history is kept.
    """
    check_document_size(request.document_data_uri, settings.max_document_bytes)
    return await flow.legal_chat(
        query=request.query,
        document_data_uri=request.document_data_uri,
        document_name=request.document_name,
    )
