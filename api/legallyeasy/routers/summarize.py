"""
Summarize router — POST /summarize endpoint.
"""

from fastapi import APIRouter, Depends, Request

from legallyeasy.core.config import Settings, get_settings
from legallyeasy.models.summarize import SummarizeDocumentRequest, SummarizeResult
from legallyeasy.services.summarize import SummarizationFlow
from legallyeasy.services.uploads import check_document_size

router = APIRouter(tags=["summarize"])


def get_summarization_flow(request: Request) -> SummarizationFlow:
    return request.app.state.summarization_flow


@router.post("/summarize", response_model=SummarizeResult)
async def summarize(
    request: SummarizeDocumentRequest,
    flow: SummarizationFlow = Depends(get_summarization_flow),
    settings: Settings = Depends(get_settings),
) -> SummarizeResult:
    """Summarize an uploaded document passed as a data URI."""
    check_document_size(request.document_data_uri, settings.max_document_bytes)
    return await flow.summarize_document(
        document_data_uri=request.document_data_uri,
        document_name=request.document_name,
    )
