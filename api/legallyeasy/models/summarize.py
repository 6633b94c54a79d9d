"""
Pydantic models for the document summarization contracts.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from legallyeasy.models.documents import DocumentReference


class SummarizeDocumentRequest(BaseModel):
    """Request body for the POST /summarize endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    document_data_uri: str | None = Field(
        None,
        alias="documentDataUri",
        description="Document as data:<mimetype>;base64,<payload>",
    )
    document_name: str | None = Field(
        None, alias="documentName", description="Filename of the document"
    )


class SummarizeRequest(BaseModel):
    """A validated summarization request."""

    model_config = ConfigDict(frozen=True)

    document: DocumentReference


class SummarizeResult(BaseModel):
    """Response body from the POST /summarize endpoint."""

    summary: str = Field(..., description="A concise summary of the document.")

    @field_validator("summary")
    @classmethod
    def _summary_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("summary must be a non-empty string")
        return value
