"""Argument models for the pdfinspect tools."""

from __future__ import annotations

from typing import List, Optional, TypeVar, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from pdfinspect.errors import InvalidInput
from pdfinspect.search.engine import MAX_CONTEXT_WORDS, MAX_DEPTH

ModelT = TypeVar("ModelT", bound=BaseModel)

_HTTP_URL = TypeAdapter(HttpUrl)


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class PdfSource(_StrictModel):
    path: Optional[str] = Field(None, min_length=1, description="Relative path to the local PDF file.")
    url: Optional[str] = Field(None, min_length=1, description="URL of the PDF file.")

    @field_validator("url")
    @classmethod
    def _http_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            _HTTP_URL.validate_python(value)
        except ValidationError as exc:
            raise ValueError(f"url must be an http(s) URL with a host: {exc.errors()[0]['msg']}") from exc
        return value

    @model_validator(mode="after")
    def _exactly_one_location(self) -> "PdfSource":
        if bool(self.path) == bool(self.url):
            raise ValueError("Source must have either 'path' or 'url', but not both.")
        return self

    @property
    def description(self) -> str:
        return self.path or self.url or "unknown source"


class ReadSource(PdfSource):
    pages: Optional[Union[str, List[int]]] = Field(
        None,
        description="Pages to extract: a list of 1-based page numbers or a string like '1-3,5'.",
    )

    @model_validator(mode="after")
    def _non_empty_pages(self) -> "ReadSource":
        if isinstance(self.pages, list) and not self.pages:
            raise ValueError("pages must not be empty")
        return self


class ReadPdfArgs(_StrictModel):
    sources: List[ReadSource] = Field(..., min_length=1, description="PDF sources to read.")
    include_full_text: bool = Field(False, description="Include the text of all selected pages.")
    include_metadata: bool = Field(True, description="Include document metadata.")
    include_page_count: bool = Field(True, description="Include the total page count.")


class GetPdfTocArgs(_StrictModel):
    source: PdfSource = Field(..., description="The PDF source to extract table of contents from.")
    max_depth: int = Field(5, ge=1, le=10, description="Maximum depth of outline items to extract.")


class SearchPdfTextArgs(_StrictModel):
    source: PdfSource = Field(..., description="The PDF source to search within.")
    query: str = Field(..., min_length=1, description="The text to search for in the PDF.")
    depth: int = Field(
        0,
        ge=0,
        le=MAX_DEPTH,
        description=(
            "Context depth: 0=just the word+surrounding text, 1=current block, "
            "2=current section, 3=current chapter, 4=current part, 5=entire page."
        ),
    )
    max_results: int = Field(20, ge=1, le=100, description="Maximum number of results to return.")
    page: Optional[int] = Field(
        None, gt=0, description="Specific page to search (1-based). If not provided, searches all pages."
    )
    case_sensitive: bool = Field(False, description="Whether to perform a case-sensitive search.")
    context_words: int = Field(
        5,
        ge=0,
        le=MAX_CONTEXT_WORDS,
        description="Number of surrounding words to include when depth=0.",
    )


def parse_args(model: type[ModelT], args: object) -> ModelT:
    """Validate ``args`` against ``model``, raising ``InvalidInput`` on failure."""
    try:
        return model.model_validate(args)
    except ValidationError as exc:
        details = ", ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'arguments'} ({error['msg']})"
            for error in exc.errors()
        )
        raise InvalidInput(f"Invalid arguments: {details}") from exc
