"""Pydantic schemas for citation query input and output."""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from core.config import get_settings


class CitationFilter(BaseModel):
    """Filter for one paginated citation query."""

    subject_id: str = Field(
        ...,
        description="Citation number of the article the query is anchored on",
        min_length=1,
        examples=["5", "302"],
    )
    search_term: Optional[str] = Field(
        default=None,
        description="Optional case-insensitive keyword matched against the relation's search fields",
        examples=["murder", "alpha"],
    )
    skip: int = Field(
        default=0,
        description="Number of graph results to skip",
        ge=0,
        examples=[0, 20],
    )
    limit: int = Field(
        default_factory=lambda: get_settings().DEFAULT_PAGE_LIMIT,
        description="Maximum number of graph results in the page (DEFAULT_PAGE_LIMIT when omitted)",
        ge=0,
        examples=[10, 50],
    )

    @field_validator("search_term")
    @classmethod
    def blank_search_term_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty or whitespace-only term as no search."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    class Config:
        """Pydantic model configuration."""

        json_schema_extra = {
            "example": {
                "subject_id": "5",
                "search_term": "alpha",
                "skip": 0,
                "limit": 10,
            }
        }


class CitationPage(BaseModel):
    """
    One page of citation results.

    ``total`` is counted over graph entities while ``items`` holds the search
    index documents matched for the page, so the two may differ.
    """

    items: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Merged documents for the requested page",
    )
    total: int = Field(
        default=0,
        description="Number of distinct graph entities matching the filter",
        ge=0,
    )

    class Config:
        """Pydantic model configuration."""

        json_schema_extra = {
            "example": {
                "items": [
                    {"number": "1", "name": "Alpha", "text": "Article 1 ..."},
                    {"number": "2", "text": "Article 2 ..."},
                ],
                "total": 2,
            }
        }
