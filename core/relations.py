"""
Declarative descriptions of the citation relations the engine can query.

Each relation is plain data: the node labels and relationship type of one
directed traversal, which end of it is returned, whether the returned entity
has an optional display name, and which fields a search term is matched
against. A single generic planner (core.query_builder) turns any descriptor
into Cypher, so adding a relation never means writing new query text.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.config import get_settings
from core.exceptions import QueryPlanError, UnknownRelationError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Display names live on a separate Name node
NAME_LABEL = "Name"
NAME_RELATIONSHIP = "IS_NAMED"
NAME_PROPERTY = "short"


class FieldOwner(str, Enum):
    """Which matched node a search field is read from."""
    ENTITY = "entity"
    NAME = "name"


@dataclass(frozen=True)
class SearchField:
    """One property taking part in keyword matching."""

    prop: str
    owner: FieldOwner = FieldOwner.ENTITY

    @classmethod
    def of_name(cls, prop: str = NAME_PROPERTY) -> "SearchField":
        return cls(prop=prop, owner=FieldOwner.NAME)


@dataclass(frozen=True)
class RelationDescriptor:
    """
    One directed relation between the anchor article and the result entities.

    Attributes:
        name: Registry key, also used as the logging operation name.
        result_label: Label of the nodes returned by the query.
        relationship: Relationship type connecting result and anchor.
        anchor_label: Label of the node identified by the caller's id.
        result_is_source: True when the edge points from result to anchor.
        search_fields: Fields matched against the search term.
        named: Whether results carry an optional IS_NAMED display name.
        name_key: Key under which the display name is projected and which
            the merge step sorts on.
        index: Search index collection used for enrichment; None skips
            enrichment and merging. The registered relations read
            ARTICLES_INDEX and CASES_INDEX once, when this module is
            imported, so invalid settings fail the import.
        order_by: Numeric result property ordering a page, descending.
        anchor_key: Anchor property matched against the caller's id.
    """

    name: str
    result_label: str
    relationship: str
    anchor_label: str = "Article"
    result_is_source: bool = True
    search_fields: tuple[SearchField, ...] = ()
    named: bool = True
    name_key: str = "name"
    index: Optional[str] = None
    order_by: Optional[str] = "citing_cases"
    anchor_key: str = "number"

    def __post_init__(self) -> None:
        identifiers = [
            self.result_label,
            self.relationship,
            self.anchor_label,
            self.name_key,
            self.anchor_key,
            *(field.prop for field in self.search_fields),
        ]
        if self.order_by is not None:
            identifiers.append(self.order_by)

        invalid = [value for value in identifiers if not _IDENTIFIER.match(value)]
        if invalid:
            raise QueryPlanError(
                message=f"Relation '{self.name}' uses invalid Cypher identifiers",
                details={"relation": self.name, "identifiers": invalid},
            )

        if not self.named and any(f.owner is FieldOwner.NAME for f in self.search_fields):
            raise QueryPlanError(
                message=f"Relation '{self.name}' searches a name it never matches",
                details={"relation": self.name},
            )

    @property
    def enriched(self) -> bool:
        return self.index is not None


# =============================================================================
# Registered relations
# =============================================================================

_settings = get_settings()

_ARTICLE_FIELDS = (
    SearchField.of_name(),
    SearchField("number"),
    SearchField("text"),
)

CITED_BY = RelationDescriptor(
    name="cited_by",
    result_label="Article",
    relationship="CITES",
    result_is_source=True,
    search_fields=_ARTICLE_FIELDS,
    index=_settings.ARTICLES_INDEX,
)

CITING = RelationDescriptor(
    name="citing",
    result_label="Article",
    relationship="CITES",
    result_is_source=False,
    search_fields=_ARTICLE_FIELDS,
    index=_settings.ARTICLES_INDEX,
)

CASES_CITING_ARTICLE = RelationDescriptor(
    name="cases_citing_article",
    result_label="Case",
    relationship="REFERS_TO",
    result_is_source=True,
    search_fields=(
        SearchField.of_name(),
        SearchField("number"),
        SearchField("judgment"),
        SearchField("facts"),
        SearchField("reasoning"),
        SearchField("headnotes"),
        SearchField("year"),
        SearchField("decision_type"),
    ),
    name_key="caseName",
    index=_settings.CASES_INDEX,
)

REFERENCES_MENTIONING_ARTICLE = RelationDescriptor(
    name="references_mentioning_article",
    result_label="Reference",
    relationship="MENTIONS",
    result_is_source=True,
    search_fields=(
        SearchField("context"),
        SearchField("text"),
    ),
    named=False,
    order_by=None,
)

RELATIONS: dict[str, RelationDescriptor] = {
    relation.name: relation
    for relation in (
        CITED_BY,
        CITING,
        CASES_CITING_ARTICLE,
        REFERENCES_MENTIONING_ARTICLE,
    )
}


def get_relation(name: str) -> RelationDescriptor:
    """
    Look up a registered relation by name.

    Raises:
        UnknownRelationError: If no relation is registered under the name.
    """
    try:
        return RELATIONS[name]
    except KeyError:
        raise UnknownRelationError(
            message=f"Unknown citation relation: {name}",
            details={"relation": name, "available": sorted(RELATIONS)},
        ) from None
