"""
Cypher query planning for citation relations.

Count and page queries for a relation are assembled from one shared prefix
(match pattern, optional name match and search predicate). Only the
projection and pagination differ between them, which keeps the reported
total consistent with the rows a caller can page through.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from core.relations import (
    NAME_LABEL,
    NAME_PROPERTY,
    NAME_RELATIONSHIP,
    FieldOwner,
    RelationDescriptor,
    SearchField,
)
from models.schema import CitationFilter

# Query variable names
SUBJECT_ALIAS = "s"
ANCHOR_ALIAS = "a"
NAME_ALIAS = "n"

# Result column names
ENTITY_COLUMN = "entity"
ID_COLUMN = "elementId"
COUNT_COLUMN = "totalCount"
COUNT_ONLY_COLUMN = "count"


@dataclass(frozen=True)
class QueryPlan:
    """Query text plus the named parameters it is executed with."""

    query: str
    parameters: dict[str, Any] = field(default_factory=dict)


def _field_accessor(search_field: SearchField) -> str:
    alias = NAME_ALIAS if search_field.owner is FieldOwner.NAME else SUBJECT_ALIAS
    return f"{alias}.{search_field.prop}"


def build_search_predicate(
    descriptor: RelationDescriptor,
    search_term: Optional[str],
) -> str:
    """
    Build the WHERE clause matching a search term against a relation's fields.

    A row passes when any declared field contains the term, compared
    case-insensitively. Missing values (an unmatched Name, an absent property)
    are coalesced to an empty string so they simply do not match. The term
    itself is referenced as ``$searchTerm`` and never written into the query.

    Args:
        descriptor: Relation whose search fields are matched.
        search_term: Optional keyword; empty, blank or None disables filtering.

    Returns:
        str: A WHERE clause, or an empty string when no filtering applies.
    """
    if not search_term or not search_term.strip() or not descriptor.search_fields:
        return ""

    comparisons = [
        f"toLower(coalesce(toString({_field_accessor(search_field)}), '')) "
        f"CONTAINS toLower($searchTerm)"
        for search_field in descriptor.search_fields
    ]
    return "WHERE " + "\n   OR ".join(comparisons)


def _match_prefix(descriptor: RelationDescriptor, predicate: str) -> str:
    """Shared MATCH ... WITH ... [WHERE ...] part of every query of a relation."""
    subject = f"({SUBJECT_ALIAS}:{descriptor.result_label})"
    anchor = (
        f"({ANCHOR_ALIAS}:{descriptor.anchor_label} "
        f"{{{descriptor.anchor_key}: $subjectId}})"
    )
    edge = f"-[:{descriptor.relationship}]->"

    if descriptor.result_is_source:
        lines = [f"MATCH {subject}{edge}{anchor}"]
    else:
        lines = [f"MATCH {anchor}{edge}{subject}"]

    if descriptor.named:
        lines.append(
            f"OPTIONAL MATCH ({SUBJECT_ALIAS})-[:{NAME_RELATIONSHIP}]->"
            f"({NAME_ALIAS}:{NAME_LABEL})"
        )
        lines.append(f"WITH {SUBJECT_ALIAS}, {NAME_ALIAS}")
    else:
        lines.append(f"WITH {SUBJECT_ALIAS}")

    if predicate:
        lines.append(predicate)

    return "\n".join(lines)


def build_query_plans(
    descriptor: RelationDescriptor,
    citation_filter: CitationFilter,
) -> tuple[QueryPlan, QueryPlan]:
    """
    Build the count plan and the page plan for one filtered relation query.

    Args:
        descriptor: Relation to traverse.
        citation_filter: Subject id, optional search term and pagination.

    Returns:
        tuple[QueryPlan, QueryPlan]: (count plan, page plan).
    """
    predicate = build_search_predicate(descriptor, citation_filter.search_term)
    prefix = _match_prefix(descriptor, predicate)

    parameters: dict[str, Any] = {
        "subjectId": citation_filter.subject_id,
        "searchTerm": citation_filter.search_term,
    }

    count_plan = QueryPlan(
        query=f"{prefix}\nRETURN count(DISTINCT {SUBJECT_ALIAS}) AS {COUNT_COLUMN}",
        parameters=dict(parameters),
    )

    columns = [f"{SUBJECT_ALIAS} AS {ENTITY_COLUMN}"]
    if descriptor.named:
        columns.append(
            f"{NAME_ALIAS}.{NAME_PROPERTY} AS {descriptor.name_key}"
        )
        columns.append(f"elementId({SUBJECT_ALIAS}) AS {ID_COLUMN}")

    page_lines = [prefix, "RETURN DISTINCT " + ", ".join(columns)]
    if descriptor.order_by:
        page_lines.append(f"ORDER BY {ENTITY_COLUMN}.{descriptor.order_by} DESC")
    page_lines.append("SKIP toInteger($skip) LIMIT toInteger($limit)")

    page_plan = QueryPlan(
        query="\n".join(page_lines),
        parameters={
            **parameters,
            "skip": int(citation_filter.skip),
            "limit": int(citation_filter.limit),
        },
    )

    return count_plan, page_plan


def build_count_only_plan(
    descriptor: RelationDescriptor,
    subject_id: str,
) -> QueryPlan:
    """Count every entity of a relation, without search or pagination."""
    prefix = _match_prefix(descriptor, "")
    return QueryPlan(
        query=f"{prefix}\nRETURN count(DISTINCT {SUBJECT_ALIAS}) AS {COUNT_ONLY_COLUMN}",
        parameters={"subjectId": subject_id},
    )
