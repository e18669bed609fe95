# =============================================================================
# core/shaping.py  -  Request Shaper (ValidatedRequest → RemoteQuerySpec)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Maps a validated call onto a concrete OpenFEC resource path and query
#   parameter bag.  Twelve operations differ only in data (path, sort field,
#   page size, renamed fields), so they are described by one table of
#   ShapeRules and shaped by one function.
#
# POLICIES APPLIED BY shape_request():
#   1. Identifiers named in the path template ({candidate_id}, ...) are
#      substituted into the path and removed from the query string.
#   2. sort="desc" becomes "-<sort field>"; "asc" or no sort becomes
#      "<sort field>".  The field is fixed per operation.
#   3. List operations send sort_hide_null=true and a fixed per_page.
#      Only one page is ever requested.
#   4. Array fields (form_type, finding_types) are passed through as-is;
#      httpx sends them as repeated keys (form_type=F3&form_type=F3P).
#   5. Renames translate tool argument names to OpenFEC names.
#   6. A rule may declare a derived lookup: the shaped query then carries
#      the lookup key and the dispatcher resolves it before sending.
# =============================================================================

from dataclasses import dataclass, field
from string import Formatter
from typing import Any, Mapping, Optional
from urllib.parse import quote

from core.models import RemoteQuerySpec, ValidatedRequest

LIST_PAGE_SIZE = 20
CONTRIBUTIONS_PAGE_SIZE = 10


@dataclass(frozen=True)
class DerivedLookup:
    """``target`` must be derived from the ``source`` argument before sending."""

    target: str
    source: str


@dataclass(frozen=True)
class ShapeRule:
    path: str
    sort_field: Optional[str] = None
    page_size: Optional[int] = None
    hide_null: bool = False
    renames: Mapping[str, str] = field(default_factory=dict)
    lookup: Optional[DerivedLookup] = None

    @property
    def path_fields(self) -> tuple[str, ...]:
        return tuple(name for _, name, _, _ in Formatter().parse(self.path) if name)


def _list_rule(path: str, sort_field: Optional[str] = None, **kwargs: Any) -> ShapeRule:
    kwargs.setdefault("page_size", LIST_PAGE_SIZE)
    return ShapeRule(path, sort_field=sort_field, hide_null=True, **kwargs)


# =============================================================================
# One rule per catalog operation
# =============================================================================
SHAPE_RULES: dict[str, ShapeRule] = {
    "get_candidate": ShapeRule("/candidate/{candidate_id}"),
    "get_candidate_financials": ShapeRule("/candidate/{candidate_id}/totals"),
    "search_candidates": ShapeRule("/candidates/search", renames={"name": "q"}),
    "get_committee": ShapeRule("/committee/{committee_id}"),
    "get_candidate_contributions": _list_rule(
        "/schedules/schedule_a/",
        "contribution_receipt_amount",
        page_size=CONTRIBUTIONS_PAGE_SIZE,
        renames={"election_year": "two_year_transaction_period"},
        lookup=DerivedLookup(target="committee_id", source="candidate_id"),
    ),
    "get_filings": _list_rule("/filings", "receipt_date"),
    "get_independent_expenditures": _list_rule("/schedules/schedule_e", "expenditure_amount"),
    "get_electioneering": _list_rule("/electioneering", "disbursement_amount"),
    "get_party_coordinated_expenditures": _list_rule("/schedules/schedule_f", "expenditure_amount"),
    "get_communication_costs": _list_rule("/schedules/schedule_d", "cost"),
    "get_audit_cases": _list_rule("/audit-cases"),
    "get_bulk_downloads": ShapeRule("/download"),
}


def sort_token(sort_field: str, direction: Optional[str]) -> str:
    """'desc' → '-field'; anything else (including None) → 'field'."""
    return f"-{sort_field}" if direction == "desc" else sort_field


def shape_request(request: ValidatedRequest) -> RemoteQuerySpec:
    """Build the outbound query for a validated call.

    Raises:
        KeyError: if the operation has no shaping rule (a catalog/table
            mismatch, never a caller error).
    """
    rule = SHAPE_RULES[request.operation]
    params = dict(request.params)

    path_values = {name: quote(str(params.pop(name)), safe="") for name in rule.path_fields}
    path = rule.path.format(**path_values)

    lookup_key = None
    if rule.lookup is not None:
        lookup_key = params.pop(rule.lookup.source)

    for old, new in rule.renames.items():
        if old in params:
            params[new] = params.pop(old)

    if rule.hide_null:
        params["sort_hide_null"] = True
    if rule.sort_field is not None:
        params["sort"] = sort_token(rule.sort_field, params.pop("sort", None))
    elif "sort" in params:
        del params["sort"]
    if rule.page_size is not None:
        params["per_page"] = rule.page_size

    params = {k: (list(v) if isinstance(v, tuple) else v) for k, v in params.items() if v is not None}
    return RemoteQuerySpec(
        path=path,
        params=params,
        lookup=rule.lookup.target if rule.lookup else None,
        lookup_key=lookup_key,
    )
