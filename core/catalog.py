# =============================================================================
# core/catalog.py  -  The Operation Catalog (every tool the server offers)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Declares the twelve read-only OpenFEC queries as static
#   OperationDescriptors.  The same table feeds:
#     - the MCP "list tools" reply (descriptor.input_schema())
#     - the argument validator (core/validation.py)
#     - the dispatcher's unknown-tool check
#
# TOOL NAMING CONVENTIONS:
#   - get_*    → Read-only retrieval
#   - search_* → Query with filters
#   There are no write operations.
#
# The descriptions are what the calling LLM reads when deciding which tool
# to call, so they stay short and concrete.
# =============================================================================

from typing import Optional

from core.models import FieldSpec, FieldType, OperationDescriptor

SORT_CHOICES = ("asc", "desc")
OFFICE_CHOICES = ("H", "S", "P")
SUPPORT_OPPOSE_CHOICES = ("S", "O")
BULK_DATA_TYPES = ("contributions", "expenditures", "filings", "committees", "candidates")


def _string(name: str, description: str, required: bool = False) -> FieldSpec:
    return FieldSpec(name, FieldType.STRING, description, required)


def _number(name: str, description: str, required: bool = False) -> FieldSpec:
    return FieldSpec(name, FieldType.NUMBER, description, required)


def _strings(name: str, description: str) -> FieldSpec:
    return FieldSpec(name, FieldType.STRING_ARRAY, description)


def _choice(name: str, description: str, choices: tuple[str, ...], required: bool = False) -> FieldSpec:
    return FieldSpec(name, FieldType.ENUM, description, required, choices)


def _dated_spending_fields(date_label: str, amount_label: str, sort_label: str) -> tuple[FieldSpec, ...]:
    """Field set shared by electioneering, party-coordinated and communication-cost queries."""
    return (
        _string("committee_id", "Optional: FEC committee ID"),
        _string("candidate_id", "Optional: FEC candidate ID"),
        _string("min_date", f"Optional: Minimum {date_label} date (YYYY-MM-DD)"),
        _string("max_date", f"Optional: Maximum {date_label} date (YYYY-MM-DD)"),
        _number("min_amount", f"Optional: Minimum {amount_label} amount"),
        _number("max_amount", f"Optional: Maximum {amount_label} amount"),
        _choice("sort", f"Optional: Sort by {sort_label} amount", SORT_CHOICES),
    )


# =============================================================================
# The catalog itself (order is the order tools are listed to the agent)
# =============================================================================
OPERATIONS: tuple[OperationDescriptor, ...] = (
    OperationDescriptor(
        name="get_candidate",
        description="Get detailed information about a candidate",
        fields=(
            _string("candidate_id", "FEC candidate ID", required=True),
            _number("election_year", "Optional: Filter by election year"),
        ),
    ),
    OperationDescriptor(
        name="get_candidate_financials",
        description="Get financial data for a candidate",
        fields=(
            _string("candidate_id", "FEC candidate ID", required=True),
            _number("election_year", "Election year to get data for", required=True),
        ),
    ),
    OperationDescriptor(
        name="search_candidates",
        description="Search for candidates by name or other criteria",
        fields=(
            _string("name", "Candidate name search string", required=True),
            _string("state", "Optional: Two-letter state code"),
            _choice("office", "Optional: H for House, S for Senate, P for President", OFFICE_CHOICES),
            _number("election_year", "Optional: Filter by election year"),
        ),
    ),
    OperationDescriptor(
        name="get_committee",
        description="Get detailed information about a committee",
        fields=(
            _string("committee_id", "FEC committee ID", required=True),
        ),
    ),
    OperationDescriptor(
        name="get_candidate_contributions",
        description="Get individual contributions for a candidate",
        fields=(
            _string("candidate_id", "FEC candidate ID", required=True),
            _number("election_year", "Election year"),
            _choice(
                "sort",
                "Optional: Sort by contribution_receipt_amount (desc for highest first)",
                SORT_CHOICES,
            ),
        ),
    ),
    OperationDescriptor(
        name="get_filings",
        description="Retrieve official FEC filings with filters",
        fields=(
            _string("committee_id", "Optional: FEC committee ID"),
            _string("candidate_id", "Optional: FEC candidate ID"),
            _strings("form_type", 'Optional: Form types to filter by (e.g., ["F3", "F3P"])'),
            _string("min_receipt_date", "Optional: Minimum receipt date (YYYY-MM-DD)"),
            _string("max_receipt_date", "Optional: Maximum receipt date (YYYY-MM-DD)"),
            _string("state", "Optional: Two-letter state code"),
            _choice("sort", "Optional: Sort by receipt date", SORT_CHOICES),
        ),
    ),
    OperationDescriptor(
        name="get_independent_expenditures",
        description="Get independent expenditures supporting or opposing candidates",
        fields=(
            _string("candidate_id", "Optional: FEC candidate ID"),
            _string("committee_id", "Optional: FEC committee ID"),
            _choice(
                "support_oppose_indicator",
                "Optional: S for supporting or O for opposing",
                SUPPORT_OPPOSE_CHOICES,
            ),
            _string("min_date", "Optional: Minimum expenditure date (YYYY-MM-DD)"),
            _string("max_date", "Optional: Maximum expenditure date (YYYY-MM-DD)"),
            _number("min_amount", "Optional: Minimum expenditure amount"),
            _number("max_amount", "Optional: Maximum expenditure amount"),
            _choice("sort", "Optional: Sort by expenditure amount", SORT_CHOICES),
        ),
    ),
    OperationDescriptor(
        name="get_electioneering",
        description="Get electioneering communications",
        fields=_dated_spending_fields("disbursement", "disbursement", "disbursement"),
    ),
    OperationDescriptor(
        name="get_party_coordinated_expenditures",
        description="Get party coordinated expenditures",
        fields=_dated_spending_fields("expenditure", "expenditure", "expenditure"),
    ),
    OperationDescriptor(
        name="get_communication_costs",
        description="Get corporate/union communication costs",
        fields=_dated_spending_fields("communication", "cost", "cost"),
    ),
    OperationDescriptor(
        name="get_audit_cases",
        description="Get FEC audit cases and findings",
        fields=(
            _string("committee_id", "Optional: FEC committee ID"),
            _string("audit_id", "Optional: Specific audit case ID"),
            _number("audit_year", "Optional: Year of audit"),
            _strings("finding_types", "Optional: Types of findings to filter by"),
        ),
    ),
    OperationDescriptor(
        name="get_bulk_downloads",
        description="Get links to bulk data downloads",
        fields=(
            _choice("data_type", "Type of bulk data to download", BULK_DATA_TYPES, required=True),
            _number("election_year", "Optional: Election year for the data"),
        ),
    ),
)

_BY_NAME: dict[str, OperationDescriptor] = {op.name: op for op in OPERATIONS}
if len(_BY_NAME) != len(OPERATIONS):
    raise RuntimeError("duplicate operation name in catalog")


def get_descriptor(name: str) -> Optional[OperationDescriptor]:
    """Exact, case-sensitive lookup.  None for unknown names."""
    return _BY_NAME.get(name)


def operation_names() -> list[str]:
    return [op.name for op in OPERATIONS]
