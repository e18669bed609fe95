import asyncio

import httpx
import pytest

from conftest import RecordingTransport, body_of, json_response
from core.dispatcher import Dispatcher
from core.errors import (
    AdmissionDenied,
    ErrorKind,
    NoPrincipalCommittee,
    RemoteAPIError,
    UnknownOperation,
    ValidationFailed,
)
from core.models import RemoteResult

CANDIDATE = {"results": [{"candidate_id": "P80001571", "name": "EXAMPLE, CANDIDATE"}]}


def dispatch(dispatcher, name, arguments):
    return asyncio.run(dispatcher.dispatch(name, arguments))


def test_success_returns_the_raw_body(make_dispatcher):
    dispatcher, transport = make_dispatcher({"/candidate/P80001571": json_response(CANDIDATE)})

    result = dispatch(dispatcher, "get_candidate", {"candidate_id": "P80001571"})

    assert result.ok
    assert result.body == CANDIDATE
    assert body_of(result) == CANDIDATE
    assert transport.paths == ["/candidate/P80001571"]


def test_unknown_operation_skips_the_gate(make_dispatcher):
    class SpyBucket:
        calls = []
        available = 1

        def can_admit(self):
            self.calls.append("can_admit")
            return True

        def consume(self):
            self.calls.append("consume")

    dispatcher, transport = make_dispatcher({})
    spy = SpyBucket()
    dispatcher = Dispatcher(dispatcher._client, spy)

    result = dispatch(dispatcher, "delete_everything", {})

    assert isinstance(result.error, UnknownOperation)
    assert result.error.kind is ErrorKind.UNKNOWN_OPERATION
    assert "Unknown tool: delete_everything" in result.error.describe()
    assert spy.calls == []
    assert transport.requests == []


def test_validation_failure_spends_no_token(make_dispatcher):
    dispatcher, transport = make_dispatcher({})
    before = dispatcher.rate_limiter.available

    result = dispatch(dispatcher, "search_candidates", {"name": "Smith", "office": "X"})

    assert isinstance(result.error, ValidationFailed)
    assert result.error.field == "office"
    assert dispatcher.rate_limiter.available == before
    assert transport.requests == []


def test_remote_failure_spends_exactly_one_token(make_dispatcher):
    dispatcher, _ = make_dispatcher({
        "/committee/C00000001": json_response({"message": "Not found"}, status=404),
    })
    before = dispatcher.rate_limiter.available

    result = dispatch(dispatcher, "get_committee", {"committee_id": "C00000001"})

    assert isinstance(result.error, RemoteAPIError)
    assert result.error.describe() == "REMOTE_API_ERROR: OpenFEC API error: Not found"
    assert dispatcher.rate_limiter.available == before - 1


def test_empty_bucket_denies_admission(make_dispatcher):
    dispatcher, transport = make_dispatcher(
        {"/committee/C00000001": json_response({"results": []})}, capacity=2
    )
    for _ in range(2):
        assert dispatch(dispatcher, "get_committee", {"committee_id": "C00000001"}).ok

    result = dispatch(dispatcher, "get_committee", {"committee_id": "C00000001"})

    assert isinstance(result.error, AdmissionDenied)
    assert result.error.kind is ErrorKind.RATE_LIMITED
    assert result.error.message == "Rate limit exceeded. Please try again later."
    assert len(transport.requests) == 2


def test_gate_is_checked_before_validation(make_dispatcher):
    dispatcher, _ = make_dispatcher({}, capacity=1)
    dispatcher.rate_limiter.consume()

    result = dispatch(dispatcher, "get_committee", {})

    assert isinstance(result.error, AdmissionDenied)


def test_bucket_refills_over_time(make_dispatcher, clock):
    dispatcher, _ = make_dispatcher(
        {"/committee/C00000001": json_response({"results": []})}, capacity=1
    )
    assert dispatch(dispatcher, "get_committee", {"committee_id": "C00000001"}).ok
    assert not dispatch(dispatcher, "get_committee", {"committee_id": "C00000001"}).ok

    clock.advance(3600)
    assert dispatch(dispatcher, "get_committee", {"committee_id": "C00000001"}).ok


def test_contributions_resolve_committee_first(make_dispatcher):
    contributions = {"results": [{"contribution_receipt_amount": 3300}]}
    dispatcher, transport = make_dispatcher({
        "/candidate/P80001571/committees": json_response({"results": [{"committee_id": "C00580100"}]}),
        "/schedules/schedule_a/": json_response(contributions),
    })
    before = dispatcher.rate_limiter.available

    result = dispatch(
        dispatcher,
        "get_candidate_contributions",
        {"candidate_id": "P80001571", "election_year": 2024, "sort": "desc"},
    )

    assert result.ok
    assert result.body == contributions
    assert transport.paths == ["/candidate/P80001571/committees", "/schedules/schedule_a/"]
    params = transport.requests[1].url.params
    assert params["committee_id"] == "C00580100"
    assert params["two_year_transaction_period"] == "2024"
    assert params["sort"] == "-contribution_receipt_amount"
    assert params["per_page"] == "10"
    assert "candidate_id" not in params
    # The lookup rides on the outer call's token.
    assert dispatcher.rate_limiter.available == before - 1


def test_contributions_without_principal_committee(make_dispatcher):
    dispatcher, transport = make_dispatcher({
        "/candidate/H0XX00001/committees": json_response({"results": []}),
    })
    before = dispatcher.rate_limiter.available

    result = dispatch(dispatcher, "get_candidate_contributions", {"candidate_id": "H0XX00001"})

    assert isinstance(result.error, NoPrincipalCommittee)
    assert result.error.kind is ErrorKind.NO_PRINCIPAL_COMMITTEE
    assert transport.paths == ["/candidate/H0XX00001/committees"]
    assert dispatcher.rate_limiter.available == before - 1


def test_lookup_transport_failure_is_a_remote_error(make_dispatcher):
    def boom(request):
        raise httpx.ReadTimeout("timed out", request=request)

    dispatcher, transport = make_dispatcher({"/candidate/H0XX00001/committees": boom})

    result = dispatch(dispatcher, "get_candidate_contributions", {"candidate_id": "H0XX00001"})

    assert isinstance(result.error, RemoteAPIError)
    assert transport.paths == ["/candidate/H0XX00001/committees"]


def test_outbound_query_for_independent_expenditures(make_dispatcher):
    dispatcher, transport = make_dispatcher({"/schedules/schedule_e": json_response({"results": []})})

    result = dispatch(
        dispatcher,
        "get_independent_expenditures",
        {"candidate_id": "P80001571", "sort": "desc", "unexpected": "ignored"},
    )

    assert result.ok
    params = transport.requests[0].url.params
    assert params["sort"] == "-expenditure_amount"
    assert params["sort_hide_null"] == "true"
    assert params["per_page"] == "20"
    assert params["api_key"] == "test-key"
    assert "unexpected" not in params


def test_list_operations_mirrors_the_catalog(make_dispatcher):
    dispatcher, _ = make_dispatcher({})
    listed = dispatcher.list_operations()
    assert len(listed) == 12
    name, description, schema = listed[0]
    assert name == "get_candidate"
    assert description
    assert schema["required"] == ["candidate_id"]
    assert dispatcher.descriptor("get_candidate").name == "get_candidate"
    assert dispatcher.descriptor("nope") is None


def test_remote_result_holds_body_or_error():
    with pytest.raises(ValueError):
        RemoteResult("get_candidate", body={"a": 1}, error=RemoteAPIError("x"))
    assert RemoteResult("get_candidate", body={"a": 1}).ok
    assert not RemoteResult("get_candidate", error=RemoteAPIError("x")).ok
