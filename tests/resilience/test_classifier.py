"""Tests for transient/permanent failure classification."""

from __future__ import annotations

import pytest

from pgspine.resilience.classifier import (
    MAX_CAUSE_DEPTH,
    TRANSIENT_SQLSTATES,
    ErrorClassification,
    ErrorClassifier,
    FailureClass,
    classify,
)
from pgspine.resilience.failures import FailureKind, RawFailure


def _db(code: str, message: str = "server error", cause: RawFailure | None = None) -> RawFailure:
    return RawFailure(message, FailureKind.DATABASE, code, cause=cause)


class TestTransientTable:
    def test_table_is_exactly_the_eleven_codes(self):
        assert set(TRANSIENT_SQLSTATES) == {
            "08000", "08003", "08006", "08001", "08004",
            "40001", "40P01",
            "53000", "53100", "53200", "53300",
        }

    @pytest.mark.parametrize("code", sorted(TRANSIENT_SQLSTATES))
    def test_every_listed_code_is_transient(self, code):
        result = classify(_db(code))
        assert result.kind is FailureClass.TRANSIENT
        assert result.diagnostic_code == code
        assert result.is_network_level is False

    @pytest.mark.parametrize("code", ["23505", "42601", "42P01", "28P01", "42501", "57014", "XX000"])
    def test_unlisted_codes_are_permanent(self, code):
        result = classify(_db(code))
        assert result.kind is FailureClass.PERMANENT
        assert result.diagnostic_code == code

    def test_lowercase_code_is_normalized(self):
        result = classify(_db("40p01"))
        assert result.is_transient
        assert result.diagnostic_code == "40P01"


class TestNetworkKinds:
    @pytest.mark.parametrize("kind", [FailureKind.SOCKET, FailureKind.IO, FailureKind.TIMEOUT])
    def test_network_level_is_transient(self, kind):
        result = classify(RawFailure("connection reset", kind))
        assert result.is_transient
        assert result.is_network_level is True
        assert result.diagnostic_code is None

    @pytest.mark.parametrize(
        "kind",
        [
            FailureKind.NOT_FOUND,
            FailureKind.INVALID_REQUEST,
            FailureKind.HANDLE_UNUSABLE,
            FailureKind.AUTHORIZATION,
            FailureKind.CONFIGURATION,
            FailureKind.CLIENT,
            FailureKind.UNKNOWN,
        ],
    )
    def test_other_kinds_without_cause_are_permanent(self, kind):
        result = classify(RawFailure("nope", kind))
        assert result.kind is FailureClass.PERMANENT
        assert result.diagnostic_code is None


class TestCauseChain:
    def test_transient_cause_makes_wrapper_transient(self):
        inner = RawFailure("connection refused", FailureKind.SOCKET)
        outer = RawFailure("Failed to establish valid database connection", FailureKind.HANDLE_UNUSABLE, cause=inner)
        assert classify(outer).is_transient

    def test_transitive_through_several_wrappers(self):
        failure = _db("40001")
        for _ in range(5):
            failure = RawFailure("wrapped", FailureKind.CLIENT, cause=failure)
        result = classify(failure)
        assert result.is_transient
        assert result.diagnostic_code == "40001"

    def test_code_on_outer_link_decides_before_cause(self):
        inner = RawFailure("socket closed", FailureKind.SOCKET)
        outer = _db("23505", cause=inner)
        assert classify(outer).kind is FailureClass.PERMANENT

    def test_permanent_when_no_link_is_transient(self):
        inner = RawFailure("bad", FailureKind.UNKNOWN)
        outer = RawFailure("worse", FailureKind.CLIENT, cause=inner)
        assert classify(outer).kind is FailureClass.PERMANENT

    def test_chain_beyond_depth_is_permanent(self):
        failure = RawFailure("deep socket error", FailureKind.SOCKET)
        for _ in range(MAX_CAUSE_DEPTH):
            failure = RawFailure("wrapper", FailureKind.UNKNOWN, cause=failure)
        assert classify(failure).kind is FailureClass.PERMANENT

    def test_chain_at_depth_limit_is_still_inspected(self):
        failure = RawFailure("socket error", FailureKind.SOCKET)
        for _ in range(MAX_CAUSE_DEPTH - 1):
            failure = RawFailure("wrapper", FailureKind.UNKNOWN, cause=failure)
        assert classify(failure).is_transient

    def test_cyclic_chain_terminates_permanent(self):
        a = RawFailure("a", FailureKind.UNKNOWN)
        b = RawFailure("b", FailureKind.UNKNOWN, cause=a)
        # frozen dataclass: build the cycle the way a buggy wrapper could
        object.__setattr__(a, "cause", b)
        assert classify(b).kind is FailureClass.PERMANENT


class TestErrorClassifier:
    def test_custom_tables(self):
        classifier = ErrorClassifier(transient_codes={"57014": "query_canceled"}, network_kinds=frozenset())
        assert classifier.is_transient(_db("57014"))
        assert not classifier.is_transient(_db("40P01"))
        assert not classifier.is_transient(RawFailure("reset", FailureKind.SOCKET))

    def test_rejects_non_positive_depth(self):
        with pytest.raises(ValueError):
            ErrorClassifier(max_depth=0)

    def test_classification_permanent_factory(self):
        result = ErrorClassification.permanent("23505")
        assert result.kind is FailureClass.PERMANENT
        assert result.diagnostic_code == "23505"
        assert result.is_transient is False
