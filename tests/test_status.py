import grpc
import pytest

from netsqlite.status import Code, StatusError


def test_status_error_keeps_code_and_message():
    err = StatusError(Code.INVALID_ARGUMENT, "database_name is required")
    assert err.code is Code.INVALID_ARGUMENT
    assert err.message == "database_name is required"


def test_status_error_string_contains_message_and_code_name():
    err = StatusError(Code.INTERNAL, "failed to created a pool")
    text = str(err)
    assert "failed to created a pool" in text
    assert Code.INTERNAL.name in text


def test_status_error_can_be_raised_and_caught():
    err = StatusError(Code.UNAUTHENTICATED, "bad token")
    assert err.code is Code.UNAUTHENTICATED
    assert err.message == "bad token"
    with pytest.raises(StatusError, match="bad token") as info:
        raise err
    assert info.value.code is Code.UNAUTHENTICATED


def test_status_error_accepts_integer_code():
    err = StatusError(int(Code.NOT_FOUND), "missing")
    assert err.code is Code.NOT_FOUND


@pytest.mark.parametrize("code", list(Code))
def test_code_round_trips_through_grpc_status(code):
    assert Code.from_grpc(code.grpc_status) is code
    assert code.grpc_status.name == code.name


@pytest.mark.parametrize("status", list(grpc.StatusCode))
def test_code_values_match_grpc_status_values(status):
    code = Code.from_grpc(status)
    assert code.value == status.value[0]
    assert code.name == status.name


def test_internal_maps_to_grpc_internal():
    assert Code.from_grpc(grpc.StatusCode.INTERNAL) is Code.INTERNAL
    assert Code.INTERNAL.grpc_status is grpc.StatusCode.INTERNAL