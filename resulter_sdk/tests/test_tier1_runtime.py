"""Tests for tier1_runtime modules."""
from __future__ import annotations

import json
from dataclasses import dataclass

import pytest
from pydantic import BaseModel

from resulter_sdk.tier0_core.config import _reset_config
from resulter_sdk.tier0_core.envelope import Envelope
from resulter_sdk.tier0_core.errors import NotFoundError, ValidationError
from resulter_sdk.tier0_core.http import SERVER_ERROR_TYPE_URI, type_uri_for
from resulter_sdk.tier0_core.identity import IdentityError, IdentityResult
from resulter_sdk.tier0_core.problem import Problem
from resulter_sdk.tier0_core.redact import REDACTED
from resulter_sdk.tier1_runtime import error_dicts
from resulter_sdk.tier1_runtime.context import RequestContext, get_context, new_context, set_context
from resulter_sdk.tier1_runtime.error_dicts import ValidationFailure
from resulter_sdk.tier1_runtime.normalize import (
    STACK_TRACE_KEY,
    add_from_exception,
    add_from_identity_result,
    add_from_key_values,
    add_from_member_validation,
    add_from_validation,
    with_custom_problem,
    with_default_problem,
)
from resulter_sdk.tier1_runtime.render import PROBLEM_JSON, HttpResponse, render, render_problem
from resulter_sdk.tier1_runtime.serialize import envelope_to_dict, serialize, serialize_exception
from resulter_sdk.tier1_runtime.validate import validate_input, validate_or_raise


class PaymentError(Exception):
    def __init__(self, message: str, order_id: str) -> None:
        super().__init__(message)
        self.order_id = order_id
        self.amount = 12.5
        self.password = "hunter2"
        self.retry = None
        self._internal = "hidden"


class Unprintable:
    def __str__(self) -> str:
        raise RuntimeError("no str for you")


class BrokenStrError(Exception):
    def __init__(self, order_id: str) -> None:
        super().__init__(order_id)
        self.order_id = order_id

    def __str__(self) -> str:
        raise RuntimeError("cannot describe")


class FlakyFieldsError(Exception):
    def problem_fields(self):
        yield "good", 1
        yield "bad", Unprintable()
        yield "also_good", "yes"
        raise RuntimeError("fields went away")


# ── context ────────────────────────────────────────────────────────────────

class TestContext:
    def test_no_context_outside_request(self):
        assert get_context() is None

    def test_set_and_get_context(self):
        set_context(RequestContext(request_id="req-abc", path="/users"))
        ctx = get_context()
        assert ctx.request_id == "req-abc"
        assert ctx.path == "/users"

    def test_context_defaults(self):
        assert RequestContext().request_id is not None


# ── default / custom problem ───────────────────────────────────────────────

class TestDefaultProblem:
    def test_seeds_from_envelope_status(self):
        env = with_default_problem(Envelope(succeeded=False, status_code=404))
        assert env.problem.status == 404
        assert env.problem.type == type_uri_for(404)
        assert env.problem.detail == "A problem occurred (404 Not Found)."

    def test_defaults_to_400_and_backfills_envelope(self):
        env = with_default_problem(Envelope(succeeded=False))
        assert env.status_code == 400
        assert env.problem.status == 400

    def test_replaces_existing_problem(self):
        env = Envelope.failure().add_from_key_values("a", "b")
        env.with_default_problem()
        assert env.problem.extensions == {}


class TestCustomProblem:
    def test_overwrites_given_fields_only(self):
        env = with_custom_problem(Envelope.failure(), title="Custom", instance="/x")
        assert env.problem.title == "Custom"
        assert env.problem.instance == "/x"
        assert env.problem.type == type_uri_for(400)
        assert env.problem.detail == "A problem occurred (400 Bad Request)."

    def test_extensions_are_add_if_absent(self):
        env = Envelope.failure().with_custom_problem(extensions={"a": [1]})
        env.with_custom_problem(extensions={"a": [2], "b": [3]})
        assert env.problem.extensions == {"a": [1], "b": [3]}

    def test_top_level_fields_are_last_write_wins(self):
        env = Envelope.failure().with_custom_problem(title="first").with_custom_problem(title="second")
        assert env.problem.title == "second"

    def test_problem_status_does_not_override_envelope_status(self):
        env = Envelope.failure().with_custom_problem(status=409)
        assert env.problem.status == 409
        assert env.status_code == 400

    def test_initializes_problem_on_success_envelope(self):
        env = Envelope.success("ok").with_custom_problem(detail="partial")
        assert env.problem.status == 200
        assert env.problem.detail == "partial"


# ── key / value pairs ──────────────────────────────────────────────────────

class TestKeyValues:
    def test_single_key_single_value(self):
        env = add_from_key_values(Envelope.failure(), "Email", "Email is required.")
        assert env.problem.extensions == {"Email": ["Email is required."]}

    def test_single_key_many_values(self):
        env = Envelope.failure().add_from_key_values("Password", ["Too short.", "No digit."])
        assert env.problem.extensions == {"Password": ["Too short.", "No digit."]}

    def test_many_keys_shared_value(self):
        env = Envelope.failure().add_from_key_values(["Email", "Name"], "Required.")
        assert env.problem.extensions == {"Email": ["Required."], "Name": ["Required."]}

    def test_parallel_lists_are_zipped(self):
        env = Envelope.failure().add_from_key_values(["Email", "Name"], ["Bad.", "Empty."])
        assert env.problem.extensions == {"Email": ["Bad."], "Name": ["Empty."]}

    def test_scalar_values_are_stringified(self):
        env = Envelope.failure().add_from_key_values("Age", 5)
        assert env.problem.extensions == {"Age": ["5"]}

        env = Envelope.failure().add_from_key_values(["Age", "Height"], 0)
        assert env.problem.extensions == {"Age": ["0"], "Height": ["0"]}

    def test_mismatched_lists_raise(self):
        with pytest.raises(ValueError, match="same length"):
            Envelope.failure().add_from_key_values(["a", "b"], ["only one"])

    def test_first_call_for_a_key_wins_across_chain(self):
        env = (
            Envelope.failure()
            .add_from_key_values("Email", "first")
            .add_from_key_values(["Email", "Name"], "second")
            .add_from_key_values("Email", ["third"])
        )
        assert env.problem.extensions == {"Email": ["first"], "Name": ["second"]}

    def test_auto_initializes_problem(self):
        env = Envelope(succeeded=False).add_from_key_values("k", "v")
        assert env.status_code == 400
        assert env.problem.status == 400


# ── validation results ─────────────────────────────────────────────────────

class TestValidation:
    def test_last_path_segment_is_key_and_first_message_wins(self):
        env = add_from_validation(
            Envelope.failure(),
            [("user.email", "required"), ("user.email", "invalid")],
        )
        assert env.problem.extensions == {"email": ["required"]}
        assert env.problem.title == "One or more validation errors occurred."

    def test_accepts_validation_failure_objects(self):
        failures = [ValidationFailure("address.city", "required"), ValidationFailure("zip", "bad")]
        env = Envelope.failure().add_from_validation(failures)
        assert env.problem.extensions == {"city": ["required"], "zip": ["bad"]}

    def test_repeated_calls_do_not_append(self):
        env = Envelope.failure().add_from_validation([("email", "required")])
        env.add_from_validation([("email", "invalid"), ("name", "empty")])
        assert env.problem.extensions == {"email": ["required"], "name": ["empty"]}

    def test_accepts_pydantic_error(self):
        class Address(BaseModel):
            city: str

        class Person(BaseModel):
            name: str
            address: Address

        try:
            Person.model_validate({"address": {}})
        except Exception as exc:
            env = Envelope.failure().add_from_validation(exc)
        assert set(env.problem.extensions) == {"name", "city"}

    def test_member_validation_keys_by_message(self):
        env = add_from_member_validation(Envelope.failure(), "Dates overlap.", ["start", "end"])
        assert env.problem.extensions == {"Dates overlap.": ["start", "end"]}

    def test_member_validation_default_message(self):
        env = Envelope.failure().add_from_member_validation(None, ["start"])
        assert env.problem.extensions == {"One or more validation errors occurred.": ["start"]}


# ── identity results ───────────────────────────────────────────────────────

class TestIdentityResult:
    def test_codes_become_keys(self):
        result = IdentityResult.failed(IdentityError("DuplicateEmail", "Email taken"))
        env = add_from_identity_result(Envelope.failure(), result)
        assert env.problem.extensions == {"DuplicateEmail": ["Email taken"]}
        assert env.problem.status == 400
        assert env.status_code == 400

    def test_accepts_tuples_and_keeps_first(self):
        env = Envelope.failure().add_from_identity_result([
            ("PasswordTooShort", "At least 8 characters."),
            ("PasswordTooShort", "Duplicate."),
        ])
        assert env.problem.extensions == {"PasswordTooShort": ["At least 8 characters."]}

    def test_accepts_provider_error_objects(self):
        @dataclass
        class ProviderError:
            code: str
            description: str

        env = Envelope.failure().add_from_identity_result([ProviderError("Locked", "Account locked.")])
        assert env.problem.extensions == {"Locked": ["Account locked."]}


# ── exceptions ─────────────────────────────────────────────────────────────

class TestException:
    def test_dumps_public_fields(self):
        env = add_from_exception(Envelope.failure(), PaymentError("card declined", "o_1"))
        ext = env.problem.extensions
        assert ext["type"] == ["PaymentError"]
        assert ext["message"] == ["card declined"]
        assert ext["order_id"] == ["o_1"]
        assert ext["amount"] == ["12.5"]
        assert "retry" not in ext
        assert "_internal" not in ext

    def test_redacts_sensitive_fields(self):
        env = Envelope.failure().add_from_exception(PaymentError("card declined", "o_1"))
        assert env.problem.extensions["password"] == [REDACTED]
        assert "hunter2" not in env.problem.detail

    def test_sets_server_error_fields(self):
        env = Envelope.failure().add_from_exception(KeyError("sku"))
        problem = env.problem
        assert problem.type == SERVER_ERROR_TYPE_URI
        assert problem.title == "An exception was thrown."
        assert json.loads(problem.detail)["type"] == "KeyError"
        assert problem.status == 400

    def test_defaults_to_500_without_status(self):
        env = Envelope(succeeded=False).add_from_exception(RuntimeError("boom"))
        assert env.status_code == 500
        assert env.problem.status == 500

    def test_instance_from_argument_then_context(self):
        env = Envelope.failure().add_from_exception(RuntimeError("x"), request_path="/orders")
        assert env.problem.instance == "/orders"

        new_context(path="/ctx")
        env = Envelope.failure().add_from_exception(RuntimeError("x"))
        assert env.problem.instance == "/ctx"

    def test_instance_is_never_the_stack_trace(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError as exc:
            env = Envelope.failure().add_from_exception(exc)
        assert env.problem.instance is None
        assert STACK_TRACE_KEY not in env.problem.extensions

    def test_stack_trace_under_distinct_key_when_enabled(self, monkeypatch):
        monkeypatch.setenv("RESULTER_EXPOSE_STACK_TRACE", "true")
        _reset_config()
        try:
            raise RuntimeError("boom")
        except RuntimeError as exc:
            env = Envelope.failure().add_from_exception(exc)
        assert "Traceback" in env.problem.extensions[STACK_TRACE_KEY][0]
        assert env.problem.instance is None

    def test_unreadable_fields_are_omitted(self):
        env = Envelope.failure().add_from_exception(FlakyFieldsError())
        assert env.problem.extensions == {"good": ["1"], "also_good": ["yes"]}

    def test_failing_str_omits_only_the_message(self):
        env = Envelope.failure().add_from_exception(BrokenStrError("o_1"))
        ext = env.problem.extensions
        assert "message" not in ext
        assert ext["type"] == ["BrokenStrError"]
        assert ext["order_id"] == ["o_1"]
        assert env.problem.detail

    def test_taxonomy_errors_use_problem_fields(self):
        env = Envelope.failure(status_code=404).add_from_exception(
            NotFoundError(user_message="User missing", user_id="u_1")
        )
        assert env.problem.extensions == {
            "code": ["not_found"],
            "message": ["User missing"],
            "user_id": ["u_1"],
        }

    def test_extensions_accumulate_with_earlier_calls(self):
        env = (
            Envelope.failure()
            .add_from_key_values("message", "kept")
            .add_from_exception(RuntimeError("dropped"))
        )
        assert env.problem.extensions["message"] == ["kept"]
        assert env.problem.extensions["type"] == ["RuntimeError"]

    def test_serialize_exception_includes_cause(self):
        try:
            try:
                raise KeyError("inner")
            except KeyError as inner:
                raise RuntimeError("outer") from inner
        except RuntimeError as exc:
            described = json.loads(serialize_exception(exc, []))
        assert described["type"] == "RuntimeError"
        assert described["cause"]["type"] == "KeyError"


# ── error dictionaries ─────────────────────────────────────────────────────

class TestErrorDicts:
    def test_key_value_errors(self):
        assert error_dicts.key_value_errors(["a", "b"], "x") == {"a": ["x"], "b": ["x"]}

    def test_validation_errors(self):
        errors = error_dicts.validation_errors([("order.lines.0.sku", "unknown")])
        assert errors == {"sku": ["unknown"]}

    def test_exception_errors(self):
        assert error_dicts.exception_errors(ValueError("bad"))["message"] == ["bad"]


# ── validate ───────────────────────────────────────────────────────────────

class UserInput(BaseModel):
    name: str
    age: int


class TestValidate:
    def test_valid_input_returns_success(self):
        env = validate_input(UserInput, {"name": "Alice", "age": 30})
        assert env.succeeded is True
        assert env.data.name == "Alice"

    def test_invalid_input_returns_failure(self):
        env = validate_input(UserInput, {"age": "not-a-number"})
        assert env.succeeded is False
        assert env.status_code == 400
        assert set(env.problem.extensions) == {"name", "age"}

    def test_status_code_override(self):
        assert validate_input(UserInput, {}, status_code=422).problem.status == 422

    def test_validate_or_raise(self):
        with pytest.raises(ValidationError) as info:
            validate_or_raise(UserInput, {"name": "Alice"})
        assert "age" in info.value.fields


# ── serialize ──────────────────────────────────────────────────────────────

class TestSerialize:
    def test_envelope_shape(self):
        d = envelope_to_dict(Envelope.success({"id": "1"}))
        assert d == {"succeeded": True, "statusCode": 200, "data": {"id": "1"}, "problemDetails": None}

    def test_pydantic_payload(self):
        body = json.loads(serialize(Envelope.success(UserInput(name="Bob", age=4))))
        assert body["data"] == {"name": "Bob", "age": 4}

    def test_unsupported_format(self):
        with pytest.raises(ValueError, match="Unsupported"):
            serialize(Envelope.success(None), format="xml")


# ── render ─────────────────────────────────────────────────────────────────

class TestRender:
    def test_end_to_end_failure(self, signup_failure):
        response = render(signup_failure)
        body = json.loads(response.body)
        assert response.status_code == 400
        assert response.media_type == "application/json"
        assert body["statusCode"] == 400
        assert body["succeeded"] is False
        assert body["data"] is None
        assert body["problemDetails"]["extensions"] == {
            "Email": ["Email is required."],
            "Password": ["Too short."],
        }

    def test_success(self):
        response = render(Envelope.success({"id": 7}, 201))
        assert response.status_code == 201
        assert json.loads(response.body)["data"] == {"id": 7}

    def test_status_override_syncs_problem(self, signup_failure):
        response = render(signup_failure, status_code=422)
        assert response.status_code == 422
        assert signup_failure.status_code == 422
        assert json.loads(response.body)["problemDetails"]["status"] == 422

    def test_envelope_status_wins_over_problem_status(self):
        env = Envelope(succeeded=False, status_code=409, problem=Problem(status=400))
        response = render(env)
        assert response.status_code == 409
        assert env.problem.status == 409

    def test_missing_status_defaults_by_outcome(self):
        assert render(Envelope(succeeded=True)).status_code == 200
        assert render(Envelope(succeeded=False)).status_code == 400

    def test_instance_from_request_path(self, signup_failure):
        body = json.loads(render(signup_failure, request_path="/signup").body)
        assert body["problemDetails"]["instance"] == "/signup"

    def test_render_problem_failure(self, signup_failure):
        response = render_problem(signup_failure)
        body = json.loads(response.body)
        assert response.media_type == PROBLEM_JSON
        assert body["status"] == 400
        assert body["extensions"]["Password"] == ["Too short."]

    def test_render_problem_success_returns_data(self):
        response = render_problem(Envelope.success({"id": 1}))
        assert json.loads(response.body) == {"id": 1}

    def test_render_problem_no_content(self):
        assert render_problem(Envelope.success(None, 204)).body == b""

    def test_wsgi_write(self):
        calls = []
        body = HttpResponse(status_code=404, body=b"{}").wsgi(lambda status, headers: calls.append((status, headers)))
        assert body == [b"{}"]
        assert calls[0][0] == "404 Not Found"
        assert ("content-type", "application/json") in calls[0][1]
