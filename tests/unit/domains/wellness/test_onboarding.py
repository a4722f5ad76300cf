"""Tests for onboarding/auth orchestration."""

from __future__ import annotations

import asyncio

import pytest
from conftest import FakeAuthService, RecordingProfileStore, auth_failure, make_profile

from rumo.core.auth.base import AuthError, AuthErrorKind
from rumo.domains.wellness.connectors import StoreError
from rumo.domains.wellness.domain_logic.onboarding import (
    MESSAGE_ALREADY_REGISTERED,
    MESSAGE_INVALID_CREDENTIALS,
    MESSAGE_LOGIN_SUCCESS,
    MESSAGE_PROFILE_SAVED,
    MESSAGE_SIGNUP_SUCCESS,
    MESSAGE_UNEXPECTED,
    CollectingNotifier,
    Credentials,
    OnboardingOrchestrator,
    classify_auth_error,
)
from rumo.domains.wellness.domain_logic.user_context import MissingContextError, UserContext


def _run(coro):
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _orchestrator(store, auth):
    ctx = UserContext(store)
    _run(ctx.open())
    notifier = CollectingNotifier()
    return OnboardingOrchestrator(auth, ctx, notifier), notifier


class TestClassifyAuthError:
    def test_typed_kind_wins(self):
        error = AuthError("something unrelated", AuthErrorKind.INVALID_CREDENTIALS)
        assert classify_auth_error(error) is AuthErrorKind.INVALID_CREDENTIALS

    def test_message_fallback_already_registered(self):
        assert classify_auth_error(AuthError("User already registered")) is AuthErrorKind.ALREADY_REGISTERED

    def test_message_fallback_invalid_credentials(self):
        assert classify_auth_error(AuthError("Invalid login credentials")) is AuthErrorKind.INVALID_CREDENTIALS

    def test_unknown_message_is_other(self):
        assert classify_auth_error(AuthError("rate limit exceeded")) is AuthErrorKind.OTHER


class TestCredentials:
    def test_rejects_unknown_mode(self):
        with pytest.raises(ValueError, match="mode"):
            Credentials("a@b.c", "secret", "register")


class TestSignup:
    def test_success_saves_and_notifies_once(self, empty_store):
        auth = FakeAuthService()
        orch, notifier = _orchestrator(empty_store, auth)
        result = _run(orch.complete(
            {"name": "Alice", "rhythm": "daily"},
            Credentials("alice@example.com", "secret1", "signup"),
        ))

        assert auth.calls == [("sign_up", ("alice@example.com", "secret1", "Alice"))]
        assert empty_store.calls_to("complete_onboarding") == [({"name": "Alice", "rhythm": "daily"},)]
        assert result.level == "success"
        assert result.message == MESSAGE_SIGNUP_SUCCESS
        assert notifier.notifications == [result]

    def test_already_registered_stops_before_save(self, empty_store):
        auth = FakeAuthService(sign_up_result=auth_failure("User already registered"))
        orch, notifier = _orchestrator(empty_store, auth)
        result = _run(orch.complete(
            {"name": "Alice"}, Credentials("alice@example.com", "secret1", "signup")
        ))

        assert result.level == "error"
        assert result.message == MESSAGE_ALREADY_REGISTERED
        assert empty_store.calls_to("complete_onboarding") == []
        assert len(notifier.notifications) == 1

    def test_other_failure_includes_detail(self, empty_store):
        auth = FakeAuthService(sign_up_result=auth_failure("Password should be at least 6 characters"))
        orch, notifier = _orchestrator(empty_store, auth)
        result = _run(orch.complete({}, Credentials("a@b.c", "x", "signup")))

        assert result.message == "Erro ao criar conta: Password should be at least 6 characters"
        assert empty_store.write_calls == []
        assert len(notifier.notifications) == 1


class TestLogin:
    def test_name_stripped_before_save(self):
        store = RecordingProfileStore(make_profile(name="Original"), None)
        auth = FakeAuthService()
        orch, notifier = _orchestrator(store, auth)
        result = _run(orch.complete(
            {"name": "Alice", "rhythm": "daily"},
            Credentials("alice@example.com", "secret1", "login"),
        ))

        assert auth.calls == [("sign_in", ("alice@example.com", "secret1"))]
        assert store.calls_to("complete_onboarding") == [({"rhythm": "daily"},)]
        assert store.profile.name == "Original"
        assert result.message == MESSAGE_LOGIN_SUCCESS
        assert len(notifier.notifications) == 1

    def test_invalid_credentials(self, empty_store):
        auth = FakeAuthService(sign_in_result=auth_failure("Invalid login credentials"))
        orch, notifier = _orchestrator(empty_store, auth)
        result = _run(orch.complete(
            {"rhythm": "daily"}, Credentials("alice@example.com", "wrong", "login")
        ))

        assert result.message == MESSAGE_INVALID_CREDENTIALS
        assert empty_store.calls_to("complete_onboarding") == []
        assert notifier.notifications == [result]

    def test_other_login_failure(self, empty_store):
        auth = FakeAuthService(sign_in_result=auth_failure("Email not confirmed"))
        orch, _ = _orchestrator(empty_store, auth)
        result = _run(orch.complete({}, Credentials("a@b.c", "secret1", "login")))
        assert result.message == "Erro ao entrar: Email not confirmed"


class TestUnexpectedFailures:
    def test_auth_exception_reported_once(self, empty_store):
        auth = FakeAuthService(raises=ConnectionError("network down"))
        orch, notifier = _orchestrator(empty_store, auth)
        result = _run(orch.complete({"rhythm": "daily"}, Credentials("a@b.c", "secret1")))

        assert result.level == "error"
        assert result.message == MESSAGE_UNEXPECTED
        assert empty_store.write_calls == []
        assert notifier.notifications == [result]

    def test_save_exception_reported_without_success(self, empty_store):
        async def _broken(fields):
            raise RuntimeError("store unavailable")

        empty_store.complete_onboarding = _broken
        orch, notifier = _orchestrator(empty_store, FakeAuthService())
        result = _run(orch.complete({"rhythm": "daily"}, Credentials("a@b.c", "secret1")))

        assert result.message == MESSAGE_UNEXPECTED
        assert [n.level for n in notifier.notifications] == ["error"]

    def test_missing_context_propagates(self, empty_store):
        ctx = UserContext(empty_store)  # never opened
        orch = OnboardingOrchestrator(FakeAuthService(), ctx, CollectingNotifier())
        with pytest.raises(MissingContextError):
            _run(orch.complete({"rhythm": "daily"}, Credentials("a@b.c", "secret1")))


class TestWithoutCredentials:
    def test_forwards_data_directly(self, empty_store):
        auth = FakeAuthService()
        orch, notifier = _orchestrator(empty_store, auth)
        result = _run(orch.complete({"name": "Alice", "morningPerson": False}))

        assert auth.calls == []
        assert empty_store.calls_to("complete_onboarding") == [
            ({"name": "Alice", "morning_person": False},)
        ]
        assert result.message == MESSAGE_PROFILE_SAVED
        assert len(notifier.notifications) == 1

    def test_store_error_reported_once(self, empty_store):
        async def _signed_out(fields):
            raise StoreError("No signed-in user; sign up or sign in first")

        empty_store.complete_onboarding = _signed_out
        orch, notifier = _orchestrator(empty_store, FakeAuthService())
        result = _run(orch.complete({"rhythm": "daily"}))

        assert result.level == "error"
        assert result.message == MESSAGE_UNEXPECTED
        assert notifier.notifications == [result]

    def test_missing_context_still_propagates(self, empty_store):
        orch = OnboardingOrchestrator(FakeAuthService(), UserContext(empty_store), CollectingNotifier())
        with pytest.raises(MissingContextError):
            _run(orch.complete({"rhythm": "daily"}))
