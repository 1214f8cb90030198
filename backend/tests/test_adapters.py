"""
Settings, the JSON-mode LLM wrapper and token verification.

Run with: pytest backend/tests/test_adapters.py -v
"""

from __future__ import annotations

from types import SimpleNamespace

import httpx
import pytest

from conftest import make_settings
from sparkvibe.adapters.llm_client import LLMClient, _extract_content, build_llm_client
from sparkvibe.adapters.supabase_auth import SupabaseAuthError, verify_supabase_token
from sparkvibe.core.errors import UpstreamDegraded


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeOpenAI:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.kwargs = None
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        return _completion(self.content)


class TestSettings:
    def test_tuning_defaults(self):
        t = make_settings().tuning()
        assert (t.daily_checkin_points, t.card_generation_points, t.card_share_points) == (10, 25, 15)
        assert (t.points_per_level, t.leaderboard_max) == (500, 50)

    def test_tuning_overrides(self):
        t = make_settings(CARD_SHARE_POINTS=5, LEDGER_MAX_RETRIES=9).tuning()
        assert t.card_share_points == 5
        assert t.ledger_max_retries == 9

    def test_leaderboard_cap_cannot_exceed_fifty(self):
        with pytest.raises(ValueError):
            make_settings(LEADERBOARD_MAX=51)

    def test_allowed_origins(self):
        s = make_settings(ALLOWED_ORIGINS=" https://a.test, ,https://b.test ")
        assert s.allowed_origins() == ["https://a.test", "https://b.test"]

    def test_push_senders(self):
        assert make_settings().push_senders() == set()
        assert make_settings(PUSH_SENDERS="ops, dev-user,").push_senders() == {"ops", "dev-user"}


class TestLLMClient:
    def test_json_payload(self):
        fake = FakeOpenAI(content='{"label": "happy", "confidence": 0.9}')
        out = LLMClient(fake, model="m", temperature=0.3).complete_json("sys", "hi", max_tokens=60)
        assert out == {"label": "happy", "confidence": 0.9}
        assert fake.kwargs["response_format"] == {"type": "json_object"}
        assert fake.kwargs["temperature"] == 0.3
        assert fake.kwargs["max_tokens"] == 60

    def test_fenced_json(self):
        fake = FakeOpenAI(content='```json\n{"ok": true}\n```')
        assert LLMClient(fake, model="m").complete_json("s", "u") == {"ok": True}

    @pytest.mark.parametrize("content", [None, "", "not json", "[1, 2]"])
    def test_bad_content(self, content):
        with pytest.raises(UpstreamDegraded):
            LLMClient(FakeOpenAI(content=content), model="m").complete_json("s", "u")

    def test_transport_error(self):
        with pytest.raises(UpstreamDegraded):
            LLMClient(FakeOpenAI(error=TimeoutError("slow")), model="m").complete_json("s", "u")

    def test_extract_content_from_dict(self):
        assert _extract_content({"choices": [{"message": {"content": "x"}}]}) == "x"
        assert _extract_content(None) is None

    def test_no_key_no_client(self):
        assert build_llm_client(make_settings()) is None


class TestTokenVerification:
    def test_missing_config(self):
        with pytest.raises(SupabaseAuthError):
            verify_supabase_token("tok", url=None, anon_key=None)

    def test_valid_token(self, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["Authorization"] == "Bearer tok"
            assert request.headers["apikey"] == "anon"
            return httpx.Response(200, json={"id": "user-42", "email": "a@b.test"})

        _patch_transport(monkeypatch, handler)
        claims = verify_supabase_token("tok", url="https://proj.supabase.test/", anon_key="anon")
        assert claims["sub"] == "user-42"

    def test_rejected_token(self, monkeypatch):
        _patch_transport(monkeypatch, lambda request: httpx.Response(401, json={"msg": "bad jwt"}))
        with pytest.raises(SupabaseAuthError):
            verify_supabase_token("tok", url="https://proj.supabase.test", anon_key="anon")


def _patch_transport(monkeypatch, handler):
    real_client = httpx.Client

    def client_with_mock(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return real_client(*args, **kwargs)

    monkeypatch.setattr("sparkvibe.adapters.supabase_auth.httpx.Client", client_with_mock)
