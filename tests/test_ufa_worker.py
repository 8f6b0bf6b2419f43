"""Tests for the UFA batch worker script."""

from unittest.mock import AsyncMock, patch

import pytest

from scripts import ufa_worker


class TestSummaryPayload:
    def test_counts_strategies(self):
        result = {
            "ok": True,
            "analysis": {"expertStrategies": [{}, {}, {}], "confidenceScore": 93},
            "timestamp": "2026-03-01T00:00:00+00:00",
        }

        assert ufa_worker.summary_payload(result) == {
            "type": "analysis_summary",
            "summary": "Analysis completed",
            "details": {"strategies": 3, "confidenceScore": 93, "timestamp": "2026-03-01T00:00:00+00:00"},
        }


class TestRunWorker:
    @pytest.mark.asyncio
    async def test_one_failure_does_not_stop_the_rest(self):
        outcomes = {
            "t-1": {"ok": True, "analysis": {}},
            "t-2": RuntimeError("boom"),
            "t-3": {"ok": False},
        }

        async def run(tenant_id):
            outcome = outcomes[tenant_id]
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        with (
            patch.object(ufa_worker, "list_tenant_ids", return_value=["t-1", "t-2", "t-3"]),
            patch.object(ufa_worker, "run_expert_funding_analysis", AsyncMock(side_effect=run)),
            patch.object(ufa_worker, "enqueue_notification") as enqueue,
        ):
            counts = await ufa_worker.run_worker(limit=10)

        assert counts == {"processed": 3, "succeeded": 1, "failed": 2}
        enqueue.assert_called_once()
        assert enqueue.call_args.args[:2] == ("t-1", "analysis_summary")


class TestMain:
    def test_missing_env(self, monkeypatch):
        monkeypatch.delenv("SUPABASE_URL", raising=False)

        assert ufa_worker.main(["ufa_worker.py"]) == 1

    def test_worker_error(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://test.supabase.co")
        monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "test-key")

        with patch.object(ufa_worker, "list_tenant_ids", side_effect=RuntimeError("db down")):
            assert ufa_worker.main(["ufa_worker.py"]) == 2

    def test_invalid_limit(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://test.supabase.co")
        monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "test-key")

        with patch.object(ufa_worker, "list_tenant_ids") as list_ids:
            assert ufa_worker.main(["ufa_worker.py", "lots"]) == 2

        list_ids.assert_not_called()

    def test_success(self, monkeypatch, capsys):
        monkeypatch.setenv("SUPABASE_URL", "https://test.supabase.co")
        monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "test-key")

        with patch.object(ufa_worker, "list_tenant_ids", return_value=[]) as list_ids:
            assert ufa_worker.main(["ufa_worker.py", "25"]) == 0

        list_ids.assert_called_once_with(25)
        assert "Processed 0 tenants" in capsys.readouterr().out


class TestMissingSupabaseEnv:
    def test_reports_unset_and_empty(self, monkeypatch):
        from app.db.supabase_client import missing_supabase_env

        monkeypatch.setenv("SUPABASE_URL", "")
        monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)

        assert missing_supabase_env() == ["SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY"]

    def test_all_present(self, monkeypatch):
        from app.db.supabase_client import missing_supabase_env

        monkeypatch.setenv("SUPABASE_URL", "https://test.supabase.co")
        monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "test-key")

        assert missing_supabase_env() == []
