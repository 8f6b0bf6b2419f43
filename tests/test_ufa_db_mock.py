"""Tests for UFA database operations with mocked Supabase."""

import json
from unittest.mock import MagicMock, patch

import pytest


def _client(*modules):
    client = MagicMock()
    patchers = [patch(f"app.db.{m}.get_supabase", return_value=client) for m in modules]
    return client, patchers


@pytest.fixture
def mock_supabase():
    """One mocked client shared by every UFA db module."""
    client, patchers = _client(
        "ufa_notifications", "ufa_metrics", "ufa_goals", "ufa_events", "ufa_strategy", "ufa_tasks", "tenants"
    )
    for p in patchers:
        p.start()
    yield client
    for p in patchers:
        p.stop()


class TestNotifications:
    def test_enqueue_is_pending(self, mock_supabase):
        from app.db.ufa_notifications import enqueue_notification

        mock_supabase.table.return_value.insert.return_value.execute.return_value = MagicMock(
            data=[{"id": "n-1"}]
        )

        row = enqueue_notification("tenant-1", "strategic_update", {"subject": "Hi"})

        assert row == {"id": "n-1"}
        mock_supabase.table.assert_called_with("ufa_notifications")
        inserted = mock_supabase.table.return_value.insert.call_args[0][0]
        assert inserted["status"] == "pending"
        assert inserted["attempt_count"] == 0
        assert inserted["payload"] == {"subject": "Hi"}

    def test_enqueue_without_data_raises(self, mock_supabase):
        from app.db.ufa_notifications import enqueue_notification

        mock_supabase.table.return_value.insert.return_value.execute.return_value = MagicMock(data=[])

        with pytest.raises(ValueError):
            enqueue_notification("tenant-1", "strategic_update", {})

    def test_pending_query(self, mock_supabase):
        from app.db.ufa_notifications import list_pending_notifications

        query = mock_supabase.table.return_value.select.return_value
        query.eq.return_value.lt.return_value.order.return_value.limit.return_value.execute.return_value = (
            MagicMock(data=None)
        )

        assert list_pending_notifications(max_attempts=3, limit=50) == []
        query.eq.assert_called_with("status", "pending")
        query.eq.return_value.lt.assert_called_with("attempt_count", 3)
        query.eq.return_value.lt.return_value.order.assert_called_with("created_at")

    @pytest.mark.parametrize("attempts,status", [(0, "pending"), (1, "pending"), (2, "failed")])
    def test_failed_attempt_status(self, mock_supabase, attempts, status):
        from app.db.ufa_notifications import mark_notification_failed_attempt

        mark_notification_failed_attempt("n-1", attempts, max_attempts=3)

        update = mock_supabase.table.return_value.update.call_args[0][0]
        assert update["attempt_count"] == attempts + 1
        assert update["status"] == status
        mock_supabase.table.return_value.update.return_value.eq.assert_called_with("id", "n-1")

    def test_mark_sent(self, mock_supabase):
        from app.db.ufa_notifications import mark_notification_sent

        mark_notification_sent("n-1")

        update = mock_supabase.table.return_value.update.call_args[0][0]
        assert update["status"] == "sent"
        assert "last_attempt" in update


class TestMetrics:
    def test_upsert_metrics_stringifies_through_rpc(self, mock_supabase):
        from app.db.ufa_metrics import upsert_metrics

        upsert_metrics("tenant-1", {"ai_confidence": 93, "success_rate": "72.0"})

        calls = mock_supabase.rpc.call_args_list
        assert len(calls) == 2
        assert calls[0].args == (
            "ufa_upsert_metric",
            {"p_tenant_id": "tenant-1", "p_metric_key": "ai_confidence", "p_value": "93"},
        )

    def test_metrics_by_key(self):
        from app.db.ufa_metrics import metrics_by_key

        rows = [{"metric_key": "a", "value": "1"}, {"value": "orphan"}, {"metric_key": "b"}]
        assert metrics_by_key(rows) == {"a": "1", "b": None}


class TestGoalsAndTasks:
    def test_upsert_goals_conflict_key(self, mock_supabase):
        from app.db.ufa_goals import upsert_goals

        mock_supabase.table.return_value.upsert.return_value.execute.return_value = MagicMock(data=[{"id": "g"}])

        assert upsert_goals([{"tenant_id": "t", "title": "Goal"}]) == [{"id": "g"}]
        mock_supabase.table.return_value.upsert.assert_called_with(
            [{"tenant_id": "t", "title": "Goal"}], on_conflict="tenant_id,title"
        )

    def test_upsert_no_goals_skips_db(self, mock_supabase):
        from app.db.ufa_goals import upsert_goals

        assert upsert_goals([]) == []
        mock_supabase.table.assert_not_called()

    def test_create_tasks_serializes_metadata(self, mock_supabase):
        from app.db.ufa_tasks import create_tasks

        mock_supabase.table.return_value.insert.return_value.execute.return_value = MagicMock(data=[{"id": "t"}])

        create_tasks([{"title": "Decide", "metadata": {"timeline": "12 months"}}, {"title": "Plain"}])

        rows = mock_supabase.table.return_value.insert.call_args[0][0]
        assert json.loads(rows[0]["metadata"]) == {"timeline": "12 months"}
        assert rows[1] == {"title": "Plain"}

    def test_open_tasks_exclude_completed(self, mock_supabase):
        from app.db.ufa_tasks import list_open_tasks

        list_open_tasks("tenant-1")

        eq = mock_supabase.table.return_value.select.return_value.eq
        eq.assert_called_with("tenant_id", "tenant-1")
        eq.return_value.neq.assert_called_with("status", "completed")


class TestEventsAndStrategy:
    def test_record_event_falls_back_to_row(self, mock_supabase):
        from app.db.ufa_events import record_event

        mock_supabase.table.return_value.insert.return_value.execute.return_value = MagicMock(data=[])

        row = record_event("tenant-1", "automated_communication", {"type": "strategic_update"})

        assert row["event_type"] == "automated_communication"
        assert row["details"] == {"type": "strategic_update"}

    def test_analysis_event_table(self, mock_supabase):
        from app.db.ufa_events import record_analysis_event

        record_analysis_event("tenant-1", "expert_funding_analysis", {"strategies_generated": 3})

        mock_supabase.table.assert_called_with("ufa_analysis_events")

    def test_roadmap_upsert_one_per_tenant(self, mock_supabase):
        from app.db.ufa_strategy import upsert_roadmap

        upsert_roadmap("tenant-1", {"quarterly_milestones": []})

        args, kwargs = mock_supabase.table.return_value.upsert.call_args
        assert args[0]["status"] == "active"
        assert kwargs == {"on_conflict": "tenant_id"}

    def test_communications_conflict_on_type(self, mock_supabase):
        from app.db.ufa_strategy import upsert_communications

        upsert_communications("tenant-1", {"executive_briefing": {}})

        args, kwargs = mock_supabase.table.return_value.upsert.call_args
        assert args[0]["type"] == "strategic_analysis"
        assert kwargs == {"on_conflict": "tenant_id,type"}


class TestTenants:
    def test_tenant_ids_prefer_tenant_id(self, mock_supabase):
        from app.db.tenants import list_tenant_ids

        mock_supabase.table.return_value.select.return_value.limit.return_value.execute.return_value = MagicMock(
            data=[{"id": "p-1", "tenant_id": "t-1"}, {"id": "p-2", "tenant_id": None}, {"id": None}]
        )

        assert list_tenant_ids() == ["t-1", "p-2"]

    def test_missing_settings(self, mock_supabase):
        from app.db.tenants import get_tenant_settings

        chain = mock_supabase.table.return_value.select.return_value.eq.return_value.limit.return_value
        chain.execute.return_value = MagicMock(data=[])

        assert get_tenant_settings("t-1") is None


class TestProjects:
    @pytest.fixture
    def projects_supabase(self):
        with patch("app.db.projects.get_supabase") as mock_get_supabase:
            client = MagicMock()
            mock_get_supabase.return_value = client
            yield client

    def test_parse_number(self):
        from app.db.projects import parse_int, parse_number

        assert parse_number("$1,500.50") == 1500.5
        assert parse_number("") is None
        assert parse_number("lots") is None
        assert parse_int("12.9") == 12

    def test_parse_number_rejects_non_finite(self):
        from app.db.projects import normalize_new_project, parse_int, parse_number, sanitize_project_updates

        assert parse_number("inf") is None
        assert parse_number("NaN") is None
        assert parse_number(float("-inf")) is None
        assert parse_int("inf") is None
        assert parse_int("nan") is None

        row = normalize_new_project("user-1", {"estimated_people_served": "inf", "funding_needed": "nan"})
        assert row["estimated_people_served"] is None
        assert row["funding_needed"] is None
        assert sanitize_project_updates({"total_project_budget": "Infinity"}) == {"total_project_budget": None}

    def test_create_project_normalizes(self, projects_supabase):
        from app.db.projects import create_project

        projects_supabase.table.return_value.insert.return_value.execute.return_value = MagicMock(
            data=[{"id": "p-1", "name": "Clinic"}]
        )

        created = create_project("user-1", {"name": "Clinic", "funding_needed": "50,000", "description": ""})

        assert created["id"] == "p-1"
        row = projects_supabase.table.return_value.insert.call_args[0][0]
        assert row["user_id"] == "user-1"
        assert row["funding_needed"] == 50000.0
        assert row["description"] is None
        assert row["status"] == "draft"
        assert row["urgency_level"] == "medium"

    def test_create_without_data_raises(self, projects_supabase):
        from app.db.projects import create_project

        projects_supabase.table.return_value.insert.return_value.execute.return_value = MagicMock(data=[])

        with pytest.raises(ValueError):
            create_project("user-1", {})

    def test_update_not_found(self, projects_supabase):
        from app.db.projects import update_project

        chain = projects_supabase.table.return_value.update.return_value.eq.return_value.eq.return_value
        chain.execute.return_value = MagicMock(data=[])

        with pytest.raises(ValueError, match="Project not found"):
            update_project("user-1", "p-404", {"name": "x"})

    def test_update_sanitizes(self, projects_supabase):
        from app.db.projects import update_project

        chain = projects_supabase.table.return_value.update.return_value.eq.return_value.eq.return_value
        chain.execute.return_value = MagicMock(data=[{"id": "p-1"}])

        update_project("user-1", "p-1", {"total_project_budget": "$2,000", "industry": ""})

        payload = projects_supabase.table.return_value.update.call_args[0][0]
        assert payload["total_project_budget"] == 2000.0
        assert payload["industry"] is None
        assert "updated_at" in payload
