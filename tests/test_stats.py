"""
Dashboard counters, activity series, analytics and diagnostics.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from core.config import Settings, settings
from models.models import MemberStatus, RegistrationStatus
from routes.diagnostics import environment_check
from services.stats_service import STATUS_COLORS, build_activity_series


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


class TestActivitySeries:
    """The pure day-bucketing step."""

    def test_dense_inclusive_window(self):
        series = build_activity_series(date(2026, 3, 1), date(2026, 3, 8), [], [])
        assert len(series) == 8
        assert series[0].date == "2026-03-01"
        assert series[-1].date == "2026-03-08"
        assert all(day.new_users == 0 and day.revenue == 0 for day in series)

    def test_overlays_members_and_revenue(self):
        series = build_activity_series(
            date(2026, 3, 1),
            date(2026, 3, 3),
            [datetime(2026, 3, 2, 9), datetime(2026, 3, 2, 23, 59), datetime(2026, 2, 28)],
            [(datetime(2026, 3, 3, 1), Decimal("10.25")), (datetime(2026, 3, 3, 8), Decimal("4.75"))],
        )
        assert [day.new_users for day in series] == [0, 2, 0]
        assert [day.revenue for day in series] == [0.0, 0.0, 15.0]


class TestActivityEndpoint:
    def test_seven_day_range(self, client, admin):
        client.post("/api/members", json={"name": "Newbie", "status": "active"}, headers=admin.headers)
        for amount, status in ((10.5, "COMPLETED"), (4.5, "COMPLETED"), (100, "PENDING"), (7, "FAILED")):
            client.post("/api/payments", json={"amount": amount, "status": status}, headers=admin.headers)

        response = client.get("/api/dashboard/activity-stats?range=7d", headers=admin.headers)
        assert response.status_code == 200
        series = response.json()
        assert len(series) == 8
        assert series[0]["date"] == (today_utc() - timedelta(days=7)).isoformat()
        assert series[-1] == {"date": today_utc().isoformat(), "newUsers": 1, "revenue": 15.0}
        assert all(day["newUsers"] == 0 and day["revenue"] == 0 for day in series[:-1])

    def test_range_lengths(self, client, admin):
        for range_key, expected in (("30d", 31), ("90d", 91), ("bogus", 31)):
            series = client.get(f"/api/dashboard/activity-stats?range={range_key}", headers=admin.headers).json()
            assert len(series) == expected, range_key
        assert len(client.get("/api/dashboard/activity-stats", headers=admin.headers).json()) == 31

    def test_other_tenant_activity_excluded(self, client, admin, other_admin):
        client.post("/api/payments", json={"amount": 50}, headers=other_admin.headers)
        series = client.get("/api/dashboard/activity-stats?range=7d", headers=admin.headers).json()
        assert series[-1]["revenue"] == 0


class TestDashboardStats:
    def test_counters(self, client, admin, other_admin):
        headers = admin.headers
        client.post("/api/members", json={"name": "One", "status": "active"}, headers=headers)
        client.post("/api/members", json={"name": "Two", "status": "pending"}, headers=headers)
        plan = client.post(
            "/api/plans", json={"name": "Basic", "price": 10, "interval": "MONTHLY"}, headers=headers
        ).json()
        client.post("/api/subscriptions", json={"planId": plan["id"]}, headers=headers)
        client.post("/api/payments", json={"amount": 20}, headers=headers)
        client.post("/api/payments", json={"amount": 99, "status": "PENDING"}, headers=headers)
        client.post("/api/payments", json={"amount": 500}, headers=other_admin.headers)

        soon = datetime.now(timezone.utc) + timedelta(hours=1)
        client.post("/api/events", json={"title": "Soon", "date": soon.isoformat()}, headers=headers)
        expected_upcoming = 1 if soon.month == datetime.now(timezone.utc).month else 0

        stats = client.get("/api/dashboard/stats", headers=headers).json()
        assert stats == {
            "totalMembers": 2,
            "activeSubscriptions": 1,
            "upcomingEvents": expected_upcoming,
            "totalRevenue": 20.0,
        }


class TestAnalytics:
    def test_status_colours_cover_every_status(self):
        assert set(STATUS_COLORS) == set(MemberStatus)

    def test_report_shape(self, client, admin, db, add_registrations):
        headers = admin.headers
        client.post("/api/members", json={"name": "Active One", "status": "active"}, headers=headers)
        client.post("/api/members", json={"name": "Active Two", "status": "active"}, headers=headers)
        client.post("/api/members", json={"name": "Gone", "status": "cancelled"}, headers=headers)
        client.post("/api/payments", json={"amount": 12}, headers=headers)

        past = datetime.now(timezone.utc) - timedelta(days=2)
        event = client.post(
            "/api/events",
            json={"title": "A very long event name indeed", "date": past.isoformat(), "capacity": 10},
            headers=headers,
        ).json()
        add_registrations(
            event["id"],
            admin.organization_id,
            [RegistrationStatus.CONFIRMED, RegistrationStatus.ATTENDED, RegistrationStatus.WAITLISTED],
        )

        report = client.get("/api/analytics?timeframe=last3months", headers=headers).json()

        assert len(report["membershipData"]) == 4
        assert report["membershipData"][-1]["members"] == 3
        assert report["revenueData"][-1]["amount"] == 12.0

        slices = {s["name"]: s for s in report["membershipStatusData"]}
        assert slices["Active"]["value"] == 2
        assert slices["Cancelled"]["value"] == 1
        assert slices["Pending"]["value"] == 0
        assert slices["Active"]["color"] == STATUS_COLORS[MemberStatus.ACTIVE]

        assert report["eventAttendanceData"] == [
            {"name": "A very long event na...", "attended": 2, "capacity": 10}
        ]

    def test_analytics_scoped_to_organization(self, client, admin, other_admin):
        client.post("/api/members", json={"name": "Elsewhere", "status": "active"}, headers=other_admin.headers)
        report = client.get("/api/analytics", headers=admin.headers).json()
        assert report["membershipData"][-1]["members"] == 0
        assert all(s["value"] == 0 for s in report["membershipStatusData"])


class TestDiagnostics:
    def test_requires_session_or_token(self, client):
        assert client.get("/api/diagnostics").status_code == 401
        assert client.get("/api/diagnostics?admin_token=guess").status_code == 401

    def test_with_session(self, client, admin):
        body = client.get("/api/diagnostics", headers=admin.headers).json()
        assert body["status"] == "ok"
        assert body["database"] == {"status": "connected"}
        assert body["auth"] == {"sessionAvailable": True}
        assert body["serverInfo"]["hasDbUrl"] is True
        assert body["environmentCheck"]["status"] in ("success", "warning")

    def test_with_admin_token(self, client, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_DIAGNOSTIC_TOKEN", "s3cret")
        body = client.get("/api/diagnostics?admin_token=s3cret").json()
        assert body["database"]["status"] == "connected"
        assert body["auth"] == {"sessionAvailable": False}


class TestEnvironmentCheck:
    """Required and recommended settings supplied through the environment."""

    def test_all_configured(self):
        config = Settings(
            _env_file=None,
            SECRET_KEY="k",
            DATABASE_URL="sqlite://",
            FRONTEND_URL="https://app.example.com",
            ADMIN_DIAGNOSTIC_TOKEN="t",
        )
        assert environment_check(config)["status"] == "success"

    def test_missing_recommended_is_warning(self, monkeypatch):
        monkeypatch.delenv("FRONTEND_URL", raising=False)
        monkeypatch.delenv("ADMIN_DIAGNOSTIC_TOKEN", raising=False)
        config = Settings(_env_file=None, SECRET_KEY="k", DATABASE_URL="sqlite://")
        check = environment_check(config)
        assert check["status"] == "warning"
        assert check["details"]["missingVars"] == ["FRONTEND_URL", "ADMIN_DIAGNOSTIC_TOKEN"]

    def test_missing_database_url_is_error(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        config = Settings(_env_file=None, SECRET_KEY="k")
        check = environment_check(config)
        assert check["status"] == "error"
        assert check["details"]["missingVars"] == ["DATABASE_URL"]

    def test_database_failure_is_error(self):
        config = Settings(_env_file=None, SECRET_KEY="k", DATABASE_URL="sqlite://")
        check = environment_check(config, db_error="unable to open database file")
        assert check["status"] == "error"
        assert check["details"]["dbConnection"] == "error"
