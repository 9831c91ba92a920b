"""
API tests for dashboard stats, CSV import and migrations.
"""

from lib import schema


class TestDashboard:
    def test_stats(self, client):
        resp = client.get("/api/dashboard/stats")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["stats"]["totalMessages"] == 9
        assert data["stats"]["participants"] == 3
        assert data["insights"]["mostActiveHour"] == "09:00"
        assert len(data["insights"]["messagesByMonth"]) == 3


class TestCsvImport:
    def test_import(self, client):
        csv_data = "date,date-time,sender,message,type\n2024-04-01,2024-04-01T07:30:00,Alex,Morning!,Incoming"
        resp = client.post("/api/import/csv", json={"csvData": csv_data})
        assert resp.status_code == 200
        assert resp.json()["data"] == {
            "totalRecords": 1,
            "insertedCount": 1,
            "skippedCount": 0,
            "errorsCount": 0,
            "errors": [],
        }
        assert client.get("/api/messages").json()["pagination"]["total"] == 8

    def test_missing_csv(self, client):
        for body in ({}, {"csvData": ""}, {"csvData": "  "}):
            resp = client.post("/api/import/csv", json=body)
            assert resp.status_code == 400
            assert resp.json()["error"] == "CSV data not provided"


class TestMigrations:
    def test_migrate(self, client):
        resp = client.post("/api/admin/migrate")
        assert resp.status_code == 200
        assert resp.json()["data"]["previous_version"] == schema.SCHEMA_VERSION

    def test_describe_insights_migration(self, client):
        data = client.get("/api/admin/relationship-insights").json()["data"]
        assert len(data["operations"]) == 3

    def test_run_insights_migration(self, client):
        data = client.post("/api/admin/relationship-insights").json()["data"]
        assert data["status"] == "completed"
        assert data["results"]["tableInfo"]["hasRelationshipId"] is True

        again = client.post("/api/admin/relationship-insights").json()["data"]
        assert again["results"]["alterTable"]["message"] == "Column already exists"
