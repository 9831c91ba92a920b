"""
Data management endpoints: dashboard stats, CSV import, schema migrations.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.identity import require_identity
from api.response_models import CsvImportRequest, Envelope, wrap
from lib import dashboard, db, importer, insights_migration

logger = logging.getLogger(__name__)

admin_router = APIRouter(prefix="/api", dependencies=[Depends(require_identity)])


@admin_router.get("/dashboard/stats", response_model=Envelope, tags=["dashboard"])
def dashboard_stats():
    with db.get_connection() as conn:
        return wrap(dashboard.get_dashboard_stats(conn))


@admin_router.post("/import/csv", response_model=Envelope, tags=["import"])
def import_csv(body: CsvImportRequest):
    """Import message history from CSV text in the request body."""
    if not body.csvData or not body.csvData.strip():
        raise HTTPException(status_code=400, detail="CSV data not provided")
    try:
        with db.get_connection() as conn:
            result = importer.import_csv(conn, body.csvData)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return wrap(result.to_dict())


@admin_router.post("/admin/migrate", response_model=Envelope, tags=["admin"])
def migrate():
    """Converge the database schema."""
    with db.get_connection() as conn:
        results = db.run_migrations(conn)
    if results.get("errors"):
        logger.warning("migration finished with errors: %s", results["errors"])
    return wrap(results)


@admin_router.get("/admin/relationship-insights", response_model=Envelope, tags=["admin"])
def describe_insights_migration():
    return wrap(insights_migration.describe())


@admin_router.post("/admin/relationship-insights", response_model=Envelope, tags=["admin"])
def run_insights_migration():
    with db.get_connection() as conn:
        return wrap(insights_migration.run(conn))
