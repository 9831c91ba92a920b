"""
Component health checks behind GET /api/health.

A HealthChecker starts with three built-in checks (db, schema_version,
disk_space) and accepts more through add_check(). The overall status is
the worst status any check reports; a check that raises counts as
unhealthy.
"""

import logging
import shutil
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from lib import db, paths, schema

logger = logging.getLogger(__name__)

DISK_DEGRADED_PERCENT = 90
DISK_CRITICAL_PERCENT = 95


class HealthStatus(Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {HealthStatus.HEALTHY: 0, HealthStatus.DEGRADED: 1, HealthStatus.UNHEALTHY: 2}


@dataclass
class HealthCheckResult:
    name: str
    status: HealthStatus
    message: str
    latency_ms: float = 0.0
    details: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "latency_ms": round(self.latency_ms, 2),
            **self.details,
        }


@dataclass
class HealthReport:
    status: HealthStatus
    checks: list[HealthCheckResult]
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "timestamp": self.timestamp,
            "checks": [c.to_dict() for c in self.checks],
        }


class HealthChecker:
    """Ordered set of named checks.

        checker = HealthChecker()
        checker.add_check("agents", ping_agents)
        checker.run_all().to_dict()
    """

    def __init__(self):
        self._checks: dict[str, Callable[[], HealthCheckResult]] = {
            "db": check_database,
            "schema_version": check_schema_version,
            "disk_space": check_disk_space,
        }

    def add_check(self, name: str, check_fn: Callable[[], HealthCheckResult]) -> None:
        self._checks[name] = check_fn

    def _run_one(self, name: str, check_fn: Callable[[], HealthCheckResult]) -> HealthCheckResult:
        started = time.monotonic()
        try:
            result = check_fn()
        except Exception as e:
            logger.error("Health check %r raised", name, exc_info=e)
            result = HealthCheckResult(name, HealthStatus.UNHEALTHY, f"Check failed: {e}")
        result.latency_ms = (time.monotonic() - started) * 1000
        return result

    def run_all(self) -> HealthReport:
        results = [self._run_one(name, fn) for name, fn in self._checks.items()]
        worst = max((r.status for r in results), key=lambda s: s.severity, default=HealthStatus.HEALTHY)
        stamp = datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return HealthReport(status=worst, checks=results, timestamp=stamp)


def check_database() -> HealthCheckResult:
    """The store opens and holds every critical table."""
    try:
        with db.get_connection() as conn:
            missing = [t for t in schema.CRITICAL_TABLES if not db.table_exists(conn, t)]
    except db.StorageUnavailable as e:
        return HealthCheckResult("db", HealthStatus.UNHEALTHY, str(e))

    details: dict = {"path": str(db.get_db_path())}
    if missing:
        details["missing_tables"] = missing
        return HealthCheckResult("db", HealthStatus.UNHEALTHY, f"Missing tables: {', '.join(missing)}", details=details)
    return HealthCheckResult("db", HealthStatus.HEALTHY, "Database connection OK", details=details)


def check_schema_version() -> HealthCheckResult:
    with db.get_connection() as conn:
        found = db.get_schema_version(conn)
    wanted = schema.SCHEMA_VERSION
    if found == wanted:
        return HealthCheckResult("schema_version", HealthStatus.HEALTHY, f"Schema version: {found}", details={"version": found})
    logger.warning("Schema version %s, expected %s", found, wanted)
    return HealthCheckResult(
        "schema_version",
        HealthStatus.DEGRADED,
        f"Schema version mismatch: {found} != {wanted}",
        details={"current": found, "expected": wanted},
    )


def check_disk_space() -> HealthCheckResult:
    """Usage of the volume holding the database directory."""
    data_dir = paths.db_path().parent
    data_dir.mkdir(parents=True, exist_ok=True)
    usage = shutil.disk_usage(str(data_dir))
    percent = usage.used / usage.total * 100 if usage.total else 0.0

    if percent > DISK_CRITICAL_PERCENT:
        status, label = HealthStatus.UNHEALTHY, "critical"
    elif percent > DISK_DEGRADED_PERCENT:
        status, label = HealthStatus.DEGRADED, "degraded"
    else:
        status, label = HealthStatus.HEALTHY, "OK"
    return HealthCheckResult(
        "disk_space",
        status,
        f"Disk space {label}: {percent:.1f}% used",
        details={"free_bytes": usage.free, "percent_used": round(percent, 2)},
    )
