"""
Job repository: reads and writes for the `jobs` table.
Rows cross the JobRecord boundary here and nowhere else.
"""
import logging
from typing import Any

from opscentral.repositories.table_client import TableClient
from opscentral.schemas.job import JobRecord

logger = logging.getLogger(__name__)

JOBS_TABLE = "jobs"


def fetch_jobs(client: TableClient) -> list[JobRecord]:
    rows = client.select(JOBS_TABLE, order_by="created_at", descending=True)
    return [JobRecord.from_row(row) for row in rows]


def insert_jobs(client: TableClient, records: list[JobRecord]) -> int:
    inserted = client.insert(JOBS_TABLE, [record.to_row() for record in records])
    logger.info("jobs: inserted %d row(s) ids=%s", inserted, [r.id for r in records])
    return inserted


def update_job(client: TableClient, job_id: str, values: dict[str, Any]) -> None:
    client.update(JOBS_TABLE, values, {"id": job_id})


def delete_job(client: TableClient, job_id: str) -> None:
    client.delete(JOBS_TABLE, {"id": job_id})
    logger.info("jobs: deleted id=%s", job_id)
