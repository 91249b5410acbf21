"""
Job invocation endpoint.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from imageboard.api.deps import CurrentAuth, JobApi
from imageboard.schemas.jobs import JobRequest, JobResponse

router = APIRouter()


@router.post("/{job_type}", response_model=JobResponse)
async def run_job(job_type: str, data: JobRequest, api: JobApi, auth: CurrentAuth):
    """
    Run one job, e.g. ``POST /jobs/merge-tags`` with
    ``{"arguments": {"source-tag-name": "cat", "target-tag-name": "kitty"}}``.

    The status code follows the error kind (400/401/403/404/409) or the
    job's success status.
    """
    outcome = await api.invoke(job_type, data.arguments, auth)
    body = JobResponse(result=outcome.result, error=outcome.error)
    return JSONResponse(
        status_code=outcome.status_code,
        content=body.model_dump(mode="json", exclude_none=True),
    )
