"""
Static job registry: job type identifier -> job class.
"""

from typing import Dict, Type

from imageboard.jobs.base import Job
from imageboard.jobs.post_jobs import ReverseSearchPostsJob
from imageboard.jobs.tag_jobs import MergeTagsJob
from imageboard.jobs.user_jobs import RegisterUserJob

JOB_REGISTRY: Dict[str, Type[Job]] = {
    job_class.job_type: job_class
    for job_class in (
        RegisterUserJob,
        MergeTagsJob,
        ReverseSearchPostsJob,
    )
}
