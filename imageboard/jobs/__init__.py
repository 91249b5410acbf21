"""
Job framework: arguments, requirements, the job contract and the dispatcher.
"""

from imageboard.jobs.arguments import (
    ArgumentSet,
    Conjunction,
    Disjunction,
    JobArgs,
    Leaf,
    Requirement,
    RequirementVerdict,
)
from imageboard.jobs.base import Job, JobContext
from imageboard.jobs.dispatcher import Api, JobOutcome
from imageboard.jobs.post_jobs import ReverseSearchPostsJob
from imageboard.jobs.registry import JOB_REGISTRY
from imageboard.jobs.tag_jobs import MergeTagsJob
from imageboard.jobs.user_jobs import RegisterUserJob

__all__ = [
    "ArgumentSet",
    "Conjunction",
    "Disjunction",
    "JobArgs",
    "Leaf",
    "Requirement",
    "RequirementVerdict",
    "Job",
    "JobContext",
    "Api",
    "JobOutcome",
    "ReverseSearchPostsJob",
    "JOB_REGISTRY",
    "MergeTagsJob",
    "RegisterUserJob",
]
