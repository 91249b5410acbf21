"""
API v1 routes.
"""

from fastapi import APIRouter

from imageboard.api.v1 import auth, jobs

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(jobs.router, prefix="/jobs", tags=["Jobs"])
