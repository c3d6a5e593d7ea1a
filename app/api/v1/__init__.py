"""
API v1 Router
"""

from fastapi import APIRouter, Depends

from app.api.dependencies import reject_blocked_ip, track_visit
from app.api.v1 import admin, auth, posts, reviews

router = APIRouter()

# Public routes: blocked addresses are refused and visits are tracked
public_router = APIRouter(dependencies=[Depends(reject_blocked_ip), Depends(track_visit)])
public_router.include_router(auth.router)
public_router.include_router(posts.router)
public_router.include_router(reviews.router)

router.include_router(public_router)
router.include_router(admin.router)

__all__ = ["router"]
