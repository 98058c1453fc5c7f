from fastapi import APIRouter

from routers.connection_requests import router as connection_requests_router
from routers.hangouts import router as hangouts_router
from routers.users import router as users_router

router = APIRouter()
router.include_router(users_router, tags=["Users"])
router.include_router(hangouts_router, tags=["Hangouts"])
router.include_router(connection_requests_router, tags=["Connection Requests"])
