from fastapi import APIRouter

from newsroom.api.v1.auth import router as auth_router
from newsroom.api.v1.users import router as users_router
from newsroom.api.v1.desks import router as desks_router
from newsroom.api.v1.categories import router as categories_router
from newsroom.api.v1.bulletins import router as bulletins_router
from newsroom.api.v1.rows import router as rows_router
from newsroom.api.v1.pools import router as pools_router
from newsroom.api.v1.trash import router as trash_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(users_router)
router.include_router(desks_router)
router.include_router(categories_router)
router.include_router(bulletins_router)
router.include_router(rows_router)
router.include_router(pools_router)
router.include_router(trash_router)
