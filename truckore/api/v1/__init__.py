"""API v1 routes."""

from fastapi import APIRouter

from truckore.api.v1 import auth, health, query, security_logs, serial_numbers, setup, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(setup.router, prefix="/setup", tags=["setup"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(security_logs.router, prefix="/security-logs", tags=["security-logs"])
router.include_router(serial_numbers.router, prefix="/serial-numbers", tags=["serial-numbers"])
router.include_router(query.router, prefix="/db", tags=["db"])
