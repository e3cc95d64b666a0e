from fastapi import APIRouter


def register_routers(router: APIRouter) -> None:
    from abuse_guard.api.modules.dashboard.routes import router as dashboard_router
    from abuse_guard.api.modules.system.routes import router as system_router

    router.include_router(system_router, tags=["System"])
    router.include_router(dashboard_router, prefix="/dashboard", tags=["Dashboard"])
