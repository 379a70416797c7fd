from fastapi import APIRouter

from creator_crm.api.routes import (
    brand_deals,
    content_posts,
    health,
    invoices,
    notifications,
    profile,
    projects,
    session,
    tasks,
)

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(projects.router)
api_router.include_router(invoices.router)
api_router.include_router(brand_deals.router)
api_router.include_router(content_posts.router)
api_router.include_router(tasks.router)
api_router.include_router(notifications.router)
api_router.include_router(profile.router)
api_router.include_router(session.router)
