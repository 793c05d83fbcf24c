from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api.v1 import index
from app.api.v1 import user
from app.api.v1 import company
from app.api.v1 import dashboard
from app.api.v1 import ewaste_request
from app.api.v1 import review
from app.api.v1 import notification


from app.core.config import settings
from app.core.logging import setup_logging
from app.db.core import init_db

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)

# Middlewares
origins = []

if settings.allowed_hosts:
    origins = settings.allowed_hosts.split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routes
app.include_router(index.router, prefix="/api/v1")
app.include_router(user.router, prefix="/api/v1/users", tags=["Users"])
app.include_router(
    company.router, prefix="/api/v1/companies", tags=["Companies"])
app.include_router(
    dashboard.router, prefix="/api/v1/dashboard", tags=["Dashboard"])
app.include_router(ewaste_request.router,
                   prefix="/api/v1/requests", tags=["Submissions"])
app.include_router(review.router, prefix="/api/v1/review", tags=["Review"])
app.include_router(notification.router,
                   prefix="/api/v1/notifications", tags=["Notifications"])

# Static files serving (request photos)
app.mount("/static", StaticFiles(directory=settings.static_dir), name="static")

if __name__ == "__main__":
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,
        log_level=None,
    )
