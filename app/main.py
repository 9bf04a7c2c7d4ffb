import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import Session

from app.core.config import settings
from app.db.session import create_db_and_tables, engine
from app.services.auth import AuthService
from app.services.errors import StoreError

# Import models to ensure they are registered with SQLModel metadata
from app.models import AdminUser, Post, Category, Tag, SiteSetting

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    with Session(engine) as session:
        AuthService(session).ensure_admin()
    yield

app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    lifespan=lifespan,
    description="API for a personal blog and its admin dashboard"
)

@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "kind": exc.kind.value},
    )

@app.get("/")
def read_root():
    return {"message": f"Welcome to {settings.PROJECT_NAME}. Visit /docs for Swagger UI."}

from app.routers import auth, blog, admin, categories, tags, site_settings, imports, upload, sitemap

app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(blog.router, prefix="/api/v1/blog", tags=["blog"])
app.include_router(admin.router, prefix="/api/v1/admin", tags=["admin"])
app.include_router(categories.router, prefix="/api/v1/admin/categories", tags=["categories"])
app.include_router(tags.router, prefix="/api/v1/admin/tags", tags=["tags"])
app.include_router(site_settings.router, prefix="/api/v1/admin/settings", tags=["settings"])
app.include_router(imports.router, prefix="/api/v1/admin/import", tags=["import"])
app.include_router(upload.router, prefix="/api/v1/upload", tags=["upload"])
app.include_router(sitemap.router, tags=["sitemap"])

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
