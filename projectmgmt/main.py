# projectmgmt/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from projectmgmt.bootstrap import seed_default_manager
from projectmgmt.config import settings
from projectmgmt.database import SessionLocal, init_db
from projectmgmt.errors import register_exception_handlers

# Router imports
from projectmgmt.routes.auth import router as auth_router
from projectmgmt.routes.users import router as users_router
from projectmgmt.routes.projects import router as projects_router
from projectmgmt.routes.logs import router as logs_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# Create tables and the default manager before serving requests
@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    db = SessionLocal()
    try:
        seed_default_manager(db)
    finally:
        db.close()
    logger.info("Project Management API started")
    yield


app = FastAPI(title="Project Management API", version="1.0.0", lifespan=lifespan)

# CORS: local dev frontends plus the configured public one
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Router registration
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(projects_router)
app.include_router(logs_router)

@app.get("/")
def read_root():
    return {"message": "Project Management API is running"}
