from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quizify.api import progress_routes, quiz_routes, session_routes
from quizify.config.settings import settings
from quizify.db.database import init_db
from quizify.utils.logger import CustomLogger

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    CustomLogger.setup_logger("quizify")
    # Create DB tables automatically
    init_db()
    logger.info(f"Quizify API started ({settings.APP_ENV})")
    yield


app = FastAPI(
    title="Quizify API",
    description="Turn PDF documents into multiple-choice quizzes",
    version="1.0.0",
    lifespan=lifespan
)

# CORS Origins
origins = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
    settings.FRONTEND_URL
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o for o in origins if o],  # remove empty values
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(quiz_routes.router, prefix="/api", tags=["Quizzes"])
app.include_router(session_routes.router, prefix="/api", tags=["Sessions"])
app.include_router(progress_routes.router, prefix="/api/progress", tags=["Progress"])


@app.get("/")
async def root():
    return {"message": "Quizify API", "status": "running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "quizify"}
