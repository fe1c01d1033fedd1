from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from costume_roaster.config import CORS_ORIGINS, logger
from costume_roaster.core import gemini
from costume_roaster.core.errors import RoastAppError

from .routers import router
from .routers.roast.pipeline import error_response


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Refuse to start without Gemini credentials
    gemini.ensure_configured()
    logger.info("Gemini credentials present")
    yield


# Initialize FastAPI application
app = FastAPI(
    title="Costume Roaster API",
    description="AI-powered Halloween costume roasts, makeovers and memes",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router)


@app.exception_handler(RoastAppError)
async def roast_app_error_handler(request: Request, exc: RoastAppError):
    logger.error(
        "Unhandled application error",
        extra={"path": request.url.path, "error": exc.message},
    )
    return error_response(exc)


# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


logger.info("Costume Roaster API initialized successfully")
