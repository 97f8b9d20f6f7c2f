"""
PaperLens API - FastAPI backend for multi-source paper discovery
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import find_dotenv, load_dotenv

from paperlens import __version__, container
from paperlens.core.exceptions import PaperLensError
from paperlens.utils.logging_config import LogFiles, Logger, configure_logging

from .routes import papers, users

# Load local .env so API keys and store settings are available in API mode.
load_dotenv(find_dotenv(usecwd=True), override=False)
configure_logging()

app = FastAPI(
    title="PaperLens API",
    description="API for searching, saving and summarizing research papers across platforms",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=container.get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PaperLensError)
async def paperlens_error_handler(request: Request, exc: PaperLensError):
    if exc.status_code >= 500:
        Logger.error(f"{request.method} {request.url.path} failed: {exc.message}", file=LogFiles.ERROR)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "version": __version__}


app.include_router(papers.router, prefix="/api", tags=["Papers"])
app.include_router(users.router, prefix="/api", tags=["Users"])


@app.on_event("shutdown")
async def _shutdown_services():
    await container.shutdown()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
