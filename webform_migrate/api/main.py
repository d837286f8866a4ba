"""FastAPI application entry point."""

from fastapi import FastAPI

from .routes import migrations, preview

app = FastAPI(
    title="Webform Migration API",
    description="API for migrating legacy webforms",
    version="0.1.0",
)

# Include routers
app.include_router(migrations.router, prefix="/api/migrations", tags=["migrations"])
app.include_router(preview.router, prefix="/api/preview", tags=["preview"])


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
