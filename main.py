import os

from fastapi import APIRouter, Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pymongo.database import Database
from pymongo.errors import PyMongoError

from core.config import settings
from core.errors import register_error_handlers
from core.logging_config import logger
from database import get_db
from routers.admin import router as admin_router
from routers.auth import router as auth_router
from routers.bookings import router as bookings_router
from routers.properties import router as properties_router


def create_app() -> FastAPI:
    app = FastAPI(title=settings.PROJECT_NAME, version="1.0.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Static hosting for uploaded images
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

    api = APIRouter(prefix="/api")
    api.include_router(auth_router)
    api.include_router(properties_router)
    api.include_router(bookings_router)
    api.include_router(admin_router)
    app.include_router(api)

    @app.get("/")
    def root():
        return {"message": "RentEasy API running"}

    @app.get("/health")
    def health(db: Database = Depends(get_db)):
        response = {
            "backend": "running",
            "database": "not available",
            "database_name": settings.DATABASE_NAME,
            "collections": [],
        }
        try:
            db.command("ping")
            response["database"] = "connected"
            response["collections"] = db.list_collection_names()[:10]
        except PyMongoError as e:
            logger.error(f"Health check could not reach the database: {e}")
            response["database"] = f"error: {str(e)[:50]}"
        return response

    logger.info(f"{settings.PROJECT_NAME} ready ({settings.ENV})")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
