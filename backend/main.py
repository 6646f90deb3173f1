"""
Main FastAPI application entry point
"""
from contact_manager.core.config import get_settings
from contact_manager.main import create_app

app = create_app(get_settings())


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.app_env == "development",
    )
