import uvicorn

from .settings import settings


if __name__ == "__main__":
    uvicorn.run("mentorship.app:app", host=settings.host, port=settings.port, reload=settings.reload)
