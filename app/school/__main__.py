import uvicorn

from .config.config import settings

if __name__ == "__main__":
    uvicorn.run("app.school.main:app", host="0.0.0.0", port=settings.PORT)
