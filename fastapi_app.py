import uvicorn

from talentdesk import create_app
from talentdesk.config import settings

app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "fastapi_app:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
