# mycare/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mycare.config import get_settings
from mycare.log import configure_logging
from mycare.services import init_db
from mycare.api.routes import router as chat_router, get_chat_service
from mycare.api.tools import router as tools_router


settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(title="MyCare API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,  # "*" for dev; tighten in prod
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
)


@app.on_event("startup")
def on_startup() -> None:
    init_db()
    # Build the agent gateway now so a missing API key / webhook URL
    # stops the server instead of failing the first chat.
    if get_chat_service not in app.dependency_overrides:
        get_chat_service()


@app.on_event("shutdown")
def on_shutdown() -> None:
    # release the webhook HTTP connection pool
    provider = app.dependency_overrides.get(get_chat_service, get_chat_service)
    provider().gateway.close()


@app.get("/")
def root():
    return {"message": "MyCare API is running"}


app.include_router(chat_router, prefix="/api")
app.include_router(tools_router, prefix="/api")
