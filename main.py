import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables from .env
from dotenv import load_dotenv
load_dotenv()

from uniplace import __version__
from uniplace.api.mail_relay import router as mail_relay_router
from uniplace.api.v1.api import api_router
from uniplace.database import engine, Base
import uniplace.models  # noqa: F401  registers tables on Base.metadata


def setup_logging():
    """Configure root logging once for the whole service."""
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    for noisy in ("urllib3", "multipart", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="UniPlace",
    description="University placement portal: result uploads, dashboards, email center and senior blogs",
    version=__version__
)

origins = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:8080,http://localhost:3000").split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    """Create database tables on startup."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")


app.include_router(api_router)
app.include_router(mail_relay_router)


@app.get("/")
def health_check():
    return {"status": "ok"}
