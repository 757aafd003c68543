import logging

from dotenv import load_dotenv
from fastapi import FastAPI

from tilemerge.api.routes import router
from tilemerge.infra.settings import get_log_level

# Local runs may keep TILEMERGE_* defaults in a .env file; real env vars win.
load_dotenv(override=False)

app = FastAPI(title="tilemerge", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=get_log_level())
logger = logging.getLogger(__name__)


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "tilemerge", "version": "0.1.0"}
