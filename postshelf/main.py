import logging

from fastapi import Depends, FastAPI

from postshelf.routers import assets, posts
from postshelf.security import get_api_key
from postshelf.settings import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Postshelf API", description="Markdown blog posts as typed records")

app.include_router(assets.router)
app.include_router(posts.router, dependencies=[Depends(get_api_key)])


@app.get("/")
async def root():
    return {"message": "Postshelf API is running"}
