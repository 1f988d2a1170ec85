import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eventadmin.core.config import CORS_ORIGINS, get_log_level
from eventadmin.database.db import Base, engine
from eventadmin.models import events, profiles, registrations  # noqa: F401  register tables
from eventadmin.routes import events as event_routes
from eventadmin.routes import registrations as registration_routes
from eventadmin.routes import reports, users

logging.basicConfig(level=get_log_level(), format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger("eventadmin.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create all tables (in production, use migrations such as Alembic)
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready at %s", engine.url.render_as_string(hide_password=True))
    yield


app = FastAPI(title="Event Admin Dashboard", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include the routers
app.include_router(event_routes.router)
app.include_router(registration_routes.router)
app.include_router(reports.router)
app.include_router(users.router)
