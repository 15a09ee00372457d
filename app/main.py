# app/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import get_settings
from app.core.database import SessionLocal, init_db
from app.core.logging_config import configure_logging
from app.ticket.routes import router as ticket_router
from app.ticket.seed import seed_demo_tickets

settings = get_settings()
configure_logging(settings.LOG_LEVEL)

init_db()
if settings.SEED_DEMO_DATA:
    with SessionLocal() as db:
        seed_demo_tickets(db)

app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESC,
    version=settings.APP_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(ticket_router)


@app.get("/health", tags=["Health"])
def health():
    return {"status": "ok"}
