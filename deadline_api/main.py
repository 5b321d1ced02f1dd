import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from deadline_api.config import config
from deadline_api.routes import router
from deadline_api.routes.prometheus import metrics_middleware

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# =========================================================
# FASTAPI APP
# =========================================================

app = FastAPI(title="Task Deadline Rules API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register Prometheus middleware
app.middleware("http")(metrics_middleware)

# Include API Router
app.include_router(router)


@app.get("/health", tags=["Health"])
def health():
    return {"status": "ok", "timezone": config.TIMEZONE_NAME}


@app.on_event("startup")
def log_startup():
    logger.info(f"Deadline rules API ready (timezone {config.TIMEZONE_NAME})")
