import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# IMPORTANT:
# This imports ALL models so SQLAlchemy registers tables + FKs correctly
import cart_report.models  # noqa: F401
from cart_report.core.config import settings
from cart_report.routers.admin_cart_report import router as admin_cart_report_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Cart Report")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def health():
    return {"ok": True}


# Reports
app.include_router(admin_cart_report_router)
