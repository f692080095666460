import logging

from fastapi import FastAPI

from salonbook.api.v1.admin import router as admin_router
from salonbook.api.v1.bookings import router as bookings_router
from salonbook.api.v1.checkout import router as checkout_router
from salonbook.api.v1.earnings import router as earnings_router
from salonbook.api.v1.salons import router as salons_router
from salonbook.api.v1.session import router as session_router
from salonbook.api.v1.wallet import router as wallet_router
from salonbook.api.v1.wizard import router as wizard_router
from salonbook.api.webhooks import router as webhooks_router
from salonbook.core.config import settings

class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("booking_id", "intent_id", "user_id", "amount", "status", "reason", "error"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

app = FastAPI(title=f"{settings.BUSINESS_NAME} Booking API", version="1.0.0")

app.include_router(session_router, prefix="/api/v1", tags=["session"])
app.include_router(wizard_router, prefix="/api/v1", tags=["wizard"])
app.include_router(salons_router, prefix="/api/v1", tags=["salons"])
app.include_router(checkout_router, prefix="/api/v1", tags=["checkout"])
app.include_router(bookings_router, prefix="/api/v1", tags=["bookings"])
app.include_router(wallet_router, prefix="/api/v1", tags=["wallet"])
app.include_router(earnings_router, prefix="/api/v1", tags=["earnings"])
app.include_router(admin_router, prefix="/api/v1", tags=["admin"])
app.include_router(webhooks_router, tags=["webhooks"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
