import logging

from fastapi import FastAPI

from appointments.api.v1.calendars import router as calendars_router
from appointments.api.v1.public import router as public_router
from appointments.core.config import settings

class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("calendar_id", "booking_id", "share_id", "status", "kind", "reason", "error"):
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

app = FastAPI(title="Appointment Scheduler", version="1.0.0")

app.include_router(public_router, prefix="/api/v1", tags=["public"])
app.include_router(calendars_router, prefix="/api/v1", tags=["calendars"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
