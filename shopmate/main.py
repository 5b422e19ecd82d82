import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from shopmate.api.v1.assistant import router as assistant_router
from shopmate.api.v1.catalog import router as catalog_router
from shopmate.api.v1.sessions import router as sessions_router
from shopmate.api.webhooks import router as webhooks_router
from shopmate.core.config import settings
from shopmate.wiring.dependencies import shutdown

class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("session", "intent", "product_id", "order_id", "status", "candidates", "message_id", "reason"):
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


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    shutdown()


app = FastAPI(title="ShopMate Shopping Assistant", version="1.0.0", lifespan=lifespan)

app.include_router(assistant_router, prefix="/api", tags=["assistant"])
app.include_router(sessions_router, prefix="/api", tags=["sessions"])
app.include_router(catalog_router, prefix="/api", tags=["catalog"])
app.include_router(webhooks_router, tags=["webhooks"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
