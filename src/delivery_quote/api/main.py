from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware

from ..engine.models import TaskType
from ..engine.pricing_engine import format_fee_delta
from .schemas import DraftIn
from .sessions_api import router as sessions_router
from .state import engine, order_book

app = FastAPI(
    title="Delivery Quote API",
    description="Backend API for guided delivery order creation and pricing",
    version="1.0.0"
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include wizard session API
app.include_router(sessions_router)


@app.get("/")
async def root():
    return {"status": "online", "message": "Delivery Quote API Active"}


@app.get("/rates")
async def get_rates(task_type: TaskType = TaskType.SEND):
    """Weight, size and service options offered for a task type."""
    rates = engine.rates
    mode = engine.settings.fulfillment_mode
    return {
        "task_type": task_type.value,
        "fulfillment_mode": mode,
        "weights": [
            {"id": b.bracket_id, "label": b.label, "fee": b.fee(mode)}
            for b in rates.weight_options(task_type)
        ],
        "sizes": [
            {"id": b.bracket_id, "label": b.label, "fee": b.fee}
            for b in rates.size_options(task_type)
        ],
        "services": [
            {
                "id": s.service_id,
                "label": s.label,
                "description": s.description,
                "fee": s.fee,
                "fee_label": format_fee_delta(s.fee),
            }
            for s in rates.service_levels
        ],
        "rates_hash": rates.rates_hash,
    }


@app.post("/quote")
async def calculate_quote(req: DraftIn):
    breakdown = engine.calculate(req.to_draft())
    return jsonable_encoder(breakdown)


@app.get("/orders/{order_id}")
async def get_order(order_id: str):
    """Created order, as seen by the tracking view."""
    try:
        return order_book.orders[order_id]
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Order '{order_id}' not found")
