# main.py
import json
import logging
from datetime import date
from pathlib import Path
from typing import List, Optional

import fastapi
from fastapi import Depends, Request, Response, status
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from parking_split import models  # noqa: F401  (registers the tables on metadata)
from parking_split import state as st
from parking_split.acting import ACTING_COOKIE, ActingAs, get_acting_occupant, get_terms
from parking_split.config import configure_logging
from parking_split.data_models import BillingTerms
from parking_split.database import database, engine, metadata
from parking_split.errors import ParkingError
from parking_split.export import export_filename, render_period_pdf
from parking_split.service import ParkingService
from parking_split.session import ParkingSession
from parking_split.stores import BookingStore, PeriodStatusStore

logger = logging.getLogger(__name__)

# FastAPI Setup
app = fastapi.FastAPI(title="Parking Split")
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


class BookingCreate(BaseModel):
    date: date
    occupant: Optional[str] = None


class PaidUpdate(BaseModel):
    is_paid: bool


def get_service(terms: BillingTerms = Depends(get_terms)) -> ParkingService:
    return ParkingService(BookingStore(database), PeriodStatusStore(database), terms)


def get_today() -> date:
    return date.today()


class ConnectionManager:
    def __init__(self):
        self.active_connections: List[fastapi.WebSocket] = []

    async def connect(self, websocket: fastapi.WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)

    def disconnect(self, websocket: fastapi.WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)

    async def broadcast(self, message: str, exclude: Optional[fastapi.WebSocket] = None):
        for connection in list(self.active_connections):
            if connection is not exclude:
                await connection.send_text(message)

manager = ConnectionManager()


async def announce_change(exclude: Optional[fastapi.WebSocket] = None):
    """Tells every open dashboard to reload so both parties see the same state."""
    await manager.broadcast(json.dumps({"type": "state_changed"}), exclude=exclude)


@app.exception_handler(ParkingError)
async def parking_error_handler(request: Request, exc: ParkingError):
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get("/", response_class=RedirectResponse)
async def read_root():
    """Redirects the root URL to the dashboard."""
    return RedirectResponse(url="/dashboard")


@app.get("/dashboard", response_class=HTMLResponse)
async def read_dashboard(
    request: Request,
    day: Optional[date] = fastapi.Query(None, alias="date"),
    year: Optional[int] = None,
    month: Optional[int] = fastapi.Query(None, ge=1, le=12),
    acting_as: str = Depends(get_acting_occupant),
    service: ParkingService = Depends(get_service),
    terms: BillingTerms = Depends(get_terms),
    today: date = Depends(get_today),
):
    """Serves the calendar, the selected day and the billing periods."""
    bookings, statuses = await service.load()
    view_state = st.with_loaded(st.initial_state(terms, today, acting_as), bookings, statuses)
    if day is not None:
        view_state = st.with_view_month(st.with_selected_date(view_state, day), day.year, day.month)
    if year is not None and month is not None:
        view_state = st.with_view_month(view_state, year, month)
    return templates.TemplateResponse(request, "dashboard.html", {"view": st.to_view(view_state, terms, today)})


@app.get("/api/config")
async def read_config(terms: BillingTerms = Depends(get_terms)):
    return {
        "daily_rate": terms.daily_rate,
        "monthly_rent": terms.monthly_rent,
        "contract_start": terms.contract_start.isoformat(),
        "occupants": list(terms.occupants),
        "rate_payer": terms.rate_payer,
        "currency": terms.currency,
    }


@app.post("/api/acting-as")
async def set_acting_as(response: Response, choice: ActingAs, service: ParkingService = Depends(get_service)):
    """Chooses which party this browser acts as."""
    service.check_occupant(choice.occupant)
    response.set_cookie(key=ACTING_COOKIE, value=choice.occupant, samesite="lax")
    return {"acting_as": choice.occupant}


@app.get("/api/bookings")
async def list_bookings(service: ParkingService = Depends(get_service)):
    return [st.booking_to_dict(b) for b in await service.booking_store.list()]


@app.post("/api/bookings", status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking: BookingCreate,
    response: Response,
    acting_as: str = Depends(get_acting_occupant),
    service: ParkingService = Depends(get_service),
):
    """Claims a day; re-claiming a day one already holds answers 200 without a broadcast."""
    claimed, created = await service.claim(booking.date, booking.occupant or acting_as)
    if created:
        await announce_change()
    else:
        response.status_code = status.HTTP_200_OK
    return st.booking_to_dict(claimed)


@app.delete("/api/bookings/by-date/{day}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_booking_by_date(
    day: date,
    acting_as: str = Depends(get_acting_occupant),
    service: ParkingService = Depends(get_service),
):
    await service.release_date(day, acting_as)
    await announce_change()


@app.delete("/api/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_booking(
    booking_id: int,
    acting_as: str = Depends(get_acting_occupant),
    service: ParkingService = Depends(get_service),
):
    await service.release_booking(booking_id, acting_as)
    await announce_change()


@app.get("/api/periods")
async def list_periods(
    day: Optional[date] = fastapi.Query(None, alias="date"),
    service: ParkingService = Depends(get_service),
    terms: BillingTerms = Depends(get_terms),
    today: date = Depends(get_today),
):
    """Every billing period up to the relevant horizon, with its split and paid flag."""
    _, statuses, summaries = await service.overview(day or today, today)
    return {
        "periods": [st.summary_to_dict(s, terms) for s in summaries],
        "statuses": [st.status_to_dict(s) for s in statuses],
    }


@app.put("/api/periods/{start}/{end}")
async def update_period(start: date, end: date, update: PaidUpdate, service: ParkingService = Depends(get_service)):
    saved = await service.set_paid(start, end, update.is_paid)
    await announce_change()
    return st.status_to_dict(saved)


@app.post("/api/periods/{start}/{end}/toggle")
async def toggle_period(start: date, end: date, service: ParkingService = Depends(get_service)):
    saved = await service.toggle_paid(start, end)
    await announce_change()
    return st.status_to_dict(saved)


@app.get("/api/periods/{start}/{end}/pdf")
async def export_period(
    start: date,
    end: date,
    service: ParkingService = Depends(get_service),
    terms: BillingTerms = Depends(get_terms),
    today: date = Depends(get_today),
):
    summary, bookings = await service.find_summary(start, end, today)
    return Response(
        content=render_period_pdf(summary, bookings, terms),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(summary.period)}"'},
    )


@app.websocket("/ws")
async def websocket_endpoint(
    websocket: fastapi.WebSocket,
    service: ParkingService = Depends(get_service),
    terms: BillingTerms = Depends(get_terms),
):
    """
    Live dashboard connection. Each connection keeps its own session state;
    changes made through it are announced to every other connection.
    """
    await manager.connect(websocket)
    session = ParkingSession(service, terms)
    await session.load()
    await websocket.send_text(json.dumps({"type": "state", "data": session.view()}))

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await websocket.send_text(json.dumps({"type": "error", "data": "Messages must be JSON."}))
                continue
            if not isinstance(message, dict):
                await websocket.send_text(json.dumps({"type": "error", "data": "Messages must be JSON objects."}))
                continue

            changed = await session.handle_message(message)
            await websocket.send_text(json.dumps({"type": "state", "data": session.view()}))
            if changed:
                await announce_change(exclude=websocket)

    except fastapi.WebSocketDisconnect:
        manager.disconnect(websocket)


@app.on_event("startup")
async def startup():
    configure_logging()
    await database.connect()
    # Create tables if they don't exist
    metadata.create_all(bind=engine)
    logger.info("Parking split started, contract from %s", get_terms().contract_start)


@app.on_event("shutdown")
async def shutdown():
    await database.disconnect()
