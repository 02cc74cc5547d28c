import logging
from typing import Awaitable, Callable

from fastapi import FastAPI, Request, Response

from .routers import reservations, rooms
from .utils.request_id import REQUEST_ID_HEADER, resolve_request_id, set_request_id

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="Room Reservation API")


async def request_id_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
    set_request_id(request_id)
    try:
        response = await call_next(request)
    finally:
        set_request_id(None)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


app.middleware("http")(request_id_middleware)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(rooms.router)
app.include_router(reservations.router)
