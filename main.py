import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
from auth import SessionUser, clear_session_cookie, create_token, get_current_user, set_session_cookie
from database import (
    PLANTS,
    connect,
    create_document,
    ensure_indexes,
    get_db,
    get_documents,
    parse_object_id,
    serialize_doc,
)
from errors import NotFound
from orders import place_order
from payments import create_payment_intent
from schemas import OrderRequest, PaymentIntentRequest, Plant, SessionClaims
from users import router as users_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("plantnet")


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = connect()
    try:
        ensure_indexes(db)
    except PyMongoError as e:
        logger.warning("Unable to ensure indexes: %s", e)
    app.state.db = db
    yield
    db.client.close()


app = FastAPI(title="plantNet API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(users_router)

# --------------------- Errors ---------------------


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", message)
    return JSONResponse(status_code=400, content={"success": False, "message": message})


@app.exception_handler(PyMongoError)
async def store_error(request: Request, exc: PyMongoError):
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"success": False, "message": "Internal server error"})


@app.exception_handler(Exception)
async def unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"success": False, "message": "Internal server error"})


# --------------------- Routes ---------------------


@app.get("/")
def root():
    return {"message": "Hello from plantNet Server.."}


# Plants
@app.post("/plants")
def create_plant(plant: Plant, db: Database = Depends(get_db)):
    plant_id = create_document(db, PLANTS, plant)
    logger.info("Created plant %s (%s)", plant_id, plant.name)
    return {"success": True, "insertedId": plant_id}


@app.get("/plants")
def list_plants(limit: Optional[int] = None, db: Database = Depends(get_db)):
    return get_documents(db, PLANTS, {}, limit)


@app.get("/plants/{plant_id}")
def get_plant(plant_id: str, db: Database = Depends(get_db)):
    oid = parse_object_id(plant_id, "plant ID")
    doc = db[PLANTS].find_one({"_id": oid})
    if not doc:
        raise NotFound("Plant not found")
    return serialize_doc(doc)


# Payments
@app.post("/create-payment-intent")
def payment_intent(req: PaymentIntentRequest, db: Database = Depends(get_db)):
    return create_payment_intent(db, req)


# Orders
@app.post("/orders")
def create_order(body: OrderRequest, user: SessionUser = Depends(get_current_user), db: Database = Depends(get_db)):
    order_id = place_order(db, body)
    return {"success": True, "insertedId": order_id}


# Session
@app.post("/jwt")
def issue_token(claims: SessionClaims, response: Response):
    token = create_token(claims.model_dump())
    set_session_cookie(response, token)
    return {"success": True}


@app.get("/logout")
def logout(response: Response):
    clear_session_cookie(response)
    return {"success": True}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
