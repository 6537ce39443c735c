import logging
from typing import Any, Dict

import stripe
from pymongo.database import Database

from config import STRIPE_SECRET_KEY
from database import parse_object_id
from errors import InsufficientStock, InternalFailure, NotFound
from orders import find_plant
from schemas import PaymentIntentRequest

logger = logging.getLogger(__name__)

MOCK_CLIENT_SECRET = "mock_client_secret"


def charge_amount(price: float, quantity: int) -> float:
    return round(float(price) * quantity, 2)


def create_intent(amount_cents: int, metadata: Dict[str, str]) -> str:
    # Stripe or mock
    if not STRIPE_SECRET_KEY:
        return MOCK_CLIENT_SECRET
    try:
        stripe.api_key = STRIPE_SECRET_KEY
        intent = stripe.PaymentIntent.create(
            amount=amount_cents,
            currency="usd",
            payment_method_types=["card"],
            metadata=metadata,
        )
    except stripe.StripeError:
        logger.exception("Stripe payment intent failed")
        raise InternalFailure("Failed to create payment intent")
    return intent.client_secret


def create_payment_intent(db: Database, req: PaymentIntentRequest) -> Dict[str, Any]:
    plant_id = parse_object_id(req.plant_id, "plant ID")
    plant = find_plant(db, plant_id)
    if not plant:
        raise NotFound("Plant not found")
    if req.quantity > int(plant.get("quantity", 0)):
        raise InsufficientStock("Quantity exceeds available stock")

    amount = charge_amount(plant.get("price", 0), req.quantity)
    client_secret = create_intent(
        int(round(amount * 100)),
        {"plantId": req.plant_id, "quantity": str(req.quantity)},
    )
    return {"clientSecret": client_secret, "amount": amount, "plantName": plant.get("name")}
