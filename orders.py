"""
Order placement

An order is accepted only if the plant has enough stock. The stock check and
the decrement are a single conditional update on the plant document, so two
concurrent orders can never jointly take more than what is stored.
"""

import logging
from typing import Any, Dict, Optional

from bson import ObjectId
from pymongo.database import Database

from database import ORDERS, PLANTS, now, parse_object_id
from errors import InsufficientStock, InvalidRequest, NotFound
from schemas import OrderRequest

logger = logging.getLogger(__name__)


def find_plant(db: Database, plant_id: ObjectId) -> Optional[Dict[str, Any]]:
    return db[PLANTS].find_one({"_id": plant_id})


def reserve_stock(db: Database, plant_id: ObjectId, quantity: int) -> bool:
    """Decrement stock by quantity iff at least that much is left."""
    result = db[PLANTS].update_one(
        {"_id": plant_id, "quantity": {"$gte": quantity}},
        {"$inc": {"quantity": -quantity}},
    )
    return result.modified_count == 1


def release_stock(db: Database, plant_id: ObjectId, quantity: int) -> None:
    db[PLANTS].update_one({"_id": plant_id}, {"$inc": {"quantity": quantity}})


def place_order(db: Database, order: OrderRequest) -> str:
    if not order.email or not order.plant_id or not order.transaction_id:
        raise InvalidRequest("Missing required fields")
    plant_id = parse_object_id(order.plant_id, "plant ID")

    plant = find_plant(db, plant_id)
    if not plant:
        raise NotFound("Plant not found")
    if order.quantity > int(plant.get("quantity", 0)):
        raise InsufficientStock()

    # The read above can be stale by now; the conditional update is authoritative.
    if not reserve_stock(db, plant_id, order.quantity):
        logger.info("Stock for plant %s ran out before order %s", plant_id, order.transaction_id)
        raise InsufficientStock()

    doc = order.model_dump(exclude_none=True)
    doc["created_at"] = now()
    try:
        result = db[ORDERS].insert_one(doc)
    except Exception:
        logger.exception("Order insert failed, returning %d units to plant %s", order.quantity, plant_id)
        try:
            release_stock(db, plant_id, order.quantity)
        except Exception:
            logger.exception("Could not return %d units to plant %s", order.quantity, plant_id)
        raise

    order_id = str(result.inserted_id)
    logger.info("Order %s placed by %s: %d x plant %s", order_id, order.email, order.quantity, plant_id)
    return order_id
