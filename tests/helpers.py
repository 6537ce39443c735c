from bson import ObjectId

from auth import create_token
from database import PLANTS, USERS


def login(client, email):
    client.cookies.set("token", create_token({"email": email}))


def add_plant(db, **fields) -> str:
    doc = {"name": "Fern", "image": "http://x/1.jpg", "price": 9.99, "quantity": 5}
    doc.update(fields)
    return str(db[PLANTS].insert_one(doc).inserted_id)


def add_user(db, email, role="customer", **fields) -> ObjectId:
    doc = {"email": email, "name": email.split("@")[0], "image": "http://x/u.png", "role": role, "status": None}
    doc.update(fields)
    return db[USERS].insert_one(doc).inserted_id
