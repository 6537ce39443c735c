import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from auth import SessionUser, get_current_user, require_admin
from database import USERS, get_db, get_documents, now, parse_object_id
from errors import Forbidden, InvalidRequest, NotFound
from schemas import LastLoginUpdate, RoleUpdate, User, UserCreate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def _already_exists(email: str) -> dict:
    return {"success": True, "message": "User already exists", "email": email, "insertedId": None}


def _require_self(user: SessionUser, email: str) -> None:
    if user.email != email:
        raise Forbidden()


def register_user(db: Database, req: UserCreate) -> dict:
    """Create a customer account unless one already exists for the email."""
    if db[USERS].find_one({"email": req.email}):
        return _already_exists(req.email)
    stamp = now()
    user_doc = User(
        name=req.name,
        email=req.email,
        image=req.image,
        role="customer",
        created_at=stamp,
        last_login_time=stamp,
    )
    try:
        result = db[USERS].insert_one(user_doc.model_dump())
    except DuplicateKeyError:
        # Lost a concurrent registration for the same email.
        return _already_exists(req.email)
    logger.info("Registered user %s", req.email)
    return {"success": True, "insertedId": str(result.inserted_id)}


@router.post("")
def create_user(req: UserCreate, db: Database = Depends(get_db)):
    return register_user(db, req)


@router.get("")
def list_users(user: SessionUser = Depends(require_admin), db: Database = Depends(get_db)):
    return get_documents(db, USERS, {"email": {"$ne": user.email}})


@router.get("/role/{email}")
def get_role(email: str, user: SessionUser = Depends(get_current_user), db: Database = Depends(get_db)):
    record = db[USERS].find_one({"email": email}, {"role": 1})
    if not record:
        raise NotFound("User not found")
    return {"success": True, "role": record.get("role", "customer")}


@router.patch("/role/{user_id}")
def update_role(user_id: str, body: RoleUpdate, user: SessionUser = Depends(require_admin),
                db: Database = Depends(get_db)):
    oid = parse_object_id(user_id, "user ID")
    result = db[USERS].update_one({"_id": oid}, {"$set": {"role": body.role, "status": "verified"}})
    if result.matched_count == 0:
        raise NotFound("User not found")
    logger.info("%s set role of user %s to %s", user.email, user_id, body.role)
    return {"success": True, "modifiedCount": result.modified_count}


@router.patch("/request-seller/{email}")
def request_seller(email: str, user: SessionUser = Depends(get_current_user), db: Database = Depends(get_db)):
    _require_self(user, email)
    # status None matches both a missing and a null field
    result = db[USERS].update_one({"email": email, "status": None}, {"$set": {"status": "requested"}})
    if result.matched_count == 0:
        if not db[USERS].find_one({"email": email}):
            raise NotFound("User not found")
        raise InvalidRequest("Seller status already requested")
    return {"success": True, "modifiedCount": result.modified_count}


@router.patch("/{email}")
def update_last_login(email: str, body: Optional[LastLoginUpdate] = None,
                      user: SessionUser = Depends(get_current_user), db: Database = Depends(get_db)):
    _require_self(user, email)
    last_login = body.last_login_time if body and body.last_login_time else now()
    result = db[USERS].update_one({"email": email}, {"$set": {"last_login_time": last_login}})
    if result.matched_count == 0:
        raise NotFound("User not found")
    return {"success": True, "modifiedCount": result.modified_count}
