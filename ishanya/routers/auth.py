# ishanya/routers/auth.py
import time
import logging
from typing import Optional
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, Form, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy import or_
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from ishanya.db.session import get_db
from ishanya.models.user import User
from ishanya.core.security import verify_password, try_rehash_on_success

router = APIRouter()
log = logging.getLogger("auth")

# Idle timeout: 1 hour
IDLE_TIMEOUT_SEC = 1 * 60 * 60

STAFF_ROLES = ("administrator", "hr", "teacher")


def get_current_user(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    sess = request.session
    now = int(time.time())
    last = int(sess.get("_last_seen") or 0)
    if last and (now - last) > IDLE_TIMEOUT_SEC:
        sess.clear()
        return None
    sess["_last_seen"] = now

    uid = sess.get("uid")
    if not uid:
        return None
    return db.get(User, uid)


def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    if not user:
        raise HTTPException(HTTP_401_UNAUTHORIZED, "Session expired, please log in again.")
    if not user.is_active:
        raise HTTPException(HTTP_403_FORBIDDEN, "User disabled")
    return user


def require_roles(*roles: str):
    def _dep(
        request: Request,
        user: User = Depends(require_user)
    ) -> User:
        if roles and user.role not in roles:
            raise HTTPException(HTTP_403_FORBIDDEN, "Forbidden")

        # keep the session in sync for the audit log
        s = request.session
        s["uid"] = getattr(user, "id", s.get("uid"))
        s["full_name"] = user.full_name or user.username or user.email
        s["username"] = user.username
        s["role"] = user.role
        return user
    return _dep


require_staff = require_roles(*STAFF_ROLES)
require_admin = require_roles("administrator", "hr")


def _user_payload(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "full_name": user.full_name,
        "email": user.email,
        "role": user.role,
        "is_active": user.is_active,
    }


@router.post("/api/login")
@router.post("/login")
def login(
    request: Request,
    username: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    user = (
        db.query(User)
        .filter(or_(User.username == username, User.email == username))
        .first()
    )
    if not user or not verify_password(password, user.password_hash):
        log.info("Failed login for %s", username)
        raise HTTPException(HTTP_401_UNAUTHORIZED, "Invalid credentials")
    if not user.is_active:
        raise HTTPException(HTTP_403_FORBIDDEN, "User disabled")

    # upgrade the hash when the policy changed
    new_hash = try_rehash_on_success(password, user.password_hash)
    if new_hash:
        user.password_hash = new_hash

    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)

    request.session.clear()
    request.session["uid"] = user.id
    request.session["_last_seen"] = int(time.time())
    request.session["full_name"] = user.full_name or user.username or user.email
    request.session["username"] = user.username
    request.session["role"] = user.role

    return {"ok": True, "user": _user_payload(user)}


@router.post("/logout")
@router.post("/api/logout")
def logout(request: Request):
    request.session.clear()
    return {"ok": True}


@router.get("/api/me")
def me(user: User = Depends(require_user)):
    return {**_user_payload(user), "last_login_at": user.last_login_at}
