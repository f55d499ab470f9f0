"""
Uniform {success, data?, message?} envelope for every JSON response.
"""

from fastapi import Response
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

import config


def dump(value):
    """DTOs are serialized with their camelCase aliases."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, (list, tuple)):
        return [dump(v) for v in value]
    if isinstance(value, dict):
        return {k: dump(v) for k, v in value.items()}
    return jsonable_encoder(value)


def envelope(data=None, message: str | None = None, success: bool = True, **extra) -> dict:
    body = {"success": success}
    if data is not None:
        body["data"] = dump(data)
    if message is not None:
        body["message"] = message
    for key, value in extra.items():
        if value is not None:
            body[key] = dump(value)
    return body


def set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=config.ACCESS_TOKEN_COOKIE,
        value=token,
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite="strict",
        max_age=config.JWT_EXPIRES_HOURS * 3600,
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(config.ACCESS_TOKEN_COOKIE, httponly=True, secure=config.COOKIE_SECURE,
                           samesite="strict")


def set_guest_cookie(response: Response, guest_id: str | None) -> None:
    """No-op when no new guest cart was created."""
    if guest_id is None:
        return
    response.set_cookie(
        key=config.GUEST_CART_COOKIE,
        value=guest_id,
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite="lax",
        max_age=config.GUEST_CART_COOKIE_DAYS * 24 * 3600,
    )


def clear_guest_cookie(response: Response) -> None:
    response.delete_cookie(config.GUEST_CART_COOKIE, httponly=True, secure=config.COOKIE_SECURE,
                           samesite="lax")
