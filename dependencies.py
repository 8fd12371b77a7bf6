# dependencies.py
"""
Shared FastAPI dependencies: caller authentication and the registry instance.

The caller identity is the ``sub`` claim of an HS256 bearer token. Whether
that identity may mutate the registry is decided by the access gate, not here.
"""
import logging
import os
from typing import Optional

from fastapi import HTTPException, Request
from jose import JWTError, jwt
from dotenv import load_dotenv

from database import SessionLocal
from services import ReceiptRegistry

load_dotenv()

logger = logging.getLogger(__name__)

SECRET_KEY = os.getenv("JWT_SECRET")
ALGORITHM = "HS256"

registry = ReceiptRegistry(SessionLocal)


def get_registry() -> ReceiptRegistry:
     return registry


def verify_token(request: Request) -> dict:
     auth = request.headers.get("Authorization")
     if not auth or not auth.startswith("Bearer "):
          raise HTTPException(status_code=401, detail="Missing token")
     token = auth.split(" ")[1]
     if not SECRET_KEY:
          logger.error("JWT_SECRET is not set; rejecting authenticated request")
          raise HTTPException(status_code=403, detail="Invalid token")
     try:
          payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
          return payload
     except JWTError:
          raise HTTPException(status_code=403, detail="Invalid token")


def get_caller(request: Request) -> Optional[str]:
     """Authenticated caller identity taken from the token's ``sub`` claim."""
     payload = verify_token(request)
     caller = payload.get("sub")
     if not caller:
          raise HTTPException(status_code=403, detail="Token has no subject")
     return str(caller)
