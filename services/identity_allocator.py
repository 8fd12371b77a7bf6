"""
Identity allocator - strictly increasing receipt ids starting at 1.

The counter is stored on the registry state row, so it survives restarts
together with the rest of the registry state.
"""
from sqlalchemy.orm import Session

from services.access_gate import load_state


def next_id(db: Session) -> int:
     """Return the current counter value and advance it."""
     state = load_state(db)
     value = state.next_id
     state.next_id = value + 1
     return value


def peek_next(db: Session) -> int:
     """Next id to be allocated, without consuming it."""
     return load_state(db).next_id
