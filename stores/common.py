import logging
import uuid
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from errors import StorageError, ValidationError

logger = logging.getLogger(__name__)


def parse_workspace_id(value):
    """Return value as a UUID, or None when it is missing or malformed."""
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


@contextmanager
def unit_of_work(db, action):
    """Run one store operation and commit it.

    Any failure rolls the session back, so no partial change survives.
    SQLAlchemy errors raised anywhere in the block, queries included, come out
    as StorageError.
    """
    try:
        yield
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Storage failure during %s", action)
        raise StorageError(f"Could not {action}") from e
    except Exception:
        db.session.rollback()
        raise


def clean_text(value):
    if value is None:
        return None
    return str(value).strip()


def require_text(field, value, max_length):
    value = clean_text(value)
    if not value:
        raise ValidationError(field, f"{field} is required.")
    if len(value) > max_length:
        raise ValidationError(field, f"{field} must be at most {max_length} characters.")
    return value


def optional_text(field, value, max_length):
    value = clean_text(value)
    if not value:
        return None
    if len(value) > max_length:
        raise ValidationError(field, f"{field} must be at most {max_length} characters.")
    return value


def require_choice(field, value, choices, max_length):
    value = require_text(field, value, max_length).lower()
    if value not in choices:
        raise ValidationError(field, f"{field} must be one of: {', '.join(choices)}.")
    return value
