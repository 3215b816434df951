"""Translate service errors into HTTP responses at the route boundary"""

import logging

from fastapi import HTTPException
from sqlmodel import Session

from spearo.services.errors import SpearoError

logger = logging.getLogger(__name__)


def to_http_exception(exc: SpearoError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)


def unclassified_failure(session: Session, action: str) -> HTTPException:
    """Roll back, log the active exception, and collapse it into a generic 500"""
    session.rollback()
    logger.exception("Unexpected failure while %s", action)
    return HTTPException(status_code=500, detail="Something went wrong!")
