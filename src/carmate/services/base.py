"""Common base for services working against a database session."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession


class BaseService:
    """
    Holds the request- or job-scoped session and a per-class logger.

    The session is owned by the caller (a FastAPI dependency or the worker job),
    services never close it.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db
        self._logger = logging.getLogger(f"{self.__module__}.{self.__class__.__name__}")

    @property
    def db(self) -> AsyncSession:
        return self._db

    @property
    def logger(self) -> logging.Logger:
        return self._logger
