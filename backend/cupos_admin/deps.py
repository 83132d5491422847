import logging

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from cupos_admin.core.settings import Settings, settings
from cupos_admin.db.column_resolver import ResolvedSchema, resolve_schema
from cupos_admin.db.session import get_db

logger = logging.getLogger("cupos_admin.deps")


def get_settings() -> Settings:
    return settings


def get_schema(request: Request, db: Session = Depends(get_db)) -> ResolvedSchema:
    """Schema resolved once per process and kept on ``app.state``."""
    schema = getattr(request.app.state, "schema", None)
    if schema is None:
        logger.info("Resolving schema on first request")
        schema = resolve_schema(db.get_bind())
        request.app.state.schema = schema
    return schema
