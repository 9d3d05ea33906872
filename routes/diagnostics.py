# routes/diagnostics.py
import secrets
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError

from core.config import Settings, settings
from core.database import Database, get_database
from core.errors import Unauthorized
from core.security import get_optional_user
from models.models import User

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Diagnostics"])

REQUIRED_SETTINGS = ("DATABASE_URL", "SECRET_KEY")
RECOMMENDED_SETTINGS = ("FRONTEND_URL", "ADMIN_DIAGNOSTIC_TOKEN")


def admin_token_valid(token: Optional[str]) -> bool:
    expected = settings.ADMIN_DIAGNOSTIC_TOKEN
    if not token or not expected:
        return False
    return secrets.compare_digest(token, expected)


def unset_settings(config: Settings, names) -> list:
    """Names that were not supplied by the environment (or are empty)."""
    return [name for name in names if name not in config.model_fields_set or not getattr(config, name)]


def environment_check(config: Settings, db_error: Optional[str] = None) -> Dict[str, Any]:
    missing_required = unset_settings(config, REQUIRED_SETTINGS)
    if missing_required:
        return {
            "status": "error",
            "message": f"Missing required environment variables: {', '.join(missing_required)}",
            "details": {"missingVars": missing_required},
        }

    if db_error is not None:
        return {
            "status": "error",
            "message": f"Database connection failed: {db_error}",
            "details": {"dbConnection": "error", "dbError": db_error},
        }

    missing_recommended = unset_settings(config, RECOMMENDED_SETTINGS)
    if missing_recommended:
        return {
            "status": "warning",
            "message": (
                "Environment check passed with warnings. "
                f"Missing recommended variables: {', '.join(missing_recommended)}"
            ),
            "details": {"missingVars": missing_recommended, "dbConnection": "success"},
        }

    return {
        "status": "success",
        "message": "Environment check passed successfully",
        "details": {"dbConnection": "success"},
    }


# ==================================================================
#  🩺 Environment and database health (session or shared token)
# ==================================================================
@router.get("")
def run_diagnostics(
    admin_token: Optional[str] = Query(default=None),
    current_user: Optional[User] = Depends(get_optional_user),
    db: Database = Depends(get_database),
):
    if current_user is None and not admin_token_valid(admin_token):
        raise Unauthorized("Authentication required to access diagnostics")

    server_info = {
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
        "hasDbUrl": bool(db.url),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    db_error = None
    try:
        db.ping()
        database = {"status": "connected"}
    except SQLAlchemyError as e:
        # Raw driver text is only shown to authorized callers
        logger.warning("Diagnostics database ping failed: %s", e)
        db_error = str(e)
        database = {"status": "error", "error": db_error}

    return {
        "status": "ok",
        "serverInfo": server_info,
        "environmentCheck": environment_check(settings, db_error),
        "database": database,
        "auth": {"sessionAvailable": current_user is not None},
    }
