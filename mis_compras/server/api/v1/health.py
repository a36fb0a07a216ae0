"""
Liveness and version endpoints of the procurement API.

Both are public. Load balancers poll ``/health``; ``/version`` tells the
front end which release and Alembic schema revision it is talking to.
"""

from fastapi import APIRouter

from mis_compras.server.core import constant

router = APIRouter()


@router.get(
    "/health",
    summary="Liveness",
    description="Answers as soon as the procurement API accepts requests; does not touch the database.",
    response_description='Always {"status": "ok"}.',
)
async def health_check():
    return {"status": "ok"}


@router.get(
    "/version",
    summary="Release and Schema",
    description="Release of the Mis Compras API and the schema revision its migrations expect.",
    response_description="Release number and Alembic revision.",
)
async def version():
    """``constant.VERSION`` plus the revision id of the newest migration shipped with it."""
    return {"version": constant.VERSION, "schema_version": constant.SCHEMA_VERSION}
