from fastapi import APIRouter
from sqlalchemy.exc import SQLAlchemyError

from storefront.data.database import ping

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    try:
        ping()
        database = "ok"
    except SQLAlchemyError:
        database = "unavailable"
    return {"status": "ok", "database": database}
