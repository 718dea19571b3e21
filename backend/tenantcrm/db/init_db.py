import logging

from tenantcrm.db.base import Base
from tenantcrm.db.session import SessionLocal, engine
import tenantcrm.db.models  # noqa
from tenantcrm.tenants.store import ensure_reference_data

logger = logging.getLogger(__name__)


def init_db():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        created = ensure_reference_data(db)
        db.commit()
    finally:
        db.close()
    logger.info("Reference data ready: %s new roles, %s new permissions", created["roles"], created["permissions"])


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
