import logging
import sys
from pathlib import Path

# backend/scripts/seed_reference_data.py -> parents[1] == backend/
sys.path.append(str(Path(__file__).resolve().parents[1]))

import tenantcrm.db.models  # noqa: F401, E402
from tenantcrm.db.session import SessionLocal  # noqa: E402
from tenantcrm.tenants.store import ensure_reference_data  # noqa: E402


def main() -> int:
    """Insert any missing global roles and permissions; safe to run repeatedly."""
    db = SessionLocal()
    try:
        created = ensure_reference_data(db)
        db.commit()
    finally:
        db.close()

    print(f"[OK] reference data: {created['roles']} roles and {created['permissions']} permissions added")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    raise SystemExit(main())
