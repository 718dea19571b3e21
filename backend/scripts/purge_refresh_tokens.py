import argparse
import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

import tenantcrm.db.models  # noqa: F401, E402
from tenantcrm.auth.service import purge_expired_refresh_tokens  # noqa: E402
from tenantcrm.db.session import SessionLocal  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Delete refresh tokens that expired before the grace window.")
    parser.add_argument(
        "--grace-days",
        type=int,
        default=0,
        help="keep tokens that expired within this many days (useful when investigating reuse)",
    )
    args = parser.parse_args(argv)

    cutoff = datetime.utcnow() - timedelta(days=args.grace_days)
    db = SessionLocal()
    try:
        deleted = purge_expired_refresh_tokens(db, now=cutoff)
    finally:
        db.close()

    print(f"[OK] purged {deleted} expired refresh tokens (cutoff {cutoff.isoformat()}Z)")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    raise SystemExit(main())
