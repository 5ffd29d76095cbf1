from datetime import datetime, timezone

from sqlalchemy import MetaData


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


metadata = MetaData()
