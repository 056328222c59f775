# ishanya/db/base.py
from datetime import date, datetime

from sqlalchemy.orm import declarative_base

Base = declarative_base()


class DictMixin:
    """JSON-friendly dump of a row; columns listed in `_hidden` are skipped."""

    _hidden: tuple = ()

    def to_dict(self) -> dict:
        out = {}
        for col in self.__table__.columns:
            if col.key in self._hidden:
                continue
            v = getattr(self, col.key)
            if isinstance(v, (date, datetime)):
                v = v.isoformat()
            out[col.key] = v
        return out
