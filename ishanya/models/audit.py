# ishanya/models/audit.py
from sqlalchemy import Column, Integer, String, DateTime, JSON, func
from ishanya.db.base import Base

class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True)
    occurred_at = Column(DateTime, server_default=func.now(), nullable=False)

    action = Column(String(64), nullable=False)
    status = Column(String(32), nullable=True)

    target_type = Column(String(64), nullable=True)
    target_id   = Column(String(128), nullable=True)

    actor_id   = Column(String(128), nullable=True)
    actor_name = Column(String(255), nullable=True)
    ip_address = Column(String(64), nullable=True)
    path       = Column(String(255), nullable=True)
    correlation_id = Column(String(64), nullable=True)

    hmac_hash = Column(String(128), nullable=False)

    prev_values = Column(JSON, nullable=True)
    new_values  = Column(JSON, nullable=True)

    def to_dict(self):
        return {
            "id": self.id,
            "occurred_at": self.occurred_at.isoformat() if self.occurred_at else None,
            "action": self.action,
            "status": self.status,
            "target_type": self.target_type,
            "target_id": self.target_id,
            "actor_name": self.actor_name,
            "path": self.path,
            "correlation_id": self.correlation_id,
            "new_values": self.new_values,
        }
