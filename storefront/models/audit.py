from datetime import datetime

from sqlmodel import Field, SQLModel


class AuditLog(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    event: str = Field(index=True)  # payment_goods, payment_recharge, payment_checksum_failed, ...
    user_id: int | None = Field(default=None, index=True)
    detail: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
