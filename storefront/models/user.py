from datetime import datetime

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    email: str = Field(unique=True, index=True)
    full_name: str = ""
    money_cents: int = 0  # Account balance, topped up by online recharge
    created_at: datetime | None = Field(default_factory=datetime.utcnow)
