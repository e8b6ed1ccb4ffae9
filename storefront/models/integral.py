from datetime import datetime

from sqlmodel import Field, SQLModel


class IntegralEntry(SQLModel, table=True):
    """Loyalty ledger, append-only. confirmed flips once the goods are received."""

    id: int | None = Field(default=None, primary_key=True)
    product_id: int = Field(index=True)
    product_name: str = ""
    market_cents: int = 0
    web_market_cents: int = 0
    integral: int = 0
    confirmed: bool = False
    user_email: str = Field(index=True)
    created_at: datetime | None = Field(default_factory=datetime.utcnow)
