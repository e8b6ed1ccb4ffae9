from sqlmodel import Field, SQLModel


class Product(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    title: str = ""
    # Per-variant stock: "CODE,VARIANT,PRICE,PRICE,STOCK|CODE,VARIANT,..." (see services/inventory.py)
    specifications: str = ""
    market_cents: int = 0
    web_market_cents: int = 0
    integral: int = 0  # Loyalty points credited per purchase
