from sqlmodel import Field, SQLModel


class ShippingAddress(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    user_email: str = Field(index=True)
    name: str = ""
    tel: str = ""
    address: str = ""
    is_default: bool = False
