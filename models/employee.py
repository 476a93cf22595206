from sqlmodel import SQLModel, Field
from typing import Optional


class Employee(SQLModel, table=True):
    __tablename__ = "employee"

    id: str = Field(primary_key=True)
    name: str
    store_id: str = Field(index=True)
    position: Optional[str] = Field(default=None)
