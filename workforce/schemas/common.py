# workforce/schemas/common.py
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes on the Python side, camelCase on the wire"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationOut(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class MessageOut(BaseModel):
    message: str


class UserRef(CamelModel):
    """Inlined user on denormalized views"""

    id: int
    name: str
    email: str


class ErrorOut(BaseModel):
    error: str
    code: str
    timestamp: str
    details: Optional[list] = None
