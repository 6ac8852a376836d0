from typing import List
from pydantic import BaseModel

from models.schemas.responses.auth import UserInfoSchema


class UserResponse(BaseModel):
    success: bool = True
    message: str
    data: UserInfoSchema


class PaginationSchema(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class UserListResponse(BaseModel):
    success: bool = True
    data: List[UserInfoSchema]
    pagination: PaginationSchema
