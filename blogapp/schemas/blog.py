from pydantic import BaseModel, ConfigDict
from typing import Optional, List
from datetime import date, datetime


class BlogBase(BaseModel):
    title: str
    content: str
    image_url: Optional[str] = None


class BlogCreate(BlogBase):
    pass


class BlogUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    is_good: Optional[bool] = None
    image_url: Optional[str] = None


class Blog(BlogBase):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    is_good: bool = False
    likes_count: int = 0
    dislikes_count: int = 0
    created_at: datetime
    updated_at: datetime


class BlogsPage(BaseModel):
    items: List[Blog]
    total_count: int
    page: int
    page_size: int
    total_pages: int


class BlogDateCount(BaseModel):
    day: date
    count: int
