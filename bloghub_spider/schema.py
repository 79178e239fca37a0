"""数据结构：一篇文章（Record）与一个博客源的描述信息（Meta）。"""
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from bloghub_spider.errors import ValidationError


def format_time(t: datetime) -> str:
    """ISO-8601 格式；UTC 时间使用 `Z` 结尾，无时区的时间按 UTC 处理。"""
    if t.tzinfo is None:
        t = t.replace(tzinfo=timezone.utc)
    if t.utcoffset() == timedelta(0):
        return t.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    return t.isoformat()


@dataclass
class Record:
    source: str
    link: str
    title: str
    author: str
    content: str
    published_at: datetime
    id: Optional[str] = None

    def validate(self) -> None:
        """标题和作者必须非空。"""
        if not self.title or not self.title.strip():
            raise ValidationError(f"title is empty: {self.link}")
        if not self.author or not self.author.strip():
            raise ValidationError(f"author is empty: {self.link}")

    def with_id(self, record_id: str) -> "Record":
        return replace(self, id=record_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "link": self.link,
            "title": self.title,
            "author": self.author,
            "content": self.content,
            "published_at": format_time(self.published_at),
        }


@dataclass
class Meta:
    source: str
    home_page: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"source": self.source, "home_page": self.home_page, "name": self.name}
