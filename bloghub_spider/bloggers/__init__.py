"""已支持的博客源。新增博客源时在 `BLOGGERS` 中登记其类。"""
from typing import Iterable, List, Optional

from bloghub_spider.bloggers.antonz import Antonz
from bloghub_spider.bloggers.base import Blogger
from bloghub_spider.spider import Fetcher

BLOGGERS = {
    Antonz.source_name: Antonz,
}


def build_bloggers(names: Optional[Iterable[str]] = None, fetcher_factory=Fetcher) -> List[Blogger]:
    """按源名创建适配器，names 为空时创建全部；未知源名抛出 KeyError。"""
    selected = list(names) if names else list(BLOGGERS)
    unknown = [n for n in selected if n not in BLOGGERS]
    if unknown:
        raise KeyError(f"unknown sources: {', '.join(unknown)}")
    return [BLOGGERS[n](fetcher_factory()) for n in selected]


__all__ = ["BLOGGERS", "Blogger", "Antonz", "build_bloggers"]
