"""博客源适配器的能力接口。

每个博客源实现以下属性与方法，调度器对它们一视同仁；适配器只负责抓取和解析，不接触存储。
"""
from typing import List, Protocol

from bloghub_spider.schema import Record


class Blogger(Protocol):
    source_name: str
    blogger_name: str
    homepage: str

    def page_urls(self) -> List[str]:
        """需要扫描的列表页地址。"""
        ...

    def links_from_page(self, page_url: str) -> List[str]:
        """从列表页提取文章链接，失败抛出 FetchError。"""
        ...

    def blog_info(self, link: str) -> Record:
        """抓取并解析一篇文章，失败抛出 FetchError。"""
        ...

    def parse_post(self, html: str, url: str) -> Record:
        """解析已下载的文章 HTML（离线调试用）。"""
        ...
