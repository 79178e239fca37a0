import re
from datetime import datetime
from typing import List, Optional

from bs4 import BeautifulSoup

from bloghub_spider.errors import FetchError
from bloghub_spider.schema import Record
from bloghub_spider.spider import Fetcher, fetch_time, get_blog_links, parse_blog_info

LINK_SELECTOR = "div.posts div.post-stub a.post-stub__title"
TITLE_SELECTOR = 'meta[property="og:title"]'
AUTHOR_SELECTOR = 'meta[name="author"]'
CONTENT_SELECTOR = "article.post"
DATE_SELECTOR = "footer.post__footer div.row div.post__date time"
ZONE_RE = re.compile(r"^(?:[A-Z]{3,5}|[+-]\d{2}(?:\d{2})?)$")


def parse_date(text: str) -> datetime:
    """
    解析形如 `2024-01-05 10:00:00 +0000 UTC` 或 `2024-01-05 10:00:00 +0300 +0300` 的时间。
    最后一段必须是大写时区缩写或 ±HH、±HHMM 偏移量，解析时只用前三段。
    """
    parts = text.split()
    if len(parts) != 4 or not ZONE_RE.match(parts[3]):
        raise ValueError(f"unexpected time format: {text!r}")
    return datetime.strptime(" ".join(parts[:3]), "%Y-%m-%d %H:%M:%S %z")


class Antonz:
    source_name = "antonz.org"
    blogger_name = "Anton Zhiyanov"
    homepage = "https://antonz.org/"

    def __init__(self, fetcher: Optional[Fetcher] = None):
        self.fetcher = fetcher or Fetcher()

    def page_urls(self) -> List[str]:
        return ["https://antonz.org/all/"]

    def links_from_page(self, page_url: str) -> List[str]:
        return get_blog_links(self.fetcher, page_url, LINK_SELECTOR, "https://antonz.org")

    def _published_at(self, doc: BeautifulSoup, url: str) -> datetime:
        node = doc.select_one(DATE_SELECTOR)
        if node is None or not node.get("datetime"):
            return fetch_time(url)
        try:
            return parse_date(node["datetime"].strip())
        except ValueError as e:
            raise FetchError(f"failed to parse time {url}: {e}") from e

    def parse_post(self, html: str, url: str) -> Record:
        doc = BeautifulSoup(html, "html.parser")
        return parse_blog_info(doc, url, self.source_name, TITLE_SELECTOR, AUTHOR_SELECTOR, CONTENT_SELECTOR,
                               lambda d: self._published_at(d, url))

    def blog_info(self, link: str) -> Record:
        return self.parse_post(self.fetcher.get_html(link), link)
