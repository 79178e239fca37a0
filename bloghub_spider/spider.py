import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional

import requests
from bs4 import BeautifulSoup

from bloghub_spider.errors import FetchError, MetaWriteError, PersistenceError, ValidationError
from bloghub_spider.links import is_tidy
from bloghub_spider.schema import Meta, Record
from bloghub_spider.storage import Store, open_store

DEFAULT_TIMEOUT = 10
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

logger = logging.getLogger("bloghub.spider")


class Fetcher:
    def __init__(self, timeout: float = DEFAULT_TIMEOUT, user_agent: str = DEFAULT_USER_AGENT,
                 session: Optional[requests.Session] = None):
        """
        HTTP 抓取器，每次请求都带固定超时
        :param timeout: 单次请求超时（秒），超时只影响这一次请求
        :param user_agent: 请求头中的 User-Agent
        """
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    def get_html(self, url: str) -> str:
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(f"请求失败 {url}: {e}") from e
        if resp.status_code != 200:
            raise FetchError(f"请求失败 HTTP {resp.status_code}: {url}")
        return resp.text

    def get_doc(self, url: str) -> BeautifulSoup:
        return BeautifulSoup(self.get_html(url), "html.parser")


def _node_text(node) -> str:
    """属性节点取属性值（如 meta 的 content），否则取文本内容。"""
    if node.name == "meta":
        return (node.get("content") or "").strip()
    if node.name == "time" and node.get("datetime"):
        return node["datetime"].strip()
    return node.get_text().strip()


def extract_links(doc: BeautifulSoup, selector: str, href_prefix: str = "") -> List[str]:
    links = []
    for node in doc.select(selector):
        href = (node.get("href") or "").strip()
        if not href:
            continue
        links.append(href_prefix + href)
    return links


def get_blog_links(fetcher: Fetcher, page_url: str, selector: str, href_prefix: str = "") -> List[str]:
    """抓取列表页，返回选择器命中的链接（保持页面中的顺序）。"""
    return extract_links(fetcher.get_doc(page_url), selector, href_prefix)


def parse_blog_info(doc: BeautifulSoup, url: str, source: str, title_selector: str, author_selector: str,
                    content_selector: str, parse_time: Callable[[BeautifulSoup], datetime]) -> Record:
    """从文章页面提取一条记录；标题、作者或正文缺失时抛出 FetchError。"""
    published_at = parse_time(doc)

    title_node = doc.select_one(title_selector)
    if title_node is None:
        raise FetchError(f"title not found: {url}")
    title = _node_text(title_node)

    author_node = doc.select_one(author_selector)
    if author_node is None:
        raise FetchError(f"author not found: {url}")
    author = _node_text(author_node)

    content_node = doc.select_one(content_selector)
    if content_node is None:
        raise FetchError(f"content not found: {url}")

    record = Record(
        source=source,
        link=url,
        title=title,
        author=author,
        content=str(content_node),
        published_at=published_at,
    )
    try:
        record.validate()
    except ValidationError as e:
        raise FetchError(f"bad post {url}: {e}") from e
    return record


def get_blog_info(fetcher: Fetcher, url: str, source: str, title_selector: str, author_selector: str,
                  content_selector: str, parse_time: Callable[[BeautifulSoup], datetime]) -> Record:
    return parse_blog_info(fetcher.get_doc(url), url, source, title_selector, author_selector,
                           content_selector, parse_time)


def fetch_time(url: str) -> datetime:
    """找不到发布时间时回退为抓取时刻；该值不可复现，只用于展示，绝不参与 ID 计算。"""
    logger.warning(f"未找到发布时间，使用抓取时刻: {url}")
    return datetime.now(timezone.utc)


@dataclass
class DownloadResult:
    source: str
    saved: int = 0
    skipped: int = 0
    failed: int = 0
    cancelled: bool = False
    meta_error: Optional[str] = None


def process_link(blogger, store: Store, link: str, result: DownloadResult) -> None:
    """单条链接：检查 → 去重 → 抓取 → 保存。所有单条失败都在这里记录并吞下。"""
    if not is_tidy(link, blogger.homepage):
        logger.warning(f"链接格式不整洁，跳过: {link!r}")
        result.skipped += 1
        return

    if store.url_exists(link):
        result.skipped += 1
        return

    try:
        record = blogger.blog_info(link)
    except FetchError as e:
        logger.error(f"获取文章失败 {link}: {e}")
        result.failed += 1
        return
    except Exception:
        # 适配器遇到意外页面结构时抛出的其他异常，同样只影响这一条链接
        logger.exception(f"解析文章异常 {link}")
        result.failed += 1
        return

    try:
        store.save(record)
    except PersistenceError as e:
        logger.error(f"保存记录失败 {link}: {e}")
        result.failed += 1
        return

    result.saved += 1
    logger.info(f"OK: {link}")


def download(blogger, data_dir="data", store: Optional[Store] = None,
             cancel: Optional[threading.Event] = None) -> DownloadResult:
    """
    抓取一个博客源
    :param blogger: 博客源适配器
    :param data_dir: 数据目录，未传入 store 时按约定路径打开
    :param store: 可选，直接使用给定的 Store（已 load）
    :param cancel: 可选，被置位后在下一个页面或链接前停止
    """
    source = blogger.source_name
    if store is None:
        store = open_store(data_dir, source)
    result = DownloadResult(source=source)

    try:
        store.write_meta(Meta(source=source, home_page=blogger.homepage, name=blogger.blogger_name))
    except MetaWriteError as e:
        # 元数据与文章记录互不依赖，继续处理
        logger.error(f"写入元数据失败 {source}: {e}")
        result.meta_error = str(e)

    for page_url in blogger.page_urls():
        if cancel is not None and cancel.is_set():
            result.cancelled = True
            break
        try:
            links = blogger.links_from_page(page_url)
        except FetchError as e:
            logger.error(f"获取列表页链接失败 {page_url}: {e}")
            continue
        except Exception:
            logger.exception(f"解析列表页异常 {page_url}")
            continue

        for link in links:
            if cancel is not None and cancel.is_set():
                result.cancelled = True
                break
            process_link(blogger, store, link, result)
        if result.cancelled:
            break

    if result.cancelled:
        logger.warning(f"{source} 已取消")
    return result


def crawl(bloggers: list, data_dir="data", max_workers: Optional[int] = None,
          deadline: Optional[float] = None, cancel: Optional[threading.Event] = None) -> Dict[str, object]:
    """
    并发抓取所有博客源，每个源一个任务，全部结束后返回
    :param bloggers: 博客源适配器列表
    :param max_workers: 线程数，默认每个源一个线程
    :param deadline: 可选，整体截止时间（秒），到时置位 cancel
    :return: source -> DownloadResult 或该源失败时的异常
    """
    logger = logging.getLogger("bloghub.scheduler")
    if not bloggers:
        logger.info("没有需要抓取的博客源")
        return {}

    Path(data_dir).mkdir(parents=True, exist_ok=True)
    cancel = cancel or threading.Event()
    timer = None
    if deadline is not None:
        timer = threading.Timer(deadline, cancel.set)
        timer.daemon = True
        timer.start()

    results: Dict[str, object] = {}
    try:
        with ThreadPoolExecutor(max_workers=max_workers or len(bloggers)) as pool:
            futures = {pool.submit(download, b, data_dir, None, cancel): b for b in bloggers}
            for future, blogger in futures.items():
                try:
                    results[blogger.source_name] = future.result()
                except Exception as e:
                    logger.error(f"failed to download blogger {blogger.blogger_name}: {e}")
                    results[blogger.source_name] = e
                logger.info(f"FINISHED: {blogger.blogger_name}")
    finally:
        if timer is not None:
            timer.cancel()
    return results
