"""Shared fixtures: in-memory sinks and a scripted blogger."""
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional, Union

import pytest

from bloghub_spider.errors import FetchError
from bloghub_spider.schema import Meta, Record
from bloghub_spider.storage import Store


class FakeIndex:
    def __init__(self, fail: bool = False):
        self.lines: List[str] = []
        self.fail = fail

    def append(self, link: str) -> None:
        if self.fail:
            raise OSError("disk full")
        self.lines.append(link)


class FakeMeta:
    def __init__(self, fail: bool = False):
        self.writes: List[Meta] = []
        self.fail = fail

    def write(self, meta: Meta) -> None:
        if self.fail:
            raise OSError("read-only file system")
        self.writes.append(meta)


class FakePersister:
    def __init__(self, fail: bool = False):
        self.records: Dict[str, Record] = {}
        self.calls: List[Record] = []
        self.fail = fail

    def persist(self, record: Record) -> None:
        if self.fail:
            raise OSError("disk full")
        self.calls.append(record)
        self.records[record.id] = record


class FakeBlogger:
    """Blogger whose pages and posts are scripted; exceptions in the maps are raised."""

    def __init__(self, source_name: str = "example.org",
                 pages: Optional[Dict[str, Union[List[str], Exception]]] = None,
                 posts: Optional[Dict[str, Union[Record, Exception]]] = None,
                 on_fetch=None):
        self.source_name = source_name
        self.blogger_name = f"Blogger of {source_name}"
        self.homepage = f"https://{source_name}/"
        self.pages = pages or {}
        self.posts = posts or {}
        self.fetched: List[str] = []
        self.on_fetch = on_fetch

    def page_urls(self) -> List[str]:
        return list(self.pages)

    def links_from_page(self, page_url: str) -> List[str]:
        links = self.pages[page_url]
        if isinstance(links, Exception):
            raise links
        return links

    def blog_info(self, link: str) -> Record:
        self.fetched.append(link)
        if self.on_fetch is not None:
            self.on_fetch(link)
        post = self.posts.get(link)
        if post is None:
            raise FetchError(f"not found: {link}")
        if isinstance(post, Exception):
            raise post
        return post

    def parse_post(self, html: str, url: str) -> Record:
        raise NotImplementedError


def make_record(link: str, source: str = "example.org", **overrides) -> Record:
    fields = dict(
        source=source,
        link=link,
        title="Title",
        author="Author",
        content="<p>body</p>",
        published_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    fields.update(overrides)
    return Record(**fields)


@pytest.fixture
def index() -> FakeIndex:
    return FakeIndex()


@pytest.fixture
def meta_sink() -> FakeMeta:
    return FakeMeta()


@pytest.fixture
def persister() -> FakePersister:
    return FakePersister()


@pytest.fixture
def store(index: FakeIndex, meta_sink: FakeMeta, persister: FakePersister) -> Store:
    s = Store(index, meta_sink, persister)
    s.load("")
    return s


@pytest.fixture
def sample_record() -> Record:
    return Record(
        source="antonz.org",
        link="https://antonz.org/all/post-1",
        title="X",
        author="A",
        content="<p>hi</p>",
        published_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def cancel() -> threading.Event:
    return threading.Event()
