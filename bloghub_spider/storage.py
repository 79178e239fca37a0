"""去重存储实现。

每个博客源拥有互不相交的三类文件（默认位于 `data/` 下）：
- `<source>.txt`：索引，每行一个已收录的链接，只追加、不截断；
- `<source>.meta.json`：博客源描述，每次运行整体重写；
- `<source>.d/<id>.json`：文章记录，文件名即内容计算出的 ID。

`Store.save` 的顺序保证：先持久化记录，成功后才追加索引，最后才写入内存集合。
在两步之间崩溃只会导致下次运行重复抓取该链接并覆盖同一个文件，
但绝不会出现“链接已标记为抓取、记录却未落盘”的情况。

Store 只允许单个写入者使用，内部不加锁。
"""
import json
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Protocol, Set, TextIO

from bloghub_spider.errors import MetaWriteError, PersistenceError
from bloghub_spider.identify import record_id
from bloghub_spider.links import is_tidy
from bloghub_spider.schema import Meta, Record

logger = logging.getLogger("bloghub.storage")


class IndexSink(Protocol):
    def append(self, link: str) -> None: ...


class MetaSink(Protocol):
    def write(self, meta: Meta) -> None: ...


class RecordPersister(Protocol):
    def persist(self, record: Record) -> None: ...


@contextmanager
def atomic_write(path: Path) -> Iterator[TextIO]:
    """写入同目录下的临时文件，fsync 后替换目标文件，读者不会看到写了一半的内容。"""
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        with tmp.open("w", encoding="utf-8") as f:
            yield f
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise


def _undecodable(line: str) -> bool:
    try:
        line.encode("utf-8")
    except UnicodeEncodeError:
        return True
    return False


class IndexFile:
    """只追加的索引文件。"""

    def __init__(self, path):
        self.path = Path(path)

    def read(self) -> str:
        if not self.path.exists():
            return ""
        # 崩溃可能截断多字节字符；无法解码的字节保留为代理字符，由 Store.load 跳过
        return self.path.read_bytes().decode("utf-8", errors="surrogateescape")

    def _ends_with_newline(self) -> bool:
        try:
            size = self.path.stat().st_size
        except FileNotFoundError:
            return True
        if size == 0:
            return True
        with self.path.open("rb") as f:
            f.seek(-1, os.SEEK_END)
            return f.read(1) == b"\n"

    def append(self, link: str) -> None:
        # 上次运行在写入中途崩溃时文件末尾没有换行。补 " \n" 结束残行：
        # 新链接不会粘在残行后面，残行以空格结尾也永远不会被当作链接载入
        prefix = "" if self._ends_with_newline() else " \n"
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(prefix + link + "\n")
            f.flush()
            os.fsync(f.fileno())


class MetaFile:
    """元数据文件，每次写入整体替换。"""

    def __init__(self, path):
        self.path = Path(path)

    def write(self, meta: Meta) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with atomic_write(self.path) as f:
            json.dump(meta.to_dict(), f, ensure_ascii=False, indent=2)


class JsonRecordPersister:
    """把每条记录写成 `<directory>/<id>.json`；同一 ID 重复写入只会覆盖同一个文件。"""

    def __init__(self, directory):
        self.directory = Path(directory)

    def path_for(self, rid: str) -> Path:
        return self.directory / f"{rid}.json"

    def persist(self, record: Record) -> None:
        if not record.id:
            raise ValueError(f"record has no id: {record.link}")
        self.directory.mkdir(parents=True, exist_ok=True)
        with atomic_write(self.path_for(record.id)) as f:
            json.dump(record.to_dict(), f, ensure_ascii=False, indent=2)


class Store:
    def __init__(self, index: IndexSink, meta: MetaSink, persister: RecordPersister):
        self.index = index
        self.meta = meta
        self.persister = persister
        self._seen: Set[str] = set()
        self._loaded = False

    def load(self, prior_index: str) -> int:
        """
        从上次运行留下的索引内容重建内存集合，返回载入的链接数量。

        - 空内容得到空集合；
        - 末尾没有换行的最后一行视为写入中途被打断，跳过并告警；
        - 不整洁的行跳过并告警，不影响后续行的载入。
        """
        if self._loaded:
            raise RuntimeError("Store.load called twice")
        self._loaded = True

        lines = prior_index.split("\n")
        # 正常结尾时 split 的最后一段为空字符串；否则最后一段是残行
        torn = lines.pop()
        if torn:
            logger.warning(f"索引最后一行不完整，已跳过: {torn!r}")

        for lineno, line in enumerate(lines, 1):
            url = line.rstrip("\r")
            if not url:
                continue
            if _undecodable(url):
                logger.warning(f"索引第 {lineno} 行编码错误，已跳过: {url!r}")
                continue
            if not is_tidy(url):
                logger.warning(f"索引第 {lineno} 行格式错误，已跳过: {url!r}")
                continue
            self._seen.add(url)
        logger.debug(f"载入 {len(self._seen)} 条已收录链接")
        return len(self._seen)

    def url_exists(self, link: str) -> bool:
        return link in self._seen

    def __contains__(self, link: str) -> bool:
        return self.url_exists(link)

    def __len__(self) -> int:
        return len(self._seen)

    def save(self, record: Record) -> Record:
        """
        计算 ID 并持久化记录，成功后追加索引并标记为已收录。
        任一步骤失败都抛出 PersistenceError，且链接不会进入内存集合。不做重试。
        """
        saved = record.with_id(record_id(record))
        try:
            self.persister.persist(saved)
        except Exception as e:
            raise PersistenceError(f"failed to write record {saved.id} ({saved.link}): {e}") from e

        try:
            self.index.append(saved.link)
        except Exception as e:
            raise PersistenceError(f"failed to append index for {saved.link}: {e}") from e

        self._seen.add(saved.link)
        return saved

    def write_meta(self, meta: Meta) -> None:
        try:
            self.meta.write(meta)
        except Exception as e:
            raise MetaWriteError(f"failed to write meta for {meta.source}: {e}") from e


def index_path(data_dir, source: str) -> Path:
    return Path(data_dir) / f"{source}.txt"


def meta_path(data_dir, source: str) -> Path:
    return Path(data_dir) / f"{source}.meta.json"


def records_dir(data_dir, source: str) -> Path:
    return Path(data_dir) / f"{source}.d"


def open_store(data_dir, source: str) -> Store:
    """按约定路径创建一个博客源的 Store 并载入已有索引。"""
    index = IndexFile(index_path(data_dir, source))
    store = Store(index, MetaFile(meta_path(data_dir, source)), JsonRecordPersister(records_dir(data_dir, source)))
    store.load(index.read())
    return store
