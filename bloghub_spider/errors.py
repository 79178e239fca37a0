"""抓取与存储过程中使用的异常类型。

- ValidationError / FetchError：单条链接或单个页面级别的失败，循环中记录日志后跳过；
- PersistenceError：记录或索引写入失败，由 `Store.save` 抛给调用方；
- MetaWriteError：元数据重写失败，由 `Store.write_meta` 抛给调用方。
"""


class SpiderError(Exception):
    """所有自定义异常的基类。"""


class ValidationError(SpiderError):
    """链接或记录的格式不合法。"""


class FetchError(SpiderError):
    """页面或文章无法获取、无法解析。"""


class PersistenceError(SpiderError):
    """记录或索引写入失败，此时链接不会被标记为已抓取。"""


class MetaWriteError(SpiderError):
    """元数据文件重写失败。"""
