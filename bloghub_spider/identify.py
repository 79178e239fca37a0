"""记录 ID：由文章内容计算的 SHA-256，同时用作记录文件名。

只使用重新抓取时能够复现的字段（source、link、title、author、content）。
发布时间可能回退为抓取时刻，因此不参与计算。
"""
import hashlib
import json

from bloghub_spider.schema import Record


def canonical_bytes(record: Record) -> bytes:
    # JSON 数组对任意字符串都是无歧义的编码
    fields = [record.source, record.link, record.title, record.author, record.content]
    return json.dumps(fields, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def record_id(record: Record) -> str:
    return hashlib.sha256(canonical_bytes(record)).hexdigest()
