"""链接检查：判断一个候选 URL 能否作为索引中的一行保存。"""
from typing import Optional
from urllib.parse import urlsplit


def _has_bad_char(link: str) -> bool:
    for ch in link:
        if ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F:
            return True
    return False


def is_tidy(link: str, homepage: Optional[str] = None) -> bool:
    """
    判断链接是否“整洁”：
    - 非空，不含空白与控制字符（保证一行一个链接）；
    - http/https 绝对地址，带主机名，无片段（#...）和用户信息；
    - 若给出 homepage，协议和主机必须与其一致。

    不抛异常，任何无法解析的输入都返回 False。
    """
    if not isinstance(link, str) or not link:
        return False
    if _has_bad_char(link):
        return False
    try:
        parts = urlsplit(link)
        host = parts.hostname
        # 访问 port 会校验端口格式
        _ = parts.port
    except ValueError:
        return False
    if parts.scheme not in ("http", "https") or not host:
        return False
    if "#" in link:
        return False
    if parts.username is not None or parts.password is not None:
        return False

    if homepage:
        try:
            home = urlsplit(homepage)
            home_host = home.hostname
        except ValueError:
            return False
        if parts.scheme != home.scheme.lower() or host != (home_host or ""):
            return False
    return True
