"""bloghub_spider：多博客源抓取与去重存储。"""

__version__ = "0.1.0"
