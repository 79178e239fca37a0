from setuptools import setup, find_packages
from pathlib import Path

here = Path(__file__).parent
requirements = []
req_file = here / "requirements.txt"
if req_file.exists():
    requirements = [r.strip() for r in req_file.read_text(encoding="utf-8").splitlines() if r.strip() and not r.strip().startswith("#")]

setup(
    name="bloghub_spider",
    version="0.1.0",
    description="抓取多个博客源并按链接去重、按内容寻址保存文章的爬虫",
    packages=find_packages(exclude=("tests", "tests.*")),
    install_requires=requirements,
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.9",
    entry_points={
        "console_scripts": [
            "bloghub_spider=bloghub_spider.cli:main",
        ]
    },
)
