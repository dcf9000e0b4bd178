"""
Dataset download (local cache)
==============================

SEAR works offline on one flat file. `ensure_dataset` puts that file in a
cache directory the first time and simply returns its path afterwards, so
re-running the report never downloads twice.

The download is written to `<name>.part` first and renamed when complete;
an interrupted download therefore never looks like a cached file.
"""

from __future__ import annotations
from typing import Optional
import logging
import os
from urllib.parse import unquote, urlparse

import requests

logger = logging.getLogger(__name__)

STORM_DATA_URL = "https://d396qusza40orc.cloudfront.net/repdata%2Fdata%2FStormData.csv.bz2"
DEFAULT_CACHE_DIR = "data"
_CHUNK = 1 << 20


def cache_filename(url: str) -> str:
    """File name used in the cache for `url` (last path segment, unquoted)."""
    name = os.path.basename(unquote(urlparse(url).path))
    if not name:
        raise ValueError(f"Cannot derive a file name from URL: {url}")
    return name


def ensure_dataset(
    url: str = STORM_DATA_URL,
    cache_dir: str = DEFAULT_CACHE_DIR,
    filename: Optional[str] = None,
    timeout: float = 60,
) -> str:
    """Return the local path of `url`, downloading it only if not cached."""
    path = os.path.join(cache_dir, filename or cache_filename(url))
    if os.path.isfile(path):
        logger.debug("Using cached dataset %s", path)
        return path

    os.makedirs(cache_dir, exist_ok=True)
    tmp = path + ".part"
    logger.info("Downloading %s -> %s", url, path)
    with requests.get(url, stream=True, timeout=timeout) as resp:
        resp.raise_for_status()
        with open(tmp, "wb") as f:
            for chunk in resp.iter_content(chunk_size=_CHUNK):
                if chunk:
                    f.write(chunk)
    os.replace(tmp, path)
    logger.info("Saved %s (%d bytes)", path, os.path.getsize(path))
    return path
