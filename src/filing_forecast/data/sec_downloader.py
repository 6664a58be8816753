"""
sec_downloader.py

Download quarterly SEC Financial Statement Data Set archives.

The SEC asks automated clients to identify themselves with a User-Agent that
includes a contact address.
"""

import io
import logging
import zipfile
from pathlib import Path
from typing import Union

import requests

logger = logging.getLogger(__name__)


DATASET_URL = "https://www.sec.gov/files/dera/data/financial-statement-data-sets/{year}q{quarter}.zip"
DEFAULT_USER_AGENT = "filing-forecast research@example.com"


def dataset_url(year: int, quarter: int) -> str:
    if quarter not in (1, 2, 3, 4):
        raise ValueError(f"Quarter must be 1-4, got {quarter}")
    if year < 2009:
        raise ValueError(f"Financial statement data sets start in 2009, got {year}")
    return DATASET_URL.format(year=year, quarter=quarter)


def download_quarter(
    year: int,
    quarter: int,
    dest_dir: Union[str, Path],
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: int = 120,
    overwrite: bool = False
) -> Path:
    """
    Fetch and extract one quarterly archive.

    Args:
        year: Calendar year of the archive
        quarter: Calendar quarter (1-4)
        dest_dir: Parent directory; files land in dest_dir/{year}q{quarter}/
        user_agent: User-Agent header sent to sec.gov
        timeout: Request timeout in seconds
        overwrite: Download again even if sub.txt already exists

    Returns:
        Directory holding sub.txt, num.txt, tag.txt and pre.txt
    """
    url = dataset_url(year, quarter)
    target = Path(dest_dir) / f"{year}q{quarter}"

    if (target / "sub.txt").exists() and not overwrite:
        logger.info("Using cached data set %s", target)
        return target

    logger.info("Downloading %s", url)
    response = requests.get(url, headers={"User-Agent": user_agent}, timeout=timeout)
    response.raise_for_status()

    target.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
        archive.extractall(target)

    logger.info("Extracted %s to %s", url, target)
    return target
