"""
Remote media download over HTTP(S), with Google Drive share-link handling.
"""

import os
import re
import html
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote, urlparse

import requests

from media.exceptions import DownloadError

logger = logging.getLogger(__name__)

_DRIVE_ID = r"([a-zA-Z0-9_-]{10,})"
DRIVE_PATTERNS = [
    re.compile(r"https://drive\.google\.com/file/d/" + _DRIVE_ID),
    re.compile(r"https://drive\.google\.com/open\?id=" + _DRIVE_ID),
    re.compile(r"https://docs\.google\.com/(?:document|presentation|spreadsheets)/d/" + _DRIVE_ID),
]
_DIRECT_ID = re.compile(r"[?&]id=" + _DRIVE_ID)
_CONFIRM_HREF = re.compile(r'href="([^"]*(?:&amp;|&|\?)confirm=[^"]*)"')
_DISPOSITION_NAME = re.compile(r"filename\*?=(?:UTF-8'')?(\"[^\"]*\"|[^;\n]*)", re.IGNORECASE)

CHUNK_BYTES = 1024 * 1024


@dataclass(frozen=True)
class DownloadedMedia:
    content: bytes
    filename: str


def is_google_drive_url(url: str) -> bool:
    return re.match(r"https://(drive|docs)\.google\.com", url.strip()) is not None


def extract_drive_file_id(url: str) -> Optional[str]:
    for pattern in DRIVE_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    match = _DIRECT_ID.search(url)
    return match.group(1) if match else None


def to_direct_download_url(url: str) -> str:
    """Convert a Drive share link into its ``uc?export=download`` form."""
    clean = url.strip()
    for pattern in DRIVE_PATTERNS:
        match = pattern.search(clean)
        if match:
            return f"https://drive.google.com/uc?export=download&id={match.group(1)}"
    if "drive.google.com/uc?" in clean and "export=download" in clean:
        return clean
    raise DownloadError(
        "Invalid Google Drive URL. Use a share link like "
        "https://drive.google.com/file/d/FILE_ID/view?usp=sharing"
    )


def _filename_from_response(response: requests.Response, url: str) -> Optional[str]:
    disposition = response.headers.get("content-disposition", "")
    match = _DISPOSITION_NAME.search(disposition)
    if match:
        name = unquote(match.group(1).strip().strip('"'))
        if name:
            return os.path.basename(name)
    path_name = os.path.basename(urlparse(url).path)
    return path_name or None


class RemoteDownloader:
    """Fetches media into memory, refusing bodies above ``max_bytes``."""

    def __init__(self, timeout: float = 30.0, max_bytes: int = 200 * 1024 * 1024,
                 session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.max_bytes = max_bytes
        self.session = session or requests.Session()

    def fetch(self, url: str) -> DownloadedMedia:
        if is_google_drive_url(url):
            return self._fetch_drive(url)
        content, response_name = self._stream(url)
        return DownloadedMedia(content, response_name or "download")

    def _fetch_drive(self, url: str) -> DownloadedMedia:
        direct = to_direct_download_url(url)
        file_id = extract_drive_file_id(url)

        response = self._get(direct)
        if "text/html" in response.headers.get("content-type", ""):
            page = response.text
            response.close()
            confirm = _CONFIRM_HREF.search(page)
            if not confirm:
                raise DownloadError(
                    "Google Drive returned an HTML page; the file may be private or too large"
                )
            direct = html.unescape(confirm.group(1))
            if direct.startswith("/"):
                direct = "https://drive.google.com" + direct
            logger.info("Following Google Drive virus-scan confirmation for %s", file_id)
            response = self._get(direct)
            if "text/html" in response.headers.get("content-type", ""):
                response.close()
                raise DownloadError("Google Drive confirmation did not return the file")

        content, name = self._stream(direct, response)
        if not name or name == "uc":
            name = f"drive_file_{file_id}" if file_id else "drive_download"
        return DownloadedMedia(content, name)

    def _get(self, url: str) -> requests.Response:
        try:
            response = self.session.get(url, stream=True, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise DownloadError(f"Failed to download {url}: {e}") from e
        return response

    def _stream(self, url: str, response: Optional[requests.Response] = None):
        response = response or self._get(url)
        buf = bytearray()
        with response:
            name = _filename_from_response(response, url)
            try:
                for chunk in response.iter_content(CHUNK_BYTES):
                    if not chunk:
                        continue
                    buf.extend(chunk)
                    if len(buf) > self.max_bytes:
                        raise DownloadError(f"Remote file exceeds the {self.max_bytes} byte limit")
            except requests.RequestException as e:
                raise DownloadError(f"Download interrupted: {e}") from e

        if not buf:
            raise DownloadError(f"Empty response body from {url}")
        logger.info("Downloaded %s (%d bytes)", name, len(buf))
        return bytes(buf), name
