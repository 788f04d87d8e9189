from unittest.mock import MagicMock

import pytest
import requests

from media.downloader import (
    RemoteDownloader,
    extract_drive_file_id,
    is_google_drive_url,
    to_direct_download_url,
)
from media.exceptions import DownloadError

DRIVE_ID = "1AbCdEfGhIjKlMnOp"


def fake_response(chunks=(b"abc", b"def"), headers=None, text=""):
    response = MagicMock()
    response.headers = headers or {"content-type": "video/mp4"}
    response.iter_content.return_value = list(chunks)
    response.text = text
    return response


def downloader_with(*responses, max_bytes=1024):
    session = MagicMock()
    session.get.side_effect = list(responses)
    return RemoteDownloader(timeout=5, max_bytes=max_bytes, session=session), session


def test_drive_url_helpers():
    share = f"https://drive.google.com/file/d/{DRIVE_ID}/view?usp=sharing"
    assert is_google_drive_url(share)
    assert not is_google_drive_url("https://example.com/talk.mp4")
    assert extract_drive_file_id(share) == DRIVE_ID
    assert extract_drive_file_id(f"https://drive.google.com/open?id={DRIVE_ID}") == DRIVE_ID
    assert to_direct_download_url(share) == f"https://drive.google.com/uc?export=download&id={DRIVE_ID}"


def test_invalid_drive_url():
    with pytest.raises(DownloadError):
        to_direct_download_url("https://drive.google.com/drive/folders")


def test_plain_url_download_uses_content_disposition():
    response = fake_response(headers={
        "content-type": "video/mp4",
        "content-disposition": 'attachment; filename="keynote.mp4"',
    })
    downloader, session = downloader_with(response)
    media = downloader.fetch("https://cdn.example.com/files/12345")

    assert media.content == b"abcdef"
    assert media.filename == "keynote.mp4"
    session.get.assert_called_once_with("https://cdn.example.com/files/12345", stream=True, timeout=5)


def test_filename_falls_back_to_url_path():
    downloader, _ = downloader_with(fake_response())
    assert downloader.fetch("https://example.com/media/talk.mp4?sig=1").filename == "talk.mp4"


def test_body_over_limit_is_refused():
    downloader, _ = downloader_with(fake_response(chunks=[b"x" * 600, b"x" * 600]))
    with pytest.raises(DownloadError):
        downloader.fetch("https://example.com/big.mp4")


def test_empty_body_is_refused():
    downloader, _ = downloader_with(fake_response(chunks=[]))
    with pytest.raises(DownloadError):
        downloader.fetch("https://example.com/empty.mp4")


def test_http_errors_become_download_errors():
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("refused")
    with pytest.raises(DownloadError):
        RemoteDownloader(session=session).fetch("https://example.com/talk.mp4")


def test_drive_virus_scan_page_is_confirmed():
    page = f'<a id="uc-download-link" href="/uc?export=download&amp;confirm=t&amp;id={DRIVE_ID}">Download</a>'
    warning = fake_response(headers={"content-type": "text/html; charset=utf-8"}, text=page)
    payload = fake_response(headers={"content-type": "application/octet-stream"})
    downloader, session = downloader_with(warning, payload)

    media = downloader.fetch(f"https://drive.google.com/file/d/{DRIVE_ID}/view")

    assert media.content == b"abcdef"
    assert media.filename == f"drive_file_{DRIVE_ID}"
    second_url = session.get.call_args_list[1].args[0]
    assert second_url == f"https://drive.google.com/uc?export=download&confirm=t&id={DRIVE_ID}"


def test_private_drive_file():
    page = "<html>Sign in to continue</html>"
    downloader, _ = downloader_with(fake_response(headers={"content-type": "text/html"}, text=page))
    with pytest.raises(DownloadError):
        downloader.fetch(f"https://drive.google.com/file/d/{DRIVE_ID}/view")
