import pytest
import requests

from bing_photos.config import FetchConfig
from bing_photos.images import candidate_urls, detect_image_format, download_with_limit
from bing_photos.models import DownloadStatus, ImageCandidate

from fakes import FakeResponse, FakeSession, image_bytes


def serve(response: FakeResponse) -> FakeSession:
    return FakeSession(lambda url: response)


def test_detect_image_format() -> None:
    assert detect_image_format(image_bytes()) == "jpg"
    assert detect_image_format(image_bytes(fmt="PNG")) == "png"
    assert detect_image_format(b"<html><body>nope</body></html>") is None


def test_candidate_urls_ladder(tmp_path) -> None:
    candidate = ImageCandidate("https://www.bing.com/th?id=OHR.A_1920x1080.jpg", "/th?id=OHR.A")

    urls = candidate_urls(candidate, FetchConfig(output_root=tmp_path))

    assert urls == [
        "https://www.bing.com/th?id=OHR.A_1920x1080.jpg",
        "https://www.bing.com/th?id=OHR.A_800x600.jpg",
        "https://www.bing.com/th?id=OHR.A_640x480.jpg",
        "https://www.bing.com/th?id=OHR.A_400x240.jpg",
    ]


def test_candidate_urls_without_base_only_has_canonical(tmp_path) -> None:
    candidate = ImageCandidate("https://cdn.example.com/a.jpg")

    assert candidate_urls(candidate, FetchConfig(output_root=tmp_path)) == ["https://cdn.example.com/a.jpg"]


def test_download_success_writes_file(tmp_path) -> None:
    body = image_bytes()
    dest = tmp_path / "1.jpg"

    result = download_with_limit(serve(FakeResponse(body=body, chunk_size=100)), "https://x/a.jpg", dest, 10_000)

    assert result.ok
    assert result.bytes_written == len(body)
    assert dest.read_bytes() == body


def test_download_accepts_body_exactly_at_limit(tmp_path) -> None:
    body = image_bytes()
    dest = tmp_path / "1.jpg"

    result = download_with_limit(serve(FakeResponse(body=body)), "https://x/a.jpg", dest, len(body))

    assert result.status is DownloadStatus.OK
    assert dest.stat().st_size == len(body)


def test_download_rejects_large_content_length_without_reading(tmp_path) -> None:
    response = FakeResponse(body=image_bytes(), headers={"Content-Length": "5000000"})
    dest = tmp_path / "1.jpg"

    result = download_with_limit(serve(response), "https://x/a.jpg", dest, 1_000_000)

    assert result.status is DownloadStatus.TOO_LARGE
    assert response.bytes_yielded == 0
    assert response.closed
    assert not dest.exists()


def test_download_aborts_stream_past_limit(tmp_path) -> None:
    body = image_bytes()[:4] + b"\0" * 5000
    response = FakeResponse(body=body, chunk_size=500)
    dest = tmp_path / "1.jpg"

    result = download_with_limit(serve(response), "https://x/a.jpg", dest, 1200)

    assert result.status is DownloadStatus.TOO_LARGE
    assert result.reason == "too-large"
    assert response.closed
    assert response.bytes_yielded < len(body)
    assert not dest.exists()


def test_download_reports_bad_status(tmp_path) -> None:
    dest = tmp_path / "1.jpg"

    result = download_with_limit(serve(FakeResponse(status_code=404)), "https://x/a.jpg", dest, 1000)

    assert result.status is DownloadStatus.BAD_STATUS
    assert result.status_code == 404
    assert result.reason == "status:404"
    assert not dest.exists()


def test_download_rejects_non_image_payload(tmp_path) -> None:
    dest = tmp_path / "1.jpg"
    response = FakeResponse(body=b"<!doctype html><title>Not found</title>")

    result = download_with_limit(serve(response), "https://x/a.jpg", dest, 1000)

    assert result.status is DownloadStatus.NOT_IMAGE
    assert not dest.exists()


def test_download_propagates_network_errors(tmp_path) -> None:
    def handler(url):
        raise requests.ConnectionError("refused")

    with pytest.raises(requests.ConnectionError):
        download_with_limit(FakeSession(handler), "https://x/a.jpg", tmp_path / "1.jpg", 1000)
