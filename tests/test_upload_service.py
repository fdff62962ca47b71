from __future__ import annotations

import io
from itertools import count
from pathlib import Path

import pytest

from contentflow.core.errors import UploadError, UploadRejectedError
from contentflow.core.settings import StoreSettings
from contentflow.services import UploadService
from contentflow_persist import UnknownModuleError
from helpers import touch


@pytest.fixture()
def service(data_root: Path) -> UploadService:
    ticks = count(1700000000000)
    settings = StoreSettings(data_root=data_root)
    svc = UploadService(settings, clock=lambda: next(ticks))
    svc.stores.ensure_directories()
    return svc


def test_content_upload_uses_timestamp_prefix(service: UploadService, tmp_path: Path) -> None:
    source = touch(tmp_path / "report.xlsx")

    receipt = service.upload_content(source, "tech")

    assert receipt.path == "uploads/tech/1700000000000_report.xlsx"
    assert receipt.name == "report.xlsx"
    assert receipt.upload_time == "2023-11-14T22:13:20.000Z"
    assert (service.root / receipt.path).is_file()
    assert list((service.root / "tmp").glob("*.xlsx")) == []


def test_ninth_upload_is_rejected_and_removed(service: UploadService, tmp_path: Path) -> None:
    source = touch(tmp_path / "slide.png")
    for _ in range(8):
        service.upload_content(source, "banner")

    with pytest.raises(UploadRejectedError):
        service.upload_content(source, "banner")

    module_dir = service.root / "uploads" / "banner"
    assert len(list(module_dir.iterdir())) == 8
    assert list((service.root / "tmp").glob("*.png")) == []


def test_unknown_module_upload(service: UploadService, tmp_path: Path) -> None:
    with pytest.raises(UnknownModuleError):
        service.upload_content(touch(tmp_path / "a.txt"), "sports")


def test_missing_source_raises_upload_error(service: UploadService, tmp_path: Path) -> None:
    with pytest.raises(UploadError):
        service.upload_content(tmp_path / "missing.xlsx", "tech")


def test_stream_upload_requires_name(service: UploadService) -> None:
    with pytest.raises(UploadError):
        service.upload_markdown(io.BytesIO(b"# hi"))

    receipt = service.upload_markdown(io.BytesIO(b"# hi"), original_name="guide.md")

    assert receipt.path == "markdown/1700000000000_guide.md"
    assert (service.root / receipt.path).read_bytes() == b"# hi"


def test_image_upload_drops_original_name(service: UploadService, tmp_path: Path) -> None:
    receipt = service.upload_image(touch(tmp_path / "team photo.JPG"))

    assert receipt.path == "images/1700000000000.JPG"
    assert receipt.name == "team photo.JPG"
