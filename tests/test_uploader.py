"""
上传调度测试
============

使用可控时钟测试"首条立即上传 + 周期上传最新记录"的节奏。
"""

import pytest
import sys
from pathlib import Path
from unittest.mock import Mock

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from vedirect_logger.service.uploader import UploadScheduler


class FakeClock:
    """可手动推进的时钟"""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def upload():
    return Mock(return_value=True)


@pytest.fixture
def scheduler(upload, clock):
    return UploadScheduler(upload, interval=60.0, clock=clock)


class TestUploadScheduler:
    """上传调度器测试类"""

    def test_first_record_uploaded_immediately(self, scheduler, upload):
        scheduler.on_record({"V": "12800"})

        upload.assert_called_once_with({"V": "12800"})
        assert scheduler.uploads == 1

    def test_later_records_only_update_latest(self, scheduler, upload):
        scheduler.on_record({"V": "1"})
        scheduler.on_record({"V": "2"})
        scheduler.on_record({"V": "3"})

        assert upload.call_count == 1
        assert scheduler.latest == {"V": "3"}

    def test_periodic_upload_of_latest(self, scheduler, upload, clock):
        scheduler.on_record({"V": "1"})
        scheduler.on_record({"V": "2"})

        clock.advance(59.9)
        assert scheduler.poll() is False

        clock.advance(0.1)
        assert scheduler.poll() is True
        upload.assert_called_with({"V": "2"})
        assert upload.call_count == 2

    def test_next_period_starts_after_upload(self, scheduler, upload, clock):
        scheduler.on_record({"V": "1"})
        clock.advance(60)
        scheduler.poll()

        clock.advance(30)
        assert scheduler.poll() is False
        assert scheduler.seconds_until_next() == pytest.approx(30.0)

    def test_no_data_no_upload(self, scheduler, upload, clock):
        """周期到期但没有数据时不上传"""
        clock.advance(120)

        assert scheduler.poll() is False
        upload.assert_not_called()

    def test_failed_upload_not_counted(self, clock):
        upload = Mock(return_value=False)
        scheduler = UploadScheduler(upload, interval=10.0, clock=clock)

        scheduler.on_record({"V": "1"})

        assert scheduler.uploads == 0

    def test_invalid_interval(self, upload):
        with pytest.raises(ValueError):
            UploadScheduler(upload, interval=0)
