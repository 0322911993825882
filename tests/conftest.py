import pytest

from app import create_app
from hotel_settings import Settings
from storage import RecordStore


class RecordingNotifier:
    """Collects notifications instead of sending them."""

    def __init__(self):
        self.sent = []

    def notify(self, to, subject, html_body):
        self.sent.append({"to": to, "subject": subject, "html": html_body})
        return True


class FailingNotifier:
    def notify(self, to, subject, html_body):
        raise RuntimeError("smtp is down")


@pytest.fixture
def failing_notifier() -> FailingNotifier:
    return FailingNotifier()


@pytest.fixture
def data_dir(tmp_path):
    return str(tmp_path / "data")


@pytest.fixture
def store(data_dir) -> RecordStore:
    return RecordStore(data_dir)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def app(data_dir, notifier):
    return create_app(Settings(data_dir=data_dir), notifier=notifier)


@pytest.fixture
def client(app):
    return app.test_client()
