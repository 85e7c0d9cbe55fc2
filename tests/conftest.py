import boto3
import pytest
from fastapi.testclient import TestClient
from moto import mock_aws

from cloudpdf_api.config.settings import Settings, get_settings
from cloudpdf_api.database.local import InMemoryStore
from cloudpdf_api.main import create_app
from tests.consts import TEST_BUCKET_NAME, TEST_REGION
from tests.fixtures.telegram_fixtures import FakeTelegramClient


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mocked AWS credentials so boto3 never reaches a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", TEST_REGION)
    monkeypatch.delenv("AWS_ENDPOINT_URL", raising=False)


@pytest.fixture
def mocked_aws(aws_credentials):
    """Moto-backed S3 with the test bucket already created; yields the client."""
    with mock_aws():
        s3_client = boto3.client("s3", region_name=TEST_REGION)
        s3_client.create_bucket(Bucket=TEST_BUCKET_NAME)
        yield s3_client


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        storage_mode="local",
        storage_dir=str(tmp_path / "storage"),
        db_file=str(tmp_path / "db.json"),
        bot_token="",
        cache_telegram_files=True,
        s3_bucket_name=TEST_BUCKET_NAME,
        aws_region=TEST_REGION,
        aws_endpoint_url=None,
    )


@pytest.fixture
def presigned_settings(settings) -> Settings:
    return settings.model_copy(update={"storage_mode": "presigned"})


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def telegram() -> FakeTelegramClient:
    return FakeTelegramClient()


@pytest.fixture
def client(settings, store, telegram) -> TestClient:
    """Local-mode app with a fake Telegram client."""
    app = create_app(settings, store=store, telegram=telegram)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def client_without_telegram(settings, store) -> TestClient:
    """Local-mode app with no bot token configured."""
    app = create_app(settings, store=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def presigned_client(presigned_settings, store, mocked_aws) -> TestClient:
    app = create_app(presigned_settings, store=store, s3_client=mocked_aws)
    with TestClient(app) as test_client:
        yield test_client
