import io
import threading
from pathlib import Path

import pytest

from cloudpdf_api.adapters.local_cache import LocalCacheOrigin
from cloudpdf_api.errors import (
    ConfigurationError,
    NotFoundError,
    UnsupportedSourceError,
    UpstreamError,
    ValidationError,
)
from cloudpdf_api.schemas import TelegramMessage
from tests.consts import (
    TEST_PDF_CONTENT,
    TEST_PDF_CONTENT_TYPE,
    TEST_PDF_NAME,
    TEST_TELEGRAM_FILE_ID,
    TEST_TELEGRAM_FILE_PATH,
)
from tests.fixtures.telegram_fixtures import FakeTelegramClient


@pytest.fixture
def origin(settings, store, telegram) -> LocalCacheOrigin:
    telegram.add_file(TEST_TELEGRAM_FILE_ID, TEST_TELEGRAM_FILE_PATH, TEST_PDF_CONTENT)
    return LocalCacheOrigin(store, settings, telegram=telegram)


@pytest.fixture
def origin_without_telegram(settings, store) -> LocalCacheOrigin:
    return LocalCacheOrigin(store, settings)


def telegram_record(document_id="tg1", file_id=TEST_TELEGRAM_FILE_ID):
    return {
        "id": document_id,
        "source": "telegram",
        "file_id": file_id,
        "name": "scan.pdf",
        "title": "scan.pdf",
        "category": "Telegram",
        "date": 1,
        "size": None,
    }


def upload(origin, content=TEST_PDF_CONTENT, filename=TEST_PDF_NAME, content_type=TEST_PDF_CONTENT_TYPE, **kwargs):
    return origin.store_upload(io.BytesIO(content), filename, content_type, **kwargs)


def test_storage_dir_is_created(settings, store):
    LocalCacheOrigin(store, settings)
    assert Path(settings.storage_dir).is_dir()


def test_no_bot_token_means_no_telegram_client(origin_without_telegram):
    assert origin_without_telegram.telegram is None


def test_bot_token_builds_a_telegram_client(settings, store):
    origin = LocalCacheOrigin(store, settings.model_copy(update={"bot_token": "123:abc"}))
    assert origin.telegram is not None
    assert origin.telegram.bot_token == "123:abc"


#######################
# --- store_upload --- #
#######################

def test_store_upload_creates_record_and_file(origin, store, settings):
    record = upload(origin, title="Q1", category="Finance")

    assert record["source"] == "upload"
    assert record["title"] == "Q1"
    assert record["name"] == TEST_PDF_NAME
    assert record["category"] == "Finance"
    assert record["size"] == len(TEST_PDF_CONTENT)
    assert Path(record["localPath"]) == Path(settings.storage_dir) / f"{record['id']}.pdf"
    assert Path(record["localPath"]).read_bytes() == TEST_PDF_CONTENT
    assert store.find(record["id"]) == record


def test_store_upload_defaults_title_and_category(origin):
    record = upload(origin)
    assert record["title"] == TEST_PDF_NAME
    assert record["category"] == "Uncategorized"


def test_store_upload_without_extension_uses_pdf(origin):
    record = upload(origin, filename="scan")
    assert record["localPath"].endswith(f"{record['id']}.pdf")


def test_store_upload_rejects_other_content_types(origin, store, settings):
    with pytest.raises(ValidationError) as exc_info:
        upload(origin, filename="notes.txt", content_type="text/plain")

    assert exc_info.value.message == "Only PDFs allowed"
    assert store.list() == []
    assert list(Path(settings.storage_dir).iterdir()) == []


def test_store_upload_rejects_oversized_files(settings, store):
    origin = LocalCacheOrigin(store, settings.model_copy(update={"max_upload_bytes": 16}))

    with pytest.raises(ValidationError) as exc_info:
        upload(origin)

    assert exc_info.value.details == {"maxBytes": 16}
    assert store.list() == []
    assert list(Path(settings.storage_dir).iterdir()) == []


##################
# --- resolve --- #
##################

def test_resolve_unknown_id_raises_not_found(origin):
    with pytest.raises(NotFoundError):
        origin.resolve("missing")


def test_resolve_uploaded_file(origin):
    record = upload(origin, title="Q1")

    local_file = origin.resolve(record["id"])

    assert local_file.path == Path(record["localPath"])
    assert local_file.filename == "Q1"


def test_resolve_filename_falls_back_to_id(origin, store, tmp_path):
    path = tmp_path / "bare.pdf"
    path.write_bytes(TEST_PDF_CONTENT)
    store.add({"id": "bare", "source": "upload", "date": 1, "localPath": str(path)})

    assert origin.resolve("bare").filename == "bare.pdf"


def test_resolve_telegram_downloads_and_caches(origin, store, telegram, settings):
    store.add(telegram_record())

    local_file = origin.resolve("tg1")

    expected = Path(settings.storage_dir) / "tg1-file_42.pdf"
    assert local_file.path == expected
    assert expected.read_bytes() == TEST_PDF_CONTENT
    cached = store.find("tg1")
    assert cached["localPath"] == str(expected)
    assert isinstance(cached["cachedAt"], int)
    assert cached["source"] == "telegram"


def test_resolve_cached_telegram_skips_network(origin, store, telegram):
    store.add(telegram_record())
    origin.resolve("tg1")
    origin.resolve("tg1")

    assert telegram.get_file_calls == [TEST_TELEGRAM_FILE_ID]
    assert telegram.downloads == [TEST_TELEGRAM_FILE_PATH]


def test_resolve_telegram_refetches_when_cached_file_vanished(origin, store, telegram):
    store.add(telegram_record())
    Path(origin.resolve("tg1").path).unlink()

    origin.resolve("tg1")

    assert len(telegram.downloads) == 2


def test_resolve_telegram_without_token_raises_configuration_error(origin_without_telegram, store):
    store.add(telegram_record())

    with pytest.raises(ConfigurationError):
        origin_without_telegram.resolve("tg1")


def test_resolve_telegram_lookup_failure_raises_upstream_error(origin, store):
    store.add(telegram_record(file_id="unknown-file"))

    with pytest.raises(UpstreamError) as exc_info:
        origin.resolve("tg1")

    assert exc_info.value.details["info"]["ok"] is False
    assert "localPath" not in store.find("tg1")


@pytest.mark.parametrize("source", ["s3", "dropbox"])
def test_resolve_unsupported_source(origin, store, source):
    store.add({"id": "x1", "source": source, "date": 1, "key": "uploads/x.pdf"})

    with pytest.raises(UnsupportedSourceError):
        origin.resolve("x1")


def test_resolve_upload_with_missing_file_is_unsupported(origin, store):
    record = upload(origin)
    Path(record["localPath"]).unlink()

    with pytest.raises(UnsupportedSourceError):
        origin.resolve(record["id"])


def test_concurrent_resolves_share_one_download(settings, store):
    telegram = FakeTelegramClient(download_delay=0.05)
    telegram.add_file(TEST_TELEGRAM_FILE_ID, TEST_TELEGRAM_FILE_PATH, TEST_PDF_CONTENT)
    origin = LocalCacheOrigin(store, settings, telegram=telegram)
    store.add(telegram_record())

    results = []
    barrier = threading.Barrier(5)

    def read():
        barrier.wait()
        results.append(origin.resolve("tg1").path)

    threads = [threading.Thread(target=read) for _ in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 5
    assert len(set(results)) == 1
    assert telegram.downloads == [TEST_TELEGRAM_FILE_PATH]


#################
# --- delete --- #
#################

def test_delete_removes_record_and_file(origin, store):
    record = upload(origin)

    origin.delete(record["id"])

    assert store.find(record["id"]) is None
    assert not Path(record["localPath"]).exists()


def test_delete_with_missing_file_still_removes_record(origin, store):
    record = upload(origin)
    Path(record["localPath"]).unlink()

    origin.delete(record["id"])

    assert store.find(record["id"]) is None


def test_delete_uncached_telegram_record(origin, store):
    store.add(telegram_record())
    origin.delete("tg1")
    assert store.list() == []


def test_delete_unknown_id_raises_not_found(origin):
    with pytest.raises(NotFoundError):
        origin.delete("missing")


####################################
# --- ingest_telegram_message --- #
####################################

def test_ingest_message_without_document_is_ignored(origin, store):
    assert origin.ingest_telegram_message(TelegramMessage(text="hello")) is None
    assert store.list() == []


def test_ingest_document_creates_and_precaches_record(origin, store, telegram):
    message = TelegramMessage.model_validate(
        {"document": {"file_id": TEST_TELEGRAM_FILE_ID, "file_name": "scan.pdf", "file_size": 1234}}
    )

    document_id = origin.ingest_telegram_message(message)

    record = store.find(document_id)
    assert record["source"] == "telegram"
    assert record["file_id"] == TEST_TELEGRAM_FILE_ID
    assert record["name"] == "scan.pdf"
    assert record["title"] == "scan.pdf"
    assert record["category"] == "Telegram"
    assert record["size"] == 1234
    assert Path(record["localPath"]).read_bytes() == TEST_PDF_CONTENT
    assert telegram.downloads == [TEST_TELEGRAM_FILE_PATH]


def test_ingest_document_without_name_gets_defaults(origin, store):
    message = TelegramMessage.model_validate({"document": {"file_id": TEST_TELEGRAM_FILE_ID}})

    document_id = origin.ingest_telegram_message(message)

    record = store.find(document_id)
    assert record["name"] == "telegram_file.pdf"
    assert record["title"] == f"Telegram {document_id}"
    assert record["size"] is None


def test_ingest_precache_failure_keeps_uncached_record(origin, store):
    message = TelegramMessage.model_validate({"document": {"file_id": "expired-file"}})

    document_id = origin.ingest_telegram_message(message)

    record = store.find(document_id)
    assert record is not None
    assert "localPath" not in record


def test_ingest_skips_precache_when_disabled(settings, store, telegram):
    telegram.add_file(TEST_TELEGRAM_FILE_ID, TEST_TELEGRAM_FILE_PATH, TEST_PDF_CONTENT)
    origin = LocalCacheOrigin(store, settings.model_copy(update={"cache_telegram_files": False}), telegram=telegram)
    message = TelegramMessage.model_validate({"document": {"file_id": TEST_TELEGRAM_FILE_ID}})

    document_id = origin.ingest_telegram_message(message)

    assert "localPath" not in store.find(document_id)
    assert telegram.get_file_calls == []


def test_ingest_without_token_records_lazily_resolvable_document(origin_without_telegram, store):
    message = TelegramMessage.model_validate({"document": {"file_id": TEST_TELEGRAM_FILE_ID}})

    document_id = origin_without_telegram.ingest_telegram_message(message)

    assert store.find(document_id)["file_id"] == TEST_TELEGRAM_FILE_ID


def test_list_entries_hide_storage_details(origin, store):
    upload(origin, title="Q1")
    store.add(telegram_record())

    entries = [entry.model_dump() for entry in origin.list_entries()]

    assert [entry["title"] for entry in entries] == ["Q1", "scan.pdf"]
    assert all("localPath" not in entry and "file_id" not in entry for entry in entries)
