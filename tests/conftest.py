import os
import sys
import shutil
import tempfile
from types import SimpleNamespace
import pytest

# 프로젝트 루트를 경로에 추가
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# config 임포트 전에 환경변수 설정
_BASE = tempfile.mkdtemp(prefix="fs_tests_")
os.environ["DATA_DIR"] = os.path.join(_BASE, "data")
os.environ["DB_PATH"] = os.path.join(_BASE, "data", "app.db")
os.environ["LOG_DIR"] = os.path.join(_BASE, "logs")
os.environ["GEMINI_API_KEY"] = "test-key"
os.environ["JWT_SECRET_KEY"] = "test_secret"
os.environ["POLL_INTERVAL_SECONDS"] = "1"
os.environ["POLL_TIMEOUT_SECONDS"] = "5"

from fastapi.testclient import TestClient  # noqa: E402


class FakePager:
    """google-genai Pager 흉내: page + config['page_token']"""

    def __init__(self, items, next_token=None):
        self.page = list(items)
        self.config = {"page_token": next_token}

    def __iter__(self):
        return iter(self.page)


class FakeDocuments:
    def __init__(self):
        self.docs = {}
        self.list_calls = []
        self.deleted = []
        self.next_token = None

    def list(self, parent, config=None):
        self.list_calls.append((parent, config))
        return FakePager(
            [d for name, d in self.docs.items() if name.startswith(parent + "/documents/")],
            self.next_token,
        )

    def get(self, name):
        return self.docs[name]

    def delete(self, name, config=None):
        self.deleted.append((name, config))
        self.docs.pop(name, None)


class FakeFileSearchStores:
    def __init__(self):
        self.stores = {}
        self.documents = FakeDocuments()
        self.list_calls = []
        self.deleted = []
        self.uploads = []
        self.next_token = None
        self.upload_result = SimpleNamespace(name="fileSearchStores/s1/upload/operations/op-1", done=False)
        self.error = None

    def _check(self):
        if self.error:
            raise self.error

    def list(self, config=None):
        self._check()
        self.list_calls.append(config)
        return FakePager(self.stores.values(), self.next_token)

    def get(self, name):
        self._check()
        return self.stores[name]

    def create(self, config=None):
        self._check()
        name = f"fileSearchStores/store-{len(self.stores) + 1}"
        store = SimpleNamespace(
            name=name,
            display_name=config["display_name"],
            create_time="2026-01-01T00:00:00Z",
            update_time="2026-01-01T00:00:00Z",
            active_documents_count=None,
            pending_documents_count=None,
            failed_documents_count=None,
            size_bytes=None,
        )
        self.stores[name] = store
        return store

    def delete(self, name, config=None):
        self._check()
        self.deleted.append((name, config))
        self.stores.pop(name, None)

    def upload_to_file_search_store(self, file, file_search_store_name, config=None):
        self._check()
        with open(file, "rb") as f:
            data = f.read()
        self.uploads.append({
            "path": file,
            "data": data,
            "store": file_search_store_name,
            "config": config,
        })
        return self.upload_result


class FakeOperations:
    """get() 호출마다 queue에서 하나씩 꺼냄 (마지막 항목은 반복)"""

    def __init__(self):
        self.queue = []
        self.calls = []

    def get(self, operation):
        self.calls.append(operation.name)
        if len(self.queue) > 1:
            return self.queue.pop(0)
        return self.queue[0]


class FakeModels:
    def __init__(self):
        self.calls = []
        self.response = SimpleNamespace(text="answer", candidates=[])
        self.error = None

    def generate_content(self, model, contents, config=None):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error:
            raise self.error
        return self.response


class FakeClient:
    def __init__(self):
        self.file_search_stores = FakeFileSearchStores()
        self.operations = FakeOperations()
        self.models = FakeModels()


def make_store(store_id, display_name="Store", **counts):
    return SimpleNamespace(
        name=f"fileSearchStores/{store_id}",
        display_name=display_name,
        create_time="2026-01-01T00:00:00Z",
        update_time="2026-01-02T00:00:00Z",
        active_documents_count=counts.get("active", "0"),
        pending_documents_count=counts.get("pending", "0"),
        failed_documents_count=counts.get("failed", "0"),
        size_bytes=counts.get("size", "0"),
    )


def make_document(store_id, doc_id, display_name="doc.pdf", state="STATE_ACTIVE", size="10"):
    return SimpleNamespace(
        name=f"fileSearchStores/{store_id}/documents/{doc_id}",
        display_name=display_name,
        state=state,
        size_bytes=size,
        mime_type="application/pdf",
        create_time="2026-01-01T00:00:00Z",
        update_time="2026-01-01T00:00:00Z",
        custom_metadata=None,
    )


def op(name="fileSearchStores/s1/upload/operations/op-1", done=False, error=None, response=None):
    return SimpleNamespace(name=name, done=done, error=error, response=response, metadata=None)


@pytest.fixture
def fake_client(monkeypatch):
    from core import gemini
    client = FakeClient()
    monkeypatch.setattr(gemini, "get_client", lambda: client)
    return client


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    """document_uploader의 time 모듈만 교체 (전역 time.sleep은 유지)"""
    from core import document_uploader
    sleeps = []
    monkeypatch.setattr(document_uploader, "time", SimpleNamespace(sleep=sleeps.append))
    return sleeps


@pytest.fixture(scope="session")
def app_client():
    from server.app import app
    from server.database import init_db
    init_db()
    yield TestClient(app)
    shutil.rmtree(_BASE, ignore_errors=True)


@pytest.fixture(autouse=True)
def reset_settings():
    from server.database import get_db, init_db
    init_db()
    yield
    conn = get_db()
    try:
        conn.execute("DELETE FROM user_settings")
        conn.commit()
    finally:
        conn.close()


@pytest.fixture
def auth_headers(app_client):
    from server.auth import create_access_token
    token = create_access_token("user_001", "user", "user")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(app_client):
    from server.auth import create_access_token
    token = create_access_token("admin_001", "admin", "admin")
    return {"Authorization": f"Bearer {token}"}
