from types import SimpleNamespace
from google.genai import errors as genai_errors
from core.file_search_tool import (
    FileSearchConfig,
    config_from_settings,
    create_file_search_tool,
    is_file_search_available,
)


def test_tool_unavailable_without_stores():
    assert create_file_search_tool(None) is None
    assert create_file_search_tool(FileSearchConfig(store_names=[])) is None
    assert is_file_search_available(FileSearchConfig(store_names=["a"])) is True


def test_config_from_settings_puts_selected_store_first():
    cfg = config_from_settings({
        "file_search_store_names": ["fileSearchStores/a", "fileSearchStores/b"],
        "file_search_top_k": 5,
        "selected_store": "fileSearchStores/b",
    })
    assert cfg.store_names == ["fileSearchStores/b", "fileSearchStores/a"]
    assert cfg.top_k == 5
    assert config_from_settings({"file_search_store_names": []}) is None


def test_execute_binds_first_store_and_top_k(fake_client):
    chunk = SimpleNamespace(retrieved_context=SimpleNamespace(
        title="policy.pdf", text="16 days", file_search_store="fileSearchStores/a"
    ))
    fake_client.models.response = SimpleNamespace(
        text="You get 16 days.",
        candidates=[SimpleNamespace(grounding_metadata=SimpleNamespace(grounding_chunks=[chunk, chunk]))],
    )
    tool = create_file_search_tool(FileSearchConfig(store_names=["a", "b"], top_k=3))

    result = tool.execute("vacation days?")

    assert result["success"] is True
    assert result["results"] == "You get 16 days."
    assert result["store_name"] == "fileSearchStores/a"
    assert result["sources"] == [{"title": "policy.pdf", "text": "16 days", "store": "fileSearchStores/a"}]

    call = fake_client.models.calls[0]
    assert call["contents"] == "vacation days?"
    file_search = call["config"].tools[0].file_search
    assert file_search.file_search_store_names == ["fileSearchStores/a"]
    assert file_search.top_k == 3


def test_execute_without_text_reports_no_results(fake_client):
    fake_client.models.response = SimpleNamespace(text=None, candidates=[])
    tool = create_file_search_tool(FileSearchConfig(store_names=["a"]))
    assert tool.execute("q")["results"] == "No results found"


def test_execute_returns_failure_instead_of_raising(fake_client):
    fake_client.models.error = genai_errors.ClientError(
        400, {"error": {"code": 400, "message": "quota", "status": "INVALID_ARGUMENT"}}
    )
    tool = create_file_search_tool(FileSearchConfig(store_names=["a"]))
    result = tool.execute("q")
    assert result == {"success": False, "query": "q", "error": "quota", "store_name": "fileSearchStores/a"}


def test_execute_reports_connection_failure(fake_client):
    fake_client.models.error = ConnectionError("connection reset")
    tool = create_file_search_tool(FileSearchConfig(store_names=["a"]))
    result = tool.execute("q")
    assert result == {"success": False, "query": "q", "error": "connection reset", "store_name": "fileSearchStores/a"}


def test_execute_reports_malformed_grounding(fake_client):
    # candidates가 리스트가 아닌 응답도 실패 결과로 처리
    fake_client.models.response = SimpleNamespace(text="answer", candidates=7)
    tool = create_file_search_tool(FileSearchConfig(store_names=["a"]))
    result = tool.execute("q")
    assert result["success"] is False
    assert result["store_name"] == "fileSearchStores/a"


def test_declaration_shape():
    tool = create_file_search_tool(FileSearchConfig(store_names=["a"]))
    decl = tool.declaration()
    assert decl["name"] == "file_search"
    assert decl["parameters"]["required"] == ["query"]
