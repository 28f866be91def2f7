"""
채팅용 File Search 도구 어댑터
생성 도중 모델이 호출할 수 있는 검색 도구를 만든다.
도구 내부에서는 File Search 전용 모델로 generate_content를 수행한다.
"""
import logging
from dataclasses import dataclass, field
from google.genai import types
import config
from core import gemini
from core.grounding import parse_response_sources
from core.resource_names import build_store_name

logger = logging.getLogger(__name__)

TOOL_NAME = "file_search"
TOOL_DESCRIPTION = (
    "Search for information in the configured file search store. Use this tool when "
    "the user asks about documents, files, or specific information that might be "
    "stored in the knowledge base."
)
NO_RESULTS = "No results found"


@dataclass
class FileSearchConfig:
    store_names: list[str] = field(default_factory=list)
    top_k: int | None = None


def is_file_search_available(search_config: FileSearchConfig | None) -> bool:
    """검색 가능한 Store가 하나 이상 설정되어 있는지"""
    return bool(search_config and search_config.store_names)


def config_from_settings(settings: dict) -> FileSearchConfig | None:
    """사용자 설정 → 도구 설정. 선택된 Store를 맨 앞에 둔다."""
    names = list(settings.get("file_search_store_names") or [])
    selected = settings.get("selected_store")
    if selected and selected in names:
        names.remove(selected)
        names.insert(0, selected)
    if not names:
        return None
    return FileSearchConfig(store_names=names, top_k=settings.get("file_search_top_k"))


class FileSearchTool:
    """단일 Store에 묶인 검색 도구"""

    name = TOOL_NAME
    description = TOOL_DESCRIPTION
    input_schema = {
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": "The search query to find relevant information",
            },
        },
        "required": ["query"],
    }

    def __init__(self, store_name: str, top_k: int | None = None, model: str | None = None):
        self.store_name = build_store_name(store_name)
        self.top_k = top_k
        self.model = model or config.FILE_SEARCH_MODEL

    def _tool(self) -> types.Tool:
        return types.Tool(
            file_search=types.FileSearch(
                file_search_store_names=[self.store_name],
                top_k=self.top_k or None,
            )
        )

    def execute(self, query: str) -> dict:
        """검색 실행. 실패해도 예외 대신 success=False 결과를 돌려준다."""
        try:
            client = gemini.get_client()
            response = client.models.generate_content(
                model=self.model,
                contents=query,
                config=types.GenerateContentConfig(tools=[self._tool()]),
            )
            results = response.text or NO_RESULTS
            sources = parse_response_sources(response)
        except Exception as e:
            logger.error("file_search_failed", exc_info=True, extra={"store": self.store_name})
            return {
                "success": False,
                "query": query,
                "error": getattr(e, "message", None) or str(e) or "Search failed",
                "store_name": self.store_name,
            }

        return {
            "success": True,
            "query": query,
            "results": results,
            "sources": sources,
            "store_name": self.store_name,
        }

    def declaration(self) -> dict:
        """function calling 선언 형식"""
        return {"name": self.name, "description": self.description, "parameters": self.input_schema}


def create_file_search_tool(search_config: FileSearchConfig | None) -> FileSearchTool | None:
    """설정된 Store가 없으면 None, 있으면 첫 번째 Store에 묶인 도구 반환"""
    if not is_file_search_available(search_config):
        return None
    return FileSearchTool(search_config.store_names[0], top_k=search_config.top_k)
