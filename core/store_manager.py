"""
File Search Store 관리 모듈
Store / Document CRUD를 Gemini API로 그대로 전달하고 응답을 dict로 정리한다.
"""
import logging
from datetime import datetime
from google.genai import errors as genai_errors
from core import gemini
from core.errors import translate_api_error
from core.resource_names import (
    as_int, build_store_name, extract_document_id, extract_store_id,
)

logger = logging.getLogger(__name__)


def _field(obj, name: str, camel: str | None = None):
    """SDK 객체/dict 양쪽에서 필드 조회"""
    if isinstance(obj, dict):
        if name in obj:
            return obj[name]
        return obj.get(camel) if camel else None
    return getattr(obj, name, None)


def _timestamp(value) -> str | None:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _enum_value(value) -> str:
    if value is None:
        return "STATE_UNSPECIFIED"
    return getattr(value, "value", value)


def _pager_result(pager) -> tuple[list, str | None]:
    """SDK Pager에서 현재 페이지 항목과 다음 페이지 토큰 추출"""
    items = list(pager.page or [])
    next_token = (pager.config or {}).get("page_token") or None
    return items, next_token


def _list_config(page_size: int | None, page_token: str | None) -> dict:
    cfg = {}
    if page_size:
        cfg["page_size"] = page_size
    if page_token:
        cfg["page_token"] = page_token
    return cfg


def parse_store(store) -> dict:
    """Store 응답 정리 (숫자 문자열 → int)"""
    name = _field(store, "name") or ""
    return {
        "name": name,
        "store_id": extract_store_id(name),
        "display_name": _field(store, "display_name", "displayName") or "",
        "create_time": _timestamp(_field(store, "create_time", "createTime")),
        "update_time": _timestamp(_field(store, "update_time", "updateTime")),
        "active_documents_count": as_int(_field(store, "active_documents_count", "activeDocumentsCount")),
        "pending_documents_count": as_int(_field(store, "pending_documents_count", "pendingDocumentsCount")),
        "failed_documents_count": as_int(_field(store, "failed_documents_count", "failedDocumentsCount")),
        "size_bytes": as_int(_field(store, "size_bytes", "sizeBytes")),
    }


def _parse_metadata(entry) -> dict:
    item = {"key": _field(entry, "key")}
    string_value = _field(entry, "string_value", "stringValue")
    if string_value is not None:
        item["string_value"] = string_value
    string_list = _field(entry, "string_list_value", "stringListValue")
    if string_list is not None:
        item["string_list_value"] = list(_field(string_list, "values") or [])
    numeric_value = _field(entry, "numeric_value", "numericValue")
    if numeric_value is not None:
        item["numeric_value"] = numeric_value
    return item


def parse_document(doc) -> dict:
    """Document 응답 정리 (size_bytes → int, state → 문자열)"""
    name = _field(doc, "name") or ""
    parsed = {
        "name": name,
        "document_id": extract_document_id(name),
        "display_name": _field(doc, "display_name", "displayName") or "",
        "state": _enum_value(_field(doc, "state")),
        "size_bytes": as_int(_field(doc, "size_bytes", "sizeBytes")),
        "mime_type": _field(doc, "mime_type", "mimeType"),
        "create_time": _timestamp(_field(doc, "create_time", "createTime")),
        "update_time": _timestamp(_field(doc, "update_time", "updateTime")),
    }
    metadata = _field(doc, "custom_metadata", "customMetadata")
    if metadata:
        parsed["custom_metadata"] = [_parse_metadata(m) for m in metadata]
    return parsed


# ── Store ──────────────────────────────────────────────

def list_stores(page_size: int | None = None, page_token: str | None = None) -> dict:
    """File Search Store 목록 (한 페이지) 반환"""
    client = gemini.get_client()
    try:
        pager = client.file_search_stores.list(config=_list_config(page_size, page_token))
        stores, next_token = _pager_result(pager)
    except genai_errors.APIError as e:
        raise translate_api_error(e, "Store 목록 조회에 실패했습니다") from e
    return {
        "stores": [parse_store(s) for s in stores],
        "next_page_token": next_token,
    }


def get_store(store_id: str) -> dict:
    """단일 Store 조회"""
    client = gemini.get_client()
    try:
        store = client.file_search_stores.get(name=build_store_name(store_id))
    except genai_errors.APIError as e:
        raise translate_api_error(e, "Store 조회에 실패했습니다") from e
    return parse_store(store)


def create_store(display_name: str) -> dict:
    """새 Store 생성"""
    client = gemini.get_client()
    try:
        store = client.file_search_stores.create(config={"display_name": display_name})
    except genai_errors.APIError as e:
        raise translate_api_error(e, "Store 생성에 실패했습니다") from e
    logger.info("store_created", extra={"store": _field(store, "name")})
    return parse_store(store)


def get_or_create_store(display_name: str) -> str:
    """
    display_name으로 기존 Store를 찾거나 없으면 새로 생성.
    Store의 name(리소스 ID)을 반환한다.
    """
    client = gemini.get_client()
    try:
        for store in client.file_search_stores.list():
            if store.display_name == display_name:
                return store.name
    except genai_errors.APIError as e:
        raise translate_api_error(e, "Store 목록 조회에 실패했습니다") from e

    return create_store(display_name)["name"]


def delete_store(store_id: str, force: bool = True):
    """Store 삭제 (force=True면 문서 포함)"""
    client = gemini.get_client()
    name = build_store_name(store_id)
    try:
        client.file_search_stores.delete(name=name, config={"force": force})
    except genai_errors.APIError as e:
        raise translate_api_error(e, "Store 삭제에 실패했습니다") from e
    logger.info("store_deleted", extra={"store": name})


# ── Document ───────────────────────────────────────────

def list_documents(store_id: str, page_size: int | None = None, page_token: str | None = None) -> dict:
    """특정 Store의 문서 목록 (한 페이지) 반환"""
    client = gemini.get_client()
    try:
        pager = client.file_search_stores.documents.list(
            parent=build_store_name(store_id),
            config=_list_config(page_size, page_token),
        )
        docs, next_token = _pager_result(pager)
    except genai_errors.APIError as e:
        raise translate_api_error(e, "문서 목록 조회에 실패했습니다") from e
    return {
        "documents": [parse_document(d) for d in docs],
        "next_page_token": next_token,
    }


def get_document(document_name: str) -> dict:
    """단일 문서 조회 (전체 리소스 이름)"""
    client = gemini.get_client()
    try:
        doc = client.file_search_stores.documents.get(name=document_name)
    except genai_errors.APIError as e:
        raise translate_api_error(e, "문서 조회에 실패했습니다") from e
    return parse_document(doc)


def delete_document(document_name: str, force: bool = True):
    """Store에서 특정 문서 삭제 (force=True면 청크 포함)"""
    client = gemini.get_client()
    try:
        client.file_search_stores.documents.delete(name=document_name, config={"force": force})
    except genai_errors.APIError as e:
        raise translate_api_error(e, "문서 삭제에 실패했습니다") from e
    logger.info("document_deleted", extra={"document": document_name})
