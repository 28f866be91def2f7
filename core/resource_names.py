"""
리소스 이름 정규화 유틸리티
fileSearchStores/{id}/documents/{id} 형식의 계층형 이름 생성/파싱
"""
STORE_PREFIX = "fileSearchStores/"
DOCUMENT_SEPARATOR = "/documents/"

_SIZE_UNITS = ["B", "KB", "MB", "GB", "TB"]


def build_store_name(store_id: str) -> str:
    """Store ID → 전체 리소스 이름 (이미 전체 이름이면 그대로)"""
    if store_id.startswith(STORE_PREFIX):
        return store_id
    return f"{STORE_PREFIX}{store_id}"


def build_document_name(store_id: str, document_id: str) -> str:
    """Store ID + 문서 ID → 전체 문서 리소스 이름"""
    if DOCUMENT_SEPARATOR in document_id:
        return document_id
    return f"{build_store_name(store_id)}{DOCUMENT_SEPARATOR}{document_id}"


def extract_store_id(name: str) -> str:
    """fileSearchStores/my-store-123 → my-store-123"""
    return name.replace(STORE_PREFIX, "", 1)


def extract_document_id(name: str) -> str:
    """fileSearchStores/s/documents/d → d (구분자가 없으면 입력 그대로)"""
    parts = name.split(DOCUMENT_SEPARATOR, 1)
    if len(parts) == 2 and parts[1]:
        return parts[1]
    return name


def as_int(value, default: int = 0) -> int:
    """업스트림이 문자열로 보내는 숫자 필드를 int로 변환 (실패 시 default)"""
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return default


def format_bytes(size: int) -> str:
    """바이트 수를 사람이 읽기 쉬운 문자열로 (1024 단위, 소수 1자리)"""
    if size <= 0:
        return "0 B"
    idx = 0
    value = float(size)
    while value >= 1024 and idx < len(_SIZE_UNITS) - 1:
        value /= 1024
        idx += 1
    value = round(value, 1)
    if value == int(value):
        value = int(value)
    return f"{value} {_SIZE_UNITS[idx]}"


def total_document_count(store: dict) -> int:
    """active + pending + failed 문서 수 합계"""
    return (
        as_int(store.get("active_documents_count"))
        + as_int(store.get("pending_documents_count"))
        + as_int(store.get("failed_documents_count"))
    )
