"""
문서 업로드 및 인덱싱 모듈
파일을 File Search Store에 업로드하고 업로드 Operation을 폴링한다.
"""
import logging
import mimetypes
import shutil
import tempfile
import time
import uuid
from pathlib import Path
from google.genai import errors as genai_errors
from google.genai import types
import config
from core import gemini
from core.errors import (
    FileSearchError, OperationFailedError, OperationTimeoutError, translate_api_error,
)
from core.resource_names import build_store_name

logger = logging.getLogger(__name__)

# 확장자 → MIME 타입 매핑 (mimetypes 추정보다 우선)
MIME_MAP = {
    ".hwp": "application/x-hwp",
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".doc": "application/msword",
    ".txt": "text/plain",
    ".json": "application/json",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".md": "text/markdown",
    ".csv": "text/csv",
    ".html": "text/html",
}

MAX_UPLOAD_BYTES = config.MAX_UPLOAD_MB * 1024 * 1024
DEFAULT_MIME_TYPE = "application/octet-stream"


def _resolve_mime_type(file_name: str, mime_type: str | None) -> str:
    """명시값 → MIME_MAP → mimetypes 추정 → octet-stream (SDK는 MIME 미확정 시 업로드 거부)"""
    if mime_type and mime_type != DEFAULT_MIME_TYPE:
        return mime_type
    mapped = MIME_MAP.get(Path(file_name).suffix.lower())
    if mapped:
        return mapped
    guessed, _ = mimetypes.guess_type(file_name)
    return guessed or DEFAULT_MIME_TYPE


def parse_operation(operation) -> dict:
    """Operation 응답 정리. error는 {"code", "message"} 형태로 맞춘다."""
    if isinstance(operation, dict):
        get = operation.get
    else:
        def get(key):
            return getattr(operation, key, None)

    result = {"name": get("name"), "done": bool(get("done"))}

    error = get("error")
    if error:
        if not isinstance(error, dict):
            error = {"code": getattr(error, "code", None), "message": getattr(error, "message", None)}
        result["error"] = {"code": error.get("code"), "message": error.get("message")}

    response = get("response")
    if response is not None:
        if hasattr(response, "model_dump"):
            response = response.model_dump(mode="json", exclude_none=True)
        result["response"] = response

    metadata = get("metadata")
    if metadata:
        result["metadata"] = metadata
    return result


def upload_bytes(
    store_id: str,
    data: bytes,
    file_name: str,
    display_name: str | None = None,
    mime_type: str | None = None,
    custom_metadata: list[dict] | None = None,
    chunking_config: dict | None = None,
) -> dict:
    """
    바이트 데이터를 File Search Store에 업로드하고 Operation을 반환 (대기하지 않음).
    한글 파일명 등 non-ASCII 이름 대응: 임시 ASCII 파일명으로 저장 후 업로드,
    원본 이름은 display_name으로 유지한다.
    """
    if not store_id or not store_id.strip():
        raise FileSearchError("store_name은 필수입니다")
    if len(data) > MAX_UPLOAD_BYTES:
        raise FileSearchError(f"파일 크기는 {config.MAX_UPLOAD_MB}MB 이하여야 합니다")

    store_name = build_store_name(store_id.strip())
    upload_config = {"display_name": display_name or file_name}
    upload_config["mime_type"] = _resolve_mime_type(file_name, mime_type)
    if custom_metadata:
        upload_config["custom_metadata"] = custom_metadata
    if chunking_config:
        upload_config["chunking_config"] = chunking_config

    client = gemini.get_client()
    temp_dir = tempfile.mkdtemp()
    try:
        upload_path = Path(temp_dir) / f"{uuid.uuid4().hex}{Path(file_name).suffix.lower()}"
        upload_path.write_bytes(data)

        operation = client.file_search_stores.upload_to_file_search_store(
            file=str(upload_path),
            file_search_store_name=store_name,
            config=upload_config,
        )
    except genai_errors.APIError as e:
        raise translate_api_error(e, "파일 업로드에 실패했습니다") from e
    except ValueError as e:
        # SDK 클라이언트 측 검증 실패 (MIME 타입 등)
        raise FileSearchError(f"파일 업로드에 실패했습니다: {e}") from e
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    result = parse_operation(operation)
    logger.info("upload_started", extra={"store": store_name, "operation": result["name"]})
    return result


def get_operation(operation_name: str) -> dict:
    """업로드 Operation 상태 조회"""
    client = gemini.get_client()
    try:
        operation = client.operations.get(
            types.UploadToFileSearchStoreOperation(name=operation_name)
        )
    except genai_errors.APIError as e:
        raise translate_api_error(e, "Operation 상태 조회에 실패했습니다") from e
    return parse_operation(operation)


def _raise_if_failed(operation: dict) -> dict:
    error = operation.get("error")
    if error:
        raise OperationFailedError(error.get("message") or "Operation이 실패했습니다")
    return operation


def poll_operation(
    operation_name: str,
    interval: float | None = None,
    timeout: float | None = None,
) -> dict:
    """
    Operation이 done이 될 때까지 고정 간격으로 재조회.

    - done + error → OperationFailedError
    - done → 완료된 Operation 반환
    - 누적 대기 시간이 timeout에 도달 → OperationTimeoutError
    """
    interval = config.POLL_INTERVAL_SECONDS if interval is None else interval
    timeout = config.POLL_TIMEOUT_SECONDS if timeout is None else timeout

    elapsed = 0
    while elapsed < timeout:
        operation = get_operation(operation_name)
        if operation["done"]:
            return _raise_if_failed(operation)
        time.sleep(interval)
        elapsed += interval

    logger.warning("operation_timeout", extra={"operation": operation_name})
    raise OperationTimeoutError("Operation 대기 시간이 초과되었습니다. 나중에 상태를 다시 확인하세요.")


def wait_for_operation(operation: dict, interval: float | None = None, timeout: float | None = None) -> dict:
    """upload_bytes가 반환한 Operation을 종료 상태까지 대기"""
    if operation["done"]:
        return _raise_if_failed(operation)
    return poll_operation(operation["name"], interval=interval, timeout=timeout)


def upload_file(file_path: str | Path, store_id: str, wait: bool = True) -> dict:
    """
    로컬 파일 하나를 업로드 (wait=True면 인덱싱 완료까지 대기).
    반환: {"success": bool, "file": str, "operation": str | None, "error": str | None}
    """
    file_path = Path(file_path)

    if not file_path.is_file():
        return {"success": False, "file": str(file_path), "operation": None, "error": "파일이 존재하지 않습니다"}

    try:
        operation = upload_bytes(store_id, file_path.read_bytes(), file_path.name)
        if wait:
            operation = wait_for_operation(operation)
    except FileSearchError as e:
        logger.warning("upload_failed", extra={"file": str(file_path), "error": e.message})
        return {"success": False, "file": str(file_path), "operation": None, "error": e.message}

    return {"success": True, "file": str(file_path), "operation": operation["name"], "error": None}


def upload_directory(dir_path: str | Path, store_id: str) -> list[dict]:
    """
    디렉토리 내 모든 지원 파일을 업로드.
    반환: 각 파일의 업로드 결과 리스트
    """
    dir_path = Path(dir_path)

    if not dir_path.is_dir():
        return [{"success": False, "file": str(dir_path), "operation": None, "error": "디렉토리가 아닙니다"}]

    results = []
    for f in sorted(dir_path.iterdir()):
        if f.is_file() and f.suffix.lower() in MIME_MAP:
            results.append(upload_file(f, store_id))
    return results
