"""
FastAPI API 라우트
인증, File Search Store/문서/업로드 프록시, 사용자 설정, 검색 도구 API 정의
"""
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
import config
from server.auth import authenticate_user, create_access_token, get_current_user
from core import document_uploader, store_manager, user_settings
from core.document_uploader import get_operation, upload_bytes, wait_for_operation
from core.file_search_tool import config_from_settings, create_file_search_tool
from core.resource_names import build_document_name

router = APIRouter(prefix="/api")


# ── Pydantic 모델 ──────────────────────────────────────

class LoginRequest(BaseModel):
    username: str
    password: str

class CreateStoreRequest(BaseModel):
    display_name: str = Field(min_length=1, max_length=512)

class SettingsRequest(BaseModel):
    file_search_store_names: list[str] | None = None
    file_search_top_k: int | None = Field(default=None, gt=0)
    selected_store: str | None = None

class StoreNameRequest(BaseModel):
    name: str

class SelectStoreRequest(BaseModel):
    name: str | None = None

class SearchRequest(BaseModel):
    query: str = Field(min_length=1)


# ── 인증 API ───────────────────────────────────────────

@router.post("/auth/login")
def login(req: LoginRequest):
    """로그인 → JWT 토큰 발급"""
    user = authenticate_user(req.username, req.password)
    if not user:
        raise HTTPException(status_code=401, detail="아이디 또는 비밀번호가 올바르지 않습니다")
    token = create_access_token(user["user_id"], user["username"], user["role"])
    return {"token": token, "user": user}


# ── Store API ──────────────────────────────────────────

@router.get("/file-search/stores")
def list_stores(
    page_size: int | None = Query(default=None, gt=0),
    page_token: str | None = None,
    current_user: dict = Depends(get_current_user),
):
    """File Search Store 목록"""
    return store_manager.list_stores(page_size=page_size, page_token=page_token)


@router.post("/file-search/stores", status_code=201)
def create_store(req: CreateStoreRequest, current_user: dict = Depends(get_current_user)):
    """새 Store 생성"""
    return store_manager.create_store(req.display_name)


@router.get("/file-search/stores/{store_id}")
def get_store(store_id: str, current_user: dict = Depends(get_current_user)):
    """단일 Store 조회"""
    return store_manager.get_store(store_id)


@router.delete("/file-search/stores/{store_id}")
def delete_store(store_id: str, force: bool = True, current_user: dict = Depends(get_current_user)):
    """Store 삭제 (기본: 문서 포함 강제 삭제)"""
    store_manager.delete_store(store_id, force=force)
    return {"success": True}


# ── 문서 API ───────────────────────────────────────────

@router.get("/file-search/stores/{store_id}/documents")
def list_documents(
    store_id: str,
    page_size: int | None = Query(default=None, gt=0),
    page_token: str | None = None,
    current_user: dict = Depends(get_current_user),
):
    """Store 내 문서 목록"""
    return store_manager.list_documents(store_id, page_size=page_size, page_token=page_token)


@router.get("/file-search/stores/{store_id}/documents/{document_id}")
def get_document(store_id: str, document_id: str, current_user: dict = Depends(get_current_user)):
    """단일 문서 조회"""
    return store_manager.get_document(build_document_name(store_id, document_id))


@router.delete("/file-search/stores/{store_id}/documents")
def delete_document(
    store_id: str,
    document_name: str = "",
    current_user: dict = Depends(get_current_user),
):
    """문서 삭제. document_name은 문서 ID 또는 전체 리소스 이름."""
    if not document_name.strip():
        raise HTTPException(status_code=400, detail="document_name은 필수입니다")
    store_manager.delete_document(build_document_name(store_id, document_name.strip()), force=True)
    return {"success": True}


# ── 업로드 API ─────────────────────────────────────────

@router.post("/file-search/upload")
def upload(
    file: UploadFile = File(...),
    store_name: str = Form(""),
    display_name: str = Form(""),
    wait: bool = Form(False),
    current_user: dict = Depends(get_current_user),
):
    """
    파일 업로드 → Operation 반환 (202).
    wait=true면 인덱싱 완료까지 폴링 후 최종 Operation 반환 (200).
    """
    if not store_name.strip():
        raise HTTPException(status_code=400, detail="store_name은 필수입니다")

    # 본문을 읽기 전에 크기 제한 확인 (size 미상이면 한도+1 바이트까지만 읽음)
    limit = document_uploader.MAX_UPLOAD_BYTES
    if file.size is not None and file.size > limit:
        raise HTTPException(status_code=400, detail=f"파일 크기는 {config.MAX_UPLOAD_MB}MB 이하여야 합니다")

    operation = upload_bytes(
        store_name.strip(),
        file.file.read(limit + 1),
        file.filename or "upload",
        display_name=display_name.strip() or None,
        mime_type=file.content_type,
    )
    if wait:
        return wait_for_operation(operation)
    return JSONResponse(status_code=202, content=operation)


@router.get("/file-search/upload")
def upload_status(operation_name: str = "", current_user: dict = Depends(get_current_user)):
    """업로드 Operation 상태 조회"""
    if not operation_name.strip():
        raise HTTPException(status_code=400, detail="operation_name은 필수입니다")
    return get_operation(operation_name.strip())


# ── 검색 도구 API ──────────────────────────────────────

@router.post("/file-search/search")
def search(req: SearchRequest, current_user: dict = Depends(get_current_user)):
    """사용자 설정의 Store로 File Search 도구 실행"""
    settings = user_settings.get_settings(current_user["user_id"])
    tool = create_file_search_tool(config_from_settings(settings))
    if tool is None:
        raise HTTPException(status_code=400, detail="설정된 File Search Store가 없습니다")
    return tool.execute(req.query)


# ── 설정 API ───────────────────────────────────────────

@router.get("/settings/file-search")
def get_settings(current_user: dict = Depends(get_current_user)):
    """현재 사용자의 File Search 설정"""
    return user_settings.get_settings(current_user["user_id"])


@router.put("/settings/file-search")
def update_settings(req: SettingsRequest, current_user: dict = Depends(get_current_user)):
    """설정 부분 업데이트 (요청에 포함된 필드만 반영)"""
    fields = req.model_fields_set
    kwargs = {}
    if "file_search_store_names" in fields:
        kwargs["store_names"] = req.file_search_store_names
    if "file_search_top_k" in fields:
        kwargs["top_k"] = req.file_search_top_k
    if "selected_store" in fields:
        kwargs["selected_store"] = req.selected_store
    settings = user_settings.update_settings(current_user["user_id"], **kwargs)
    return {"success": True, "settings": settings}


@router.post("/settings/file-search/stores")
def add_settings_store(req: StoreNameRequest, current_user: dict = Depends(get_current_user)):
    """설정에 Store 추가"""
    return user_settings.add_store(current_user["user_id"], req.name)


@router.delete("/settings/file-search/stores")
def remove_settings_store(name: str, current_user: dict = Depends(get_current_user)):
    """설정에서 Store 제거"""
    return user_settings.remove_store(current_user["user_id"], name)


@router.put("/settings/file-search/selected")
def select_settings_store(req: SelectStoreRequest, current_user: dict = Depends(get_current_user)):
    """현재 Store 선택 (name=null이면 해제)"""
    return user_settings.select_store(current_user["user_id"], req.name)
