"""
사용자별 File Search 설정 관리
user_settings 테이블 CRUD. 서버는 값을 검증하고 그대로 돌려줄 뿐 권한을 갖지 않는다.
"""
import json
from datetime import datetime, timezone
from server.database import get_db

# update_settings에서 "전달되지 않음"을 None과 구분하기 위한 표식
UNSET = object()

DEFAULT_SETTINGS = {
    "file_search_store_names": [],
    "file_search_top_k": None,
    "selected_store": None,
}


def _load(conn, user_id: str) -> dict:
    row = conn.execute(
        """SELECT file_search_store_names, file_search_top_k, selected_store
        FROM user_settings WHERE user_id = ?""",
        (user_id,),
    ).fetchone()
    if not row:
        return dict(DEFAULT_SETTINGS, file_search_store_names=[])
    return {
        "file_search_store_names": json.loads(row["file_search_store_names"] or "[]"),
        "file_search_top_k": row["file_search_top_k"],
        "selected_store": row["selected_store"],
    }


def _save(conn, user_id: str, settings: dict):
    conn.execute(
        """INSERT INTO user_settings
        (user_id, file_search_store_names, file_search_top_k, selected_store, updated_at)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT(user_id) DO UPDATE SET
            file_search_store_names = excluded.file_search_store_names,
            file_search_top_k = excluded.file_search_top_k,
            selected_store = excluded.selected_store,
            updated_at = excluded.updated_at""",
        (
            user_id,
            json.dumps(settings["file_search_store_names"], ensure_ascii=False),
            settings["file_search_top_k"],
            settings["selected_store"],
            datetime.now(timezone.utc).isoformat(),
        ),
    )


def _validated(settings: dict) -> dict:
    """선택된 Store가 설정 목록에 없으면 선택 해제"""
    if settings["selected_store"] not in settings["file_search_store_names"]:
        settings["selected_store"] = None
    return settings


def get_settings(user_id: str) -> dict:
    """사용자 설정 조회 (없으면 기본값)"""
    conn = get_db()
    try:
        return _validated(_load(conn, user_id))
    finally:
        conn.close()


def update_settings(
    user_id: str,
    store_names=UNSET,
    top_k=UNSET,
    selected_store=UNSET,
) -> dict:
    """전달된 필드만 갱신 (부분 업데이트). 갱신된 설정 반환."""
    conn = get_db()
    try:
        settings = _load(conn, user_id)
        if store_names is not UNSET:
            settings["file_search_store_names"] = list(store_names or [])
        if top_k is not UNSET:
            settings["file_search_top_k"] = top_k
        if selected_store is not UNSET:
            settings["selected_store"] = selected_store

        settings = _validated(settings)
        _save(conn, user_id, settings)
        conn.commit()
        return settings
    finally:
        conn.close()


def add_store(user_id: str, name: str) -> dict:
    """Store 이름 추가 (공백 제거, 빈 값/중복은 무시)"""
    name = (name or "").strip()
    settings = get_settings(user_id)
    if not name or name in settings["file_search_store_names"]:
        return settings
    return update_settings(user_id, store_names=settings["file_search_store_names"] + [name])


def remove_store(user_id: str, name: str) -> dict:
    """Store 이름 제거. 선택된 Store였다면 선택도 해제."""
    settings = get_settings(user_id)
    names = [n for n in settings["file_search_store_names"] if n != name]
    selected = None if settings["selected_store"] == name else settings["selected_store"]
    return update_settings(user_id, store_names=names, selected_store=selected)


def select_store(user_id: str, name: str | None) -> dict:
    """현재 Store 선택 (None이면 해제)"""
    return update_settings(user_id, selected_store=name)
