"""
SQLite 데이터베이스 초기화 및 연결 관리
앱 시작 시 테이블 생성 + 기본 admin/user 계정 시드
"""
import sqlite3
from passlib.context import CryptContext
import config

# 비밀번호 해싱 컨텍스트
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# 테이블 생성 SQL
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    username TEXT UNIQUE NOT NULL,
    password_hash TEXT NOT NULL,
    role TEXT DEFAULT 'user' CHECK(role IN ('user', 'admin')),
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS user_settings (
    user_id TEXT PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
    file_search_store_names TEXT NOT NULL DEFAULT '[]',
    file_search_top_k INTEGER CHECK(file_search_top_k IS NULL OR file_search_top_k > 0),
    selected_store TEXT,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
"""

# 기본 시드 계정
SEED_USERS = [
    ("admin_001", "admin", "admin123", "admin"),
    ("user_001", "user", "user123", "user"),
]


def get_db() -> sqlite3.Connection:
    """SQLite 연결 반환. Row factory 설정하여 dict-like 접근 가능."""
    conn = sqlite3.connect(str(config.DB_PATH))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")      # 동시성 향상
    conn.execute("PRAGMA foreign_keys=ON")        # FK 제약 활성화
    return conn


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def init_db():
    """테이블 생성 + 시드 데이터 삽입 (최초 1회)."""
    conn = get_db()
    try:
        conn.executescript(SCHEMA_SQL)

        # 시드 사용자 삽입 (이미 있으면 무시)
        for uid, username, password, role in SEED_USERS:
            exists = conn.execute("SELECT 1 FROM users WHERE id = ?", (uid,)).fetchone()
            if exists:
                continue
            conn.execute(
                "INSERT INTO users (id, username, password_hash, role) VALUES (?, ?, ?, ?)",
                (uid, username, hash_password(password), role),
            )

        conn.commit()
    finally:
        conn.close()
