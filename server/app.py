"""
FastAPI 애플리케이션 엔트리포인트
서버 시작, 로깅/예외 처리 등록, DB 초기화
"""
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from core.errors import FileSearchError
from server.database import init_db
from server.logging_config import init_logging, install_request_logging
from server.routes import router
import config

logger = logging.getLogger("api.errors")

# FastAPI 앱 생성
app = FastAPI(
    title="File Search 관리 API",
    description="Gemini File Search Store/문서 관리 프록시 + 사용자 설정 + 검색 도구",
    version="1.0.0",
)

# 로깅 초기화 및 요청 로깅 미들웨어
init_logging()
install_request_logging(app)

# CORS 설정 (개발용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API 라우트 등록
app.include_router(router)


@app.exception_handler(FileSearchError)
async def file_search_error_handler(request: Request, exc: FileSearchError):
    """업스트림/도메인 오류 → {"detail": message}"""
    logger.warning(
        "file_search_error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "status_code": exc.status_code,
            "error": exc.message,
        },
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/")
def root():
    return {"message": "File Search 관리 API", "docs": "/docs"}


@app.on_event("startup")
def startup():
    """서버 시작 시 DB 초기화"""
    init_db()
    logging.getLogger(__name__).info("database_initialized")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("server.app:app", host=config.HOST, port=config.PORT, reload=True)
