"""
File Search 예외 정의
SDK 예외를 상태 코드가 포함된 도메인 예외로 변환한다.
"""
from google.genai import errors as genai_errors


class FileSearchError(Exception):
    """업스트림 File Search 호출 실패. status_code는 HTTP 응답에 그대로 쓰인다."""

    status_code = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(FileSearchError):
    status_code = 404


class ConfigurationError(FileSearchError):
    status_code = 500


class OperationFailedError(FileSearchError):
    status_code = 502


class OperationTimeoutError(FileSearchError):
    status_code = 504


def translate_api_error(exc: genai_errors.APIError, fallback: str) -> FileSearchError:
    """SDK APIError → FileSearchError (업스트림 메시지 우선)"""
    message = getattr(exc, "message", None) or fallback
    if getattr(exc, "code", None) == 404:
        return NotFoundError(message)
    return FileSearchError(message)
