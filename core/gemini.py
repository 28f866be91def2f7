"""
Gemini API 클라이언트 생성
모든 core 모듈은 이 함수를 통해 SDK 클라이언트를 얻는다.
"""
from google import genai
import config
from core.errors import ConfigurationError


def get_client() -> genai.Client:
    """Gemini API 클라이언트 생성"""
    if not config.GEMINI_API_KEY:
        raise ConfigurationError("GEMINI_API_KEY가 설정되지 않았습니다")
    return genai.Client(api_key=config.GEMINI_API_KEY)
