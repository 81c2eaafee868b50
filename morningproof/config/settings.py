from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    # Database settings
    supabase_url: str = ""
    supabase_service_key: str = ""

    # App settings
    app_env: str = "development"
    debug: bool = True
    base_url: str = "http://localhost:8000/api"  # Default for development

    # Auth settings
    jwt_secret_key: str = "change-me"
    jwt_algorithm: str = "HS256"

    # OpenAI settings
    openai_api_key: str = ""
    vision_model: str = "gpt-4o"  # Supports vision and JSON mode

    # Verification limits
    max_image_bytes: int = 10 * 1024 * 1024  # 10MB
    max_habit_name_length: int = 100
    max_ai_prompt_length: int = 2000

    # Video verification
    video_min_duration_seconds: float = 2.0
    video_max_duration_seconds: float = 60.0
    video_max_frame_dimension: int = 1024

    # Scheduler settings
    run_scheduler: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'

@lru_cache()
def get_settings():
    return Settings()
