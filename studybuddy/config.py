"""Configuration management for the study assistant."""
from pydantic_settings import BaseSettings

class Config(BaseSettings):
    # Groq API (empty key disables LLM calls)
    groq_api_key: str = ""
    groq_model: str = "llama-3.1-8b-instant"
    
    # Performance
    max_tokens: int = 800
    temperature: float = 0.7
    summary_temperature: float = 0.3
    timeout_seconds: int = 30
    max_retries: int = 2
    
    # Storage (empty URL keeps everything in process memory)
    redis_url: str = ""
    cache_ttl: int = 3600  # 1 hour
    
    # Dates are resolved in this timezone at the service edge
    timezone: str = "UTC"
    
    # Study defaults
    max_plan_days: int = 14
    default_hours_per_day: float = 2
    default_session_minutes: int = 60
    default_task_hours: float = 1.0
    chat_history_limit: int = 50
    
    # Uploads
    max_upload_mb: int = 10
    
    # Logging
    log_level: str = "INFO"
    
    class Config:
        env_file = ".env"

config = Config()
