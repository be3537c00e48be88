"""
Configuration management using Pydantic Settings
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    
    # Gemini API
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GENERATION_TEMPERATURE: float = 0.4
    GRADING_TEMPERATURE: float = 0.2
    GENERATION_TIMEOUT_SECONDS: float = 90.0
    GRADING_TIMEOUT_SECONDS: float = 45.0
    
    # Profile storage
    REDIS_URL: str = "redis://localhost:6379/0"
    PROFILE_KEY: str = "c_quiz_profile"
    
    # Application
    APP_NAME: str = "C Programming Revision Quiz"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    
    # Logging
    LOG_LEVEL: str = "INFO"
    
    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
