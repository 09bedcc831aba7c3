from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./picplate.db"
    STORAGE_DIR: str = "./data"
    ALLOW_ORIGINS: str = "http://localhost:3000,https://picplate-login-app.wl.r.appspot.com"
    LOG_LEVEL: str = "INFO"

    # Gemini via API key, or Vertex AI when no key is set
    GEMINI_API_KEY: str = ""
    GCP_PROJECT: str = "picplate-login-app"
    GCP_LOCATION: str = "us-central1"
    GEMINI_TEXT_MODEL: str = "gemini-2.0-flash"
    IMAGEN_MODEL: str = "imagen-3.0-generate-002"

    VISION_KEY_FILE: str = "./picplate-service-account.json"
    FACE_DETECTOR: str = "vision"  # vision | mediapipe
    FACE_MIN_CONFIDENCE: float = 0.5

    HTTP_TIMEOUT: float = 30.0
    MAX_IMAGE_BYTES: int = 50 * 1024 * 1024

settings = Settings()
