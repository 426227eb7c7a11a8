from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # Application
    app_name: str = "Registration Migration Service"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080

    # Firebase / Firestore
    firebase_project_id: Optional[str] = None
    firebase_credentials_path: Optional[str] = None  # service account JSON, ADC if unset
    firebase_app_name: str = "registration-migration"
    firestore_emulator_host: Optional[str] = None  # ví dụ: localhost:8081

    # Collection names
    users_collection: str = "users"
    events_collection: str = "events"
    registrations_collection: str = "registrations"

    # Cost control: cap on concurrent requests handled by one process
    max_instances: int = 10

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
