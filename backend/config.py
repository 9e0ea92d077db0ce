import os
from typing import Optional
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

@dataclass
class EMRConfig:
    """Remote clinical-records API (DORRA) settings"""
    base_url: str = "https://hackathon-api.aheadafrica.org"
    api_token: str = ""
    timeout: float = 30.0
    max_retries: int = 2
    retry_delay: float = 0.5

@dataclass
class AIConfig:
    """Text generation collaborators, tried in order"""
    primary_url: str = "https://api.ollama.com/v1"
    primary_api_key: str = ""
    primary_model: str = "llama3.2:latest"
    primary_timeout: float = 60.0
    secondary_url: str = ""
    secondary_api_key: str = ""
    secondary_model: str = "gpt-4o-mini"
    secondary_timeout: float = 30.0

@dataclass
class LocalStoreConfig:
    """Id offsets keep local ids clear of EMR ids in merged lists"""
    encounter_id_offset: int = 1000
    medication_id_offset: int = 2000

@dataclass
class TokenConfig:
    """Pharmacy prescription token settings"""
    ttl_hours: int = 48
    demo_ttl_days: int = 365
    token_prefix: str = "MS-RX-P"
    demo_prefix: str = "DEMO-"

@dataclass
class AppConfig:
    """Main application configuration"""
    debug: bool = False
    host: str = "127.0.0.1"
    port: int = 4000
    cors_origins: list = None
    log_level: str = "INFO"
    log_file: Optional[str] = None
    frontend_url: str = "http://localhost:5173"
    seed_on_startup: bool = True

    def __post_init__(self):
        if self.cors_origins is None:
            self.cors_origins = ["*"]

@dataclass
class Config:
    """Complete application configuration"""
    app: AppConfig
    emr: EMRConfig
    ai: AIConfig
    local_store: LocalStoreConfig
    tokens: TokenConfig

    @classmethod
    def from_env(cls) -> 'Config':
        """Create configuration from environment variables"""
        origins = os.getenv("CORS_ORIGINS")
        return cls(
            app=AppConfig(
                debug=os.getenv("DEBUG", "false").lower() == "true",
                host=os.getenv("HOST", "127.0.0.1"),
                port=int(os.getenv("PORT", "4000")),
                cors_origins=[o.strip() for o in origins.split(",")] if origins else None,
                log_level=os.getenv("LOG_LEVEL", "INFO"),
                log_file=os.getenv("LOG_FILE") or None,
                frontend_url=os.getenv("FRONTEND_URL", "http://localhost:5173").rstrip("/"),
                seed_on_startup=os.getenv("SEED_ON_STARTUP", "true").lower() == "true"
            ),
            emr=EMRConfig(
                base_url=os.getenv("DORRA_API_BASE_URL", "https://hackathon-api.aheadafrica.org").rstrip("/"),
                api_token=os.getenv("DORRA_API_TOKEN", ""),
                timeout=float(os.getenv("DORRA_TIMEOUT", "30.0")),
                max_retries=int(os.getenv("DORRA_MAX_RETRIES", "2")),
                retry_delay=float(os.getenv("DORRA_RETRY_DELAY", "0.5"))
            ),
            ai=AIConfig(
                primary_url=os.getenv("OLLAMA_API_URL", "https://api.ollama.com/v1").rstrip("/"),
                primary_api_key=os.getenv("OLLAMA_API_KEY", ""),
                primary_model=os.getenv("OLLAMA_MODEL", "llama3.2:latest"),
                primary_timeout=float(os.getenv("OLLAMA_TIMEOUT", "60.0")),
                secondary_url=os.getenv("AI_API_URL", "").rstrip("/"),
                secondary_api_key=os.getenv("AI_API_KEY", ""),
                secondary_model=os.getenv("AI_MODEL", "gpt-4o-mini"),
                secondary_timeout=float(os.getenv("AI_TIMEOUT", "30.0"))
            ),
            local_store=LocalStoreConfig(
                encounter_id_offset=int(os.getenv("LOCAL_ENCOUNTER_ID_OFFSET", "1000")),
                medication_id_offset=int(os.getenv("LOCAL_MEDICATION_ID_OFFSET", "2000"))
            ),
            tokens=TokenConfig(
                ttl_hours=int(os.getenv("PHARMACY_TOKEN_TTL_HOURS", "48")),
                demo_ttl_days=int(os.getenv("PHARMACY_DEMO_TTL_DAYS", "365"))
            )
        )

@lru_cache()
def get_config() -> Config:
    """Get cached configuration instance"""
    return Config.from_env()
