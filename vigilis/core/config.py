"""
Application configuration via pydantic-settings.

Loads values from .env file with defaults pointing at the hosted services.
Use ``get_settings()`` to obtain the cached singleton instance, or build a
``Settings`` directly and hand it to the clients in tests.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Vigilis client settings loaded from environment / .env file.

    All settings can be overridden via environment variables or a `.env` file.
    Field names map directly to env var names (case-insensitive).

    Attributes:
        api_base_url: Root URL of the incident-tracking service.
        stt_url: ElevenLabs speech-to-text endpoint.
        elevenlabs_api_key: Sent as the ``xi-api-key`` header.
        device_store_path: JSON file holding the persisted device identity.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore unrecognized env vars
    )

    # --- Incident service ---
    api_base_url: str = "https://vigilis.onrender.com"

    # --- Speech-to-text (ElevenLabs) ---
    stt_url: str = "https://api.elevenlabs.io/v1/speech-to-text"
    elevenlabs_api_key: str = ""  # Required before any transcription
    stt_model_id: str = "scribe_v1"  # Upstream rejects uploads without it (422)

    # --- Timeouts (seconds) ---
    transcription_timeout: float = 60.0
    send_timeout: float = 15.0
    fallback_timeout: float = 5.0  # Incident-creating send after a 404 callStarted
    notify_timeout: float = 10.0

    # --- Local state ---
    device_store_path: str = "data/device.json"
    device_id_key: str = "@vigilis_device_id"

    # --- Application ---
    log_level: str = "INFO"  # Python logging level


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton.

    Uses ``functools.lru_cache`` so the .env file is read only once.

    Returns:
        Settings: The application-wide configuration object.
    """
    return Settings()
