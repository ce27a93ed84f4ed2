# pcb_quote/core/config.py
import os

class Settings:
    # --- API Info ---
    API_TITLE: str = "PCB Quote Engine"
    API_DESCRIPTION: str = "Price and lead time quotation for PCB manufacturing orders."
    API_VERSION: str = "1.0.0"

    # --- Server Configuration ---
    PORT: int = int(os.getenv("PORT", "8000"))
    HOST: str = os.getenv("HOST", "0.0.0.0")

    # --- Quotation ---
    BASE_CURRENCY: str = "CNY"
    ORDER_CUTOFF_HOUR: int = int(os.getenv("ORDER_CUTOFF_HOUR", "20"))  # orders at/after this hour start a day later
    ENGINE_CONFIG_PATH: str = os.getenv("ENGINE_CONFIG_PATH", "config/engine.yaml")
    STRICT_ENGINE_CONFIG: bool = os.getenv("STRICT_ENGINE_CONFIG", "false").lower() == "true"

    # --- Logging ---
    LOGGING_CONFIG_PATH: str = os.getenv("LOGGING_CONFIG_PATH", "logging.conf")
    LOG_DIR: str = os.getenv("LOG_DIR", "logs")

settings = Settings()
