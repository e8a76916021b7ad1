import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

@dataclass
class Settings:
    # Application settings
    app_name: str = os.getenv("APP_NAME", "Library Ledger")
    log_level: str = os.getenv("LOG_LEVEL", "WARNING").upper()

    # Simulated I/O latency applied before every ledger operation, in seconds
    operation_delay: float = float(os.getenv("LIBRARY_DELAY", "1.0"))

    # Circulation rules
    loan_days: int = int(os.getenv("LOAN_DAYS", "14"))
    late_fee_per_day: float = float(os.getenv("LATE_FEE_PER_DAY", "0.50"))
    currency_symbol: str = os.getenv("CURRENCY_SYMBOL", "$")


settings = Settings()
