from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./udao_mining.db"
    DB_ECHO: bool = False

    # Contract identity
    CONTRACT_ACCOUNT: str = "ultradaomining"
    DEPOSIT_CONTRACT: str = "eosio.token"
    DEPOSIT_ACTION: str = "transfer"

    # Reward asset (also the protected symbol)
    REWARD_SYMBOL_CODE: str = "UDAO"
    REWARD_PRECISION: int = 8

    # Action limits
    MEMO_MAX_BYTES: int = 256

    # Account directory, empty means any well-formed name resolves
    REGISTERED_ACCOUNTS: List[str] = []

    # Monitoring
    LOG_LEVEL: str = "INFO"

    # API
    API_HOST: str = "127.0.0.1"
    API_PORT: int = 8083

    VERSION: str = "1.0.0"

    @field_validator("REWARD_SYMBOL_CODE")
    @classmethod
    def normalize_symbol_code(cls, v: str) -> str:
        return v.upper()

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
