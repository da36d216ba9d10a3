from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Koperasi Pegawai API"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 5000

    database_url: str = "sqlite+aiosqlite:///./koperasi_pegawai.db"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Accurate.id session; obtained out of band through the OAuth flow
    accurate_api_base_url: str = "https://zeus.accurate.id/accurate/api"
    accurate_access_token: str = ""
    accurate_session_id: str = ""
    accurate_http_timeout_seconds: float = 30.0

    # Piutang Karyawan; shared by voucher posting and balance lookups
    receivables_account_no: str = "110303"
    # Bank Mandiri Koperasi
    cash_account_no: str = "123456789"

    admin_username: str = "admin"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
