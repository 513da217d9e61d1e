from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    host: str = "0.0.0.0"
    port: int = 8091
    log_level: str = "info"

    # OTP
    otp_provider: str = "console"
    otp_length: int = 6
    otp_expire_minutes: int = 5
    otp_single_use: bool = True
    otp_rollback_on_delivery_failure: bool = False

    # Storage: "memory" or "supabase"
    storage_backend: str = "memory"
    # Users the memory backend starts with, e.g. SEED_USERS='[{"id": "u-1", "phone_no": "..."}]'
    seed_users: list[dict] = []
    supabase_url: str = ""
    supabase_key: str = ""
    otp_table: str = "otps"
    users_table: str = "users"

    # SMS gateway
    sms_api_url: str = ""
    sms_api_key: str = ""
    sms_sender: str = "OTP"

    # Mail gateway (Brevo transactional API)
    mail_api_url: str = "https://api.brevo.com/v3/smtp/email"
    mail_api_key: str = ""
    mail_from: str = ""
    mail_subject: str = "Your verification code"

    gateway_timeout_seconds: float = 15.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
