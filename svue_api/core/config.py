# svue_api/core/config.py
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # dev / test / prod
    env: str = Field("dev", alias="ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(2727, alias="PORT")

    # ==== StudentVue ====
    # Presented upstream as the edupointkeyversion cookie
    version_number: str | None = Field(default=None, validation_alias="VERSION_NUMBER")
    # Only consulted when VERSION_NUMBER is unset
    access_key_url: str | None = Field(default=None, validation_alias="ACCESS_KEY_URL")

    default_district_url: str = Field(
        "md-mcps-psv.edupoint.com",
        validation_alias="DEFAULT_DISTRICT_URL",
    )
    # comma separated; X-District-Url must end with one of these
    allowed_district_suffixes: str = Field(
        ".edupoint.com",
        validation_alias="ALLOWED_DISTRICT_SUFFIXES",
    )
    studentvue_service_path: str = Field(
        "/Service/PXPCommunication.asmx",
        validation_alias="STUDENTVUE_SERVICE_PATH",
    )
    studentvue_connect_timeout: float = Field(
        10.0, validation_alias="STUDENTVUE_CONNECT_TIMEOUT"
    )
    studentvue_read_timeout: float = Field(
        30.0, validation_alias="STUDENTVUE_READ_TIMEOUT"
    )
    studentvue_user_agent: str = Field(
        default="StudentVUE/11.2.2 (Android 14)",
        validation_alias="STUDENTVUE_USER_AGENT",
    )

    # ==== Credential tokens ====
    # base64 of a 16 byte AES-128-GCM-SIV key
    enkey: str | None = Field(default=None, validation_alias="ENKEY")
    token_ttl_hours: int = Field(default=24, validation_alias="TOKEN_TTL_HOURS")

    @property
    def district_suffixes(self) -> list[str]:
        out = []
        for item in self.allowed_district_suffixes.split(","):
            item = item.strip().lower()
            if item:
                out.append(item if item.startswith(".") else "." + item)
        return out


settings = Settings()
