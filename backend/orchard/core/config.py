"""
配置

所有配置来自环境变量或项目根目录的 .env（pydantic-settings）。
除数据库与项目名外都有默认值，未配置 Stripe / OSS 时相关接口返回 500。
"""
import secrets
import warnings
from decimal import Decimal
from typing import Annotated, Any, Literal

from pydantic import (
    AnyUrl,
    BeforeValidator,
    HttpUrl,
    PostgresDsn,
    computed_field,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self


def parse_cors(v: Any) -> list[str] | str:
    """BACKEND_CORS_ORIGINS 允许逗号分隔的字符串或 JSON 列表"""
    if isinstance(v, str) and not v.startswith("["):
        return [origin.strip() for origin in v.split(",") if origin.strip()]
    if isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    """环境变量优先于 .env，.env 优先于默认值"""

    model_config = SettingsConfigDict(
        env_file="../.env",  # backend/ 的上一级
        env_ignore_empty=True,
        extra="ignore",
    )
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str = secrets.token_urlsafe(32)  # JWT 签名密钥
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"

    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_cors)
    ] = []

    @computed_field  # type: ignore[prop-decorator]
    @property
    def all_cors_origins(self) -> list[str]:
        """CORS 允许的源（去除尾部斜杠）"""
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS]

    PROJECT_NAME: str
    SENTRY_DSN: HttpUrl | None = None

    # 站点地址，用于拼接支付成功/取消后的跳转 URL
    SITE_URL: str = "http://localhost:3000"

    POSTGRES_SERVER: str
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> PostgresDsn:
        return PostgresDsn.build(
            scheme="postgresql+psycopg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_SERVER,
            port=self.POSTGRES_PORT,
            path=self.POSTGRES_DB,
        )

    # Stripe 支付配置
    STRIPE_SECRET_KEY: str | None = None  # Stripe API 密钥
    STRIPE_WEBHOOK_SECRET: str | None = None  # Webhook 签名密钥（whsec_...）
    STRIPE_CURRENCY: str = "usd"  # 结算货币

    # 阿里云 OSS（对象存储）配置
    OSS_ENDPOINT: str | None = None  # OSS 端点地址
    OSS_BUCKET: str | None = None  # OSS 存储桶名称
    OSS_ACCESS_KEY_ID: str | None = None  # OSS Access Key ID
    OSS_ACCESS_KEY_SECRET: str | None = None  # OSS Access Key Secret
    OSS_CONTENT_PREFIX: str = "content"  # 作品文件目录前缀（私有读）
    OSS_AVATAR_PREFIX: str = "avatars"  # 头像目录前缀（公开读）
    OSS_PUBLIC_BASE_URL: str | None = None  # OSS 公开访问的基础 URL
    SIGNED_URL_EXPIRE_SECONDS: int = 60 * 60  # 签名 URL 有效期（1 小时）

    # 苹果礼物与订阅规则
    APPLE_PRICE: Decimal = Decimal("1.44")  # 每个苹果的售价（美元）
    APPLE_REDEMPTION_RATE: Decimal = Decimal("1.00")  # 创作者兑换每个苹果得到的金额
    MIN_REDEMPTION_APPLES: int = 100  # 最低兑换数量
    DEFAULT_SUBSCRIPTION_PRICE: Decimal = Decimal("4.99")  # 创作者未设置价格时的月费
    APPLE_GIFT_FOLLOWER_THRESHOLD: int = 100  # 解锁苹果礼物所需粉丝数
    SUBSCRIBE_FOLLOWER_THRESHOLD: int = 1000  # 解锁订阅按钮所需粉丝数

    FEED_PAGE_SIZE: int = 12  # 首页预览流条数

    def _check_default_secret(self, var_name: str, value: str | None) -> None:
        """默认值 "changethis"：local 环境警告，其他环境拒绝启动"""
        if value != "changethis":
            return
        message = (
            f'The value of {var_name} is "changethis", '
            "for security, please change it, at least for deployments."
        )
        if self.ENVIRONMENT != "local":
            raise ValueError(message)
        warnings.warn(message, stacklevel=1)

    @model_validator(mode="after")
    def _enforce_non_default_secrets(self) -> Self:
        for name in ("SECRET_KEY", "POSTGRES_PASSWORD", "STRIPE_WEBHOOK_SECRET"):
            self._check_default_secret(name, getattr(self, name))
        return self


settings = Settings()  # type: ignore
