"""
Configuration settings for the rollout status checker.
"""
from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Application
    APP_NAME: str = Field(default="kube-status-check", description="Application name")

    # HTTP Configuration
    HTTP_PORT: int = Field(default=8002, description="Service port")

    # Kubernetes Configuration
    K8S_NAMESPACE: str = Field(default="default", description="Kubernetes namespace")
    K8S_CONTEXT: Optional[str] = Field(default=None, description="Kubernetes context")
    K8S_IN_CLUSTER: bool = Field(default=False, description="Running in cluster")

    # Status check
    STATUS_CHECK_DEADLINE_SECS: float = Field(
        default=600, gt=0, description="Global rollout deadline applied to every deployment"
    )
    STATUS_CHECK_POLL_INTERVAL_SECS: float = Field(
        default=1.0, gt=0, description="Interval between rollout status polls"
    )
    STATUS_CHECK_REPORT_INTERVAL_SECS: float = Field(
        default=0.5, gt=0, description="Interval between progress reports"
    )
    STATUS_CHECK_REQUEST_TIMEOUT_SECS: float = Field(
        default=10, gt=0, description="Timeout of a single Kubernetes API request"
    )

    # Service Configuration
    LOG_LEVEL: str = Field(default="info", description="Log level: info|debug|warning")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


# Global settings instance
settings = Settings()
