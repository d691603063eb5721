"""Environment-driven configuration for Voya services."""

import os

from pydantic import BaseModel, ConfigDict, Field


class Settings(BaseModel):
    """Runtime settings resolved from environment variables."""

    model_config = ConfigDict(frozen=True)

    environment: str = Field(default="dev", description="Deployment environment")
    table_prefix: str = Field(
        default="voya-dev", description="Prefix for every DynamoDB table name"
    )
    aws_region: str = Field(default="eu-west-1", description="AWS region")
    cognito_user_pool_id: str = Field(default="", description="Cognito User Pool ID")
    cognito_client_id: str = Field(default="", description="Cognito App Client ID")
    email_sender: str = Field(
        default="bookings@voya.travel", description="SES verified sender address"
    )
    storage_bucket: str = Field(
        default="voya-dev-media", description="S3 bucket for avatars and images"
    )
    default_currency: str = Field(default="USD", description="Booking currency")
    notifications_page_size: int = Field(
        default=50, ge=1, description="Notifications fetched per load"
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"]
    )

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment.

        DYNAMODB_TABLE_PREFIX overrides the environment-derived prefix,
        which lets tests point every service at mocked tables.
        """
        environment = os.getenv("ENVIRONMENT", "dev")
        origins = os.getenv("CORS_ORIGINS")
        kwargs: dict = {
            "environment": environment,
            "table_prefix": os.getenv("DYNAMODB_TABLE_PREFIX", f"voya-{environment}"),
            "aws_region": os.getenv("AWS_DEFAULT_REGION", "eu-west-1"),
            "cognito_user_pool_id": os.getenv("COGNITO_USER_POOL_ID", ""),
            "cognito_client_id": os.getenv("COGNITO_CLIENT_ID", ""),
            "email_sender": os.getenv("EMAIL_SENDER", "bookings@voya.travel"),
            "storage_bucket": os.getenv("STORAGE_BUCKET", f"voya-{environment}-media"),
            "default_currency": os.getenv("DEFAULT_CURRENCY", "USD"),
        }
        if origins:
            kwargs["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]
        return cls(**kwargs)
