# config/settings.py
import os
import sys
from dotenv import load_dotenv
from pydantic import ValidationError, Field
from pydantic_settings import BaseSettings
from util.enums import Environment
import logging


if os.getenv("APP_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()

_log = logging.getLogger("config.settings")


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field(..., validation_alias="APP_ENV")
    REDIS_URL: str = Field(..., validation_alias="REDIS_URL")

    # Limits
    RATE_LIMIT_TIMES: int = Field(..., validation_alias="RATE_LIMIT_TIMES")
    RATE_LIMIT_SECONDS: int = Field(..., validation_alias="RATE_LIMIT_SECONDS")
    TRUST_PROXY: bool = Field(..., validation_alias="TRUST_PROXY")

    # OpenAI (embeddings + chat completions)
    OPENAI_API_KEY: str = Field(..., validation_alias="OPENAI_API_KEY")
    OPENAI_API_URL: str = Field(
        default="https://api.openai.com/v1", validation_alias="OPENAI_API_URL"
    )
    OPENAI_CHAT_MODEL: str = Field(
        default="gpt-4-turbo", validation_alias="OPENAI_CHAT_MODEL"
    )
    OPENAI_EMBEDDING_MODEL: str = Field(
        default="text-embedding-3-small", validation_alias="OPENAI_EMBEDDING_MODEL"
    )

    # Answer cache
    EMBEDDING_DIMENSION: int = Field(default=1536, validation_alias="EMBEDDING_DIMENSION")
    MATCH_SCORE: float = Field(default=0.92, validation_alias="MATCH_SCORE")
    KNN_K: int = Field(default=5, validation_alias="KNN_K")
    BACKFILL_FAST_TIER: bool = Field(default=True, validation_alias="BACKFILL_FAST_TIER")
    PROVIDER_TIMEOUT_SECONDS: float = Field(
        default=30.0, validation_alias="PROVIDER_TIMEOUT_SECONDS"
    )
    TIER_TIMEOUT_SECONDS: float = Field(default=5.0, validation_alias="TIER_TIMEOUT_SECONDS")

    # Pinecone (durable tier)
    PINECONE_API_KEY: str = Field(..., validation_alias="PINECONE_API_KEY")
    PINECONE_INDEX_NAME: str = Field(..., validation_alias="PINECONE_INDEX_NAME")
    PINECONE_INDEX_HOST: str = Field(default="", validation_alias="PINECONE_INDEX_HOST")
    PINECONE_CONTROL_URL: str = Field(
        default="https://api.pinecone.io", validation_alias="PINECONE_CONTROL_URL"
    )
    PINECONE_API_VERSION: str = Field(
        default="2024-07", validation_alias="PINECONE_API_VERSION"
    )
    PINECONE_CLOUD: str = Field(default="aws", validation_alias="PINECONE_CLOUD")
    PINECONE_REGION: str = Field(default="us-east-1", validation_alias="PINECONE_REGION")

    # MongoDB (durable embedding store)
    MONGODB_URI: str = Field(..., validation_alias="MONGODB_URI")
    MONGODB_DB_NAME: str = Field(..., validation_alias="MONGODB_DB_NAME")
    EMBEDDING_TTL_SECONDS: int = Field(
        default=30 * 24 * 60 * 60, validation_alias="EMBEDDING_TTL_SECONDS"
    )

    # Slack transport
    SLACK_BOT_TOKEN: str = Field(..., validation_alias="SLACK_BOT_TOKEN")
    SLACK_SIGNING_SECRET: str = Field(..., validation_alias="SLACK_SIGNING_SECRET")
    SLACK_API_URL: str = Field(default="https://slack.com/api", validation_alias="SLACK_API_URL")
    SLACK_MAX_REQUEST_AGE_SECONDS: int = 5 * 60

    # Logging knobs
    LOGGER_NAME: str = "sre-answer-bot"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="app.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")

    # Prompts
    SYSTEM_PROMPT: str = (
        "You are a senior Site Reliability Engineer (SRE) with 10+ years of experience in cloud "
        "infrastructure, DevOps practices, and system architecture. Your expertise includes:\n"
        "• Cloud platforms (AWS, GCP, Azure)\n"
        "• Kubernetes and container orchestration\n"
        "• Infrastructure as Code (Terraform, CloudFormation)\n"
        "• Monitoring and observability (Prometheus, Grafana, ELK)\n"
        "• CI/CD pipelines and automation\n"
        "• Performance optimization and scalability\n"
        "• Incident response and troubleshooting\n"
        "\n"
        "Be concise but friendly in your responses. Try to make the response as short as possible"
    )
    SUMMARY_PROMPT: str = "Please summarize this conversation:\n"


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)
