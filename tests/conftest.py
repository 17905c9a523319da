"""
Shared test configuration.

Settings validate at import time, so the required environment is set here,
before any application module is imported.
"""

import os

_ENV = {
    "APP_ENV": "test",
    "REDIS_URL": "redis://localhost:6379/0",
    "RATE_LIMIT_TIMES": "100",
    "RATE_LIMIT_SECONDS": "60",
    "TRUST_PROXY": "false",
    "OPENAI_API_KEY": "sk-test",
    "PINECONE_API_KEY": "pc-test",
    "PINECONE_INDEX_NAME": "qa-test",
    "PINECONE_INDEX_HOST": "qa-test.svc.pinecone.io",
    "MONGODB_URI": "mongodb://localhost:27017",
    "MONGODB_DB_NAME": "answerbot_test",
    "SLACK_BOT_TOKEN": "xoxb-test",
    "SLACK_SIGNING_SECRET": "shhh",
}

for _k, _v in _ENV.items():
    os.environ.setdefault(_k, _v)
