# util/enums.py
from enum import Enum
from typing import NamedTuple
from fastapi import status


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    BOLD = "\033[1m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    PROD = "prod"


class TierName(str, Enum):
    FAST = "fast"
    DURABLE = "durable"

    def __str__(self):
        return self.value


class AnswerSource(str, Enum):
    FAST = "fast"
    DURABLE = "durable"
    GENERATED = "generated"


class ErrorInfo(NamedTuple):
    message: str
    http_status: int


class ErrorMessage(Enum):
    INVALID_SIGNATURE = ErrorInfo("Invalid request signature", status.HTTP_401_UNAUTHORIZED)
    CANNOT_ANSWER = ErrorInfo(
        "I'm having trouble answering your question right now. Please try again later.",
        status.HTTP_502_BAD_GATEWAY,
    )
    INTERNAL_ERROR = ErrorInfo("Internal Error", status.HTTP_502_BAD_GATEWAY)
