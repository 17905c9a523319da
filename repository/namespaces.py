from typing import Final

EMBEDDINGS: Final[str] = "embedding:"  # raw text follows, e.g. "embedding:What is Redis?"
QUESTIONS: Final[str] = "question:"  # fast-tier QA documents
QUESTIONS_INDEX: Final[str] = "idx:questions"

DURABLE_ID_PREFIX: Final[str] = "qa_"
QA_PAIR_TYPE: Final[str] = "qa_pair"

EMBEDDINGS_COLLECTION: Final[str] = "embeddings"
