class InternalURIs:
    API = "/api"
    V1 = API + "/v1"
    ASK = V1 + "/ask"
    HEALTH = V1 + "/health"
    SLACK_EVENTS = V1 + "/slack/events"


class ExternalURIs:
    OPENAI_EMBEDDINGS = "/embeddings"
    OPENAI_CHAT_COMPLETIONS = "/chat/completions"
    OPENAI_MODELS = "/models"
    PINECONE_INDEXES = "/indexes"
    PINECONE_UPSERT = "/vectors/upsert"
    PINECONE_QUERY = "/query"
    PINECONE_STATS = "/describe_index_stats"
    SLACK_POST_MESSAGE = "/chat.postMessage"
    SLACK_REPLIES = "/conversations.replies"
    SLACK_AUTH_TEST = "/auth.test"


class Commands:
    SUMMARIZE = "!summarize"
    HELP = "!help"


class Responses:
    WORKING = "Working on it..."
    WELCOME = (
        "👋 Hello! I'm your AI assistant. I can help you with:\n"
        "• Summarizing threads (use `!summarize` in a thread)\n"
        "• Answering questions (just end with a ? mark)\n"
        "• Finding similar messages"
    )
    HELP = (
        "Available commands:\n"
        "• Ask a question (end with a ? mark)\n"
        "• `!summarize` - Summarize the current thread\n"
        "• `!help` - Show this help message\n"
        "• Say hello"
    )
    MENTION = "Hello! I'm here to help. Use `!summarize` in a thread to get a summary."
    ERROR = "Sorry, I encountered an error processing your request."
    QUESTION_ERROR = (
        "I'm having trouble answering your question right now. Please try again later."
    )
    SUMMARIZE_ERROR = "Error generating summary"
    SUMMARIZE_NO_THREAD = "This command must be used in a thread"
    FAST_TIER_HIT = "I found a similar question in cache! Here's the answer:\n"
    DURABLE_TIER_HIT = "I found a similar question! Here's the answer:\n"

    @staticmethod
    def default(text: str) -> str:
        return (
            f'I received your message: "{text}" '
            "Need help? Try `!help` for a list of commands"
        )
