"""SQL generation powered by LangChain and a hosted chat model"""
from typing import Optional
import logging
import re
import uuid

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_core.prompts import PromptTemplate
from langchain_openai import ChatOpenAI

from src.components.error_classifier import classify_llm_error
from src.components.errors import GenerationError, MissingCredentialError

logger = logging.getLogger(__name__)

# Returned by the model when the schema cannot answer the question
UNANSWERABLE_SQL = "SELECT 'Error: Cannot answer question with available schema';"


class SQLPromptBuilder:
    """Builds the system instruction for SQL generation.

    Two fixed templates: one grounded in the loaded schema, one for
    generic mode where no dataset exists.
    """

    _RULES = (
        "Rules:\n"
        "- Output ONLY the raw SQL query. Do not wrap it in markdown code blocks "
        "(e.g., no ```sql).\n"
        "- Do not include any explanation or commentary.\n"
        "- Use SQLite dialect.\n"
    )

    SCHEMA_TEMPLATE = PromptTemplate(
        input_variables=["schema_text"],
        template=(
            "You are an expert SQL query generator.\n"
            "Your task is to convert the user's natural language question into a "
            "valid SQL query based on the provided database schema.\n\n"
            + _RULES
            + "- Use only the tables and columns defined in the schema.\n"
            "- If the question cannot be answered with the given schema, return "
            "\"" + UNANSWERABLE_SQL + "\"\n\n"
            "Database Schema:\n{schema_text}\n"
        ),
    )

    GENERIC_PROMPT = (
        "You are an expert SQL query generator.\n"
        "Your task is to convert the user's natural language question into a "
        "valid SQL query.\n\n"
        + _RULES
        + "- Since no specific schema is provided, generate the most plausible SQL "
        "based on standard conventions or the specific instructions in the prompt.\n"
    )

    @classmethod
    def build_system_prompt(cls, schema_text: str) -> str:
        """Pick the schema-grounded template when a schema is available."""
        if schema_text and schema_text.strip():
            return cls.SCHEMA_TEMPLATE.format(schema_text=schema_text)
        return cls.GENERIC_PROMPT


def create_chat_model(settings) -> Optional[BaseChatModel]:
    """Build the chat model once per process.

    Returns None when no API key is configured; generation then fails with
    MissingCredentialError while the rest of the app keeps working.
    """
    if not settings.has_api_key:
        logger.warning("OPENAI_API_KEY is not set; SQL generation is disabled")
        return None
    return ChatOpenAI(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        base_url=settings.openai_base_url,
        temperature=settings.openai_temperature,
        timeout=settings.openai_timeout,
        max_retries=0,
    )


class SQLGenerator:
    """Generates one SQL statement from a natural language question.

    The chat model is injected so tests can pass a fake and the app can share
    a single client across sessions.
    """

    _FENCE_RE = re.compile(r"```(?:sql)?", re.IGNORECASE)

    def __init__(self, llm: Optional[BaseChatModel]):
        self.llm = llm
        self.prompt_builder = SQLPromptBuilder()

    @property
    def available(self) -> bool:
        return self.llm is not None

    @classmethod
    def _clean_sql(cls, raw: str) -> str:
        """Strip markdown fences the model may still emit."""
        return cls._FENCE_RE.sub("", raw or "").strip()

    def generate(self, user_question: str, schema_text: str = "") -> str:
        """Translate the question into SQL.

        Raises MissingCredentialError without a configured model and
        GenerationError on an empty response; service errors propagate.
        """
        if self.llm is None:
            raise MissingCredentialError("OPENAI_API_KEY environment variable is missing.")

        messages = [
            SystemMessage(content=self.prompt_builder.build_system_prompt(schema_text)),
            HumanMessage(content=user_question),
        ]

        req_id = uuid.uuid4().hex[:8]
        try:
            response = self.llm.invoke(messages)
        except Exception as e:
            category, _ = classify_llm_error(e)
            logger.warning(
                "SQL generation failed: req_id=%s category=%s error_class=%s message=%s",
                req_id,
                category,
                type(e).__name__,
                str(e)[:200],
            )
            raise

        content = response.content
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in content
            )
        sql = self._clean_sql(content)
        if not sql:
            logger.warning("SQL generation failed: req_id=%s category=empty_response", req_id)
            raise GenerationError("The model returned an empty response.")

        logger.info(
            "SQL generated: req_id=%s schema=%s chars=%d",
            req_id,
            bool(schema_text),
            len(sql),
        )
        return sql
