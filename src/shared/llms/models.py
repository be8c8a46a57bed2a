import os

from dotenv import load_dotenv
from langchain_openai import ChatOpenAI

load_dotenv()


# ─── LLM Model Factories ─────────────────────────────────


def get_openai_model(
    model_name: str | None = None,
    api_key: str | None = None,
) -> ChatOpenAI:
    return ChatOpenAI(
        model=model_name or os.getenv("DEFAULT_MODEL", "gpt-5.2-2025-12-11"),
        api_key=api_key or os.getenv("OPENAI_API_KEY"),
    )
