from .models import get_openai_model

__all__ = ["get_openai_model"]
