from .prompts import PromptTemplate, ProductDigestTemplate

__all__ = ["PromptTemplate", "ProductDigestTemplate"]
