"""
Models package
"""

from drishti.models.llm_model import LLMWrapper

__all__ = ["LLMWrapper"]
