"""
LLM Model Wrapper (Google Gemini only)
"""

import json
import re
from typing import Any, Dict, List, Optional

from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_core.messages import HumanMessage

from drishti.config.settings import settings
from drishti.utils.logger import get_logger

logger = get_logger(__name__)


class LLMWrapper:
    """Multimodal Gemini wrapper used by every flow"""

    def __init__(self, model: Optional[str] = None):
        """
        Initialize LLM with Google Gemini

        Args:
            model: Gemini model name (defaults to GEMINI_MODEL)
        """
        self.model = model or settings.GEMINI_MODEL
        logger.info(f"Initializing LLM with model: {self.model}")

        self.llm = ChatGoogleGenerativeAI(
            model=self.model,
            google_api_key=settings.GOOGLE_API_KEY,
            temperature=settings.LLM_TEMPERATURE,
            max_output_tokens=settings.LLM_MAX_OUTPUT_TOKENS,
        )

        logger.info("LLM initialized successfully")

    def generate(self, prompt: str, image_data_uris: Optional[List[str]] = None) -> str:
        """
        Send a prompt plus zero or more images and return the reply text

        Args:
            prompt: Rendered prompt text
            image_data_uris: Images as base64 data URIs, in prompt order

        Returns:
            Reply text
        """
        message_content: List[Dict[str, Any]] = [{"type": "text", "text": prompt}]
        for data_uri in image_data_uris or []:
            message_content.append({"type": "image_url", "image_url": data_uri})

        logger.debug(f"Gemini input prompt: {prompt}")
        logger.debug(f"Gemini input images: {len(image_data_uris or [])}")

        response = self.llm.invoke([HumanMessage(content=message_content)])
        content = self.extract_text(response.content)

        logger.debug(f"Gemini LLM output: '{content}'")
        return content

    def generate_json(
        self, prompt: str, image_data_uris: Optional[List[str]] = None
    ) -> Dict[str, Any]:
        """
        Same as generate() but parses the reply as a JSON object

        Raises:
            ValueError: If the reply is not a JSON object
        """
        content = self.generate(prompt, image_data_uris)
        return self.parse_json(content)

    @staticmethod
    def extract_text(content: Any) -> str:
        """Handle response content - it could be a string or list of parts"""
        if isinstance(content, list):
            text = ""
            for part in content:
                if isinstance(part, dict) and "text" in part:
                    text += part["text"]
                elif isinstance(part, str):
                    text += part
            return text.strip()
        return str(content).strip()

    @staticmethod
    def parse_json(content: str) -> Dict[str, Any]:
        """
        Parse a JSON object out of a model reply, tolerating code fences

        Raises:
            ValueError: If no JSON object can be parsed
        """
        content = content.strip()

        # Remove markdown code blocks if present
        if content.startswith("```"):
            match = re.search(r'```(?:json)?\s*(\{.*\})\s*```', content, re.DOTALL)
            if match:
                content = match.group(1)
            else:
                content = re.sub(r'```(?:json)?', '', content).strip()

        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse JSON response: {e}")
            logger.error(f"Response content: {content[:500]}")
            raise ValueError(f"Model reply is not valid JSON: {e}") from e

        if not isinstance(parsed, dict):
            raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
        return parsed
