"""
Flow base class: a named request/response wrapper around one Gemini call
with pydantic input/output schemas
"""
import json
from typing import Any, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ValidationError

from drishti.models.llm_model import LLMWrapper
from drishti.utils.logger import get_logger

logger = get_logger(__name__)


class FlowError(RuntimeError):
    """Raised when a flow cannot produce a valid output"""

    def __init__(self, flow_name: str, message: str):
        super().__init__(f"{flow_name}: {message}")
        self.flow_name = flow_name


class Flow:
    """
    Base flow

    Subclasses set name, input_model, output_model and prompt_template, and
    describe how to fill the prompt (prompt_variables) and which images to
    attach (image_data_uris).
    """

    name: str = ""
    input_model: Type[BaseModel] = BaseModel
    output_model: Type[BaseModel] = BaseModel
    prompt_template: str = ""

    def __init__(self, llm: Optional[LLMWrapper] = None):
        self._llm = llm

    @property
    def llm(self) -> LLMWrapper:
        # Created on first use so flows can be registered without an API key
        if self._llm is None:
            self._llm = LLMWrapper()
        return self._llm

    def __call__(self, payload: Union[BaseModel, Dict[str, Any]]) -> BaseModel:
        """
        Validate input, run the flow and validate output

        Raises:
            pydantic.ValidationError: If the input does not match input_model
            FlowError: If the model call fails or its reply is invalid
        """
        if isinstance(payload, self.input_model):
            data = payload
        elif isinstance(payload, BaseModel):
            data = self.input_model.model_validate(payload.model_dump())
        else:
            data = self.input_model.model_validate(payload)

        logger.info(f"Running flow {self.name}")

        try:
            output = self.run(data)
        except FlowError:
            raise
        except ValidationError as e:
            logger.error(f"{self.name} returned output that does not match its schema: {e}")
            raise FlowError(self.name, f"invalid model output: {e}") from e
        except Exception as e:
            logger.error(f"{self.name} failed: {e}")
            raise FlowError(self.name, str(e)) from e

        logger.info(f"Flow {self.name} completed")
        return output

    def run(self, data: BaseModel) -> BaseModel:
        prompt = self.render_prompt(data)
        raw = self.llm.generate_json(prompt, self.image_data_uris(data))
        return self.output_model.model_validate(raw)

    def render_prompt(self, data: BaseModel) -> str:
        return self.prompt_template.format(
            output_schema=json.dumps(self.output_model.model_json_schema(), indent=2),
            **self.prompt_variables(data),
        )

    def prompt_variables(self, data: BaseModel) -> Dict[str, Any]:
        return {}

    def image_data_uris(self, data: BaseModel) -> List[str]:
        return []
