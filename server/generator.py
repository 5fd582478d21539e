# =============================================================================
# Scan to Markdown - Gemini Markdown Generator
# =============================================================================
# Provides the MarkdownGenerator class, the relay's only collaborator: it
# hands the decoded file bytes and a fixed instruction prompt to a Gemini
# model and returns whatever text comes back.  The text is not parsed or
# validated as markdown.
# =============================================================================

import logging

import google.generativeai as genai

logger = logging.getLogger(__name__)

MARKDOWN_PROMPT = (
    "Convert this image or document to markdown. If there is a diagram or "
    "picture, describe it in markdown format. Give only the markdown code. "
    "Do not describe anything else other than the content of the pages itself. "
    "Assume only English is used."
)


class GenerationError(Exception):
    """Wraps any failure of the downstream Gemini call."""

    def __init__(self, operation: str, cause: Exception) -> None:
        self.operation = operation
        super().__init__(f"gemini {operation} failed: {cause}")
        self.__cause__ = cause


class MarkdownGenerator:
    """
    Gemini client that converts an image or PDF into markdown.

    One ``generate`` call maps to exactly one ``generate_content`` request;
    there is no retry and no timeout beyond the SDK's own.

    Args:
        api_key:    Google API key for the Generative Language API.
        model_name: Gemini model identifier (e.g., "gemini-2.0-flash-exp").
        prompt:     Instruction sent alongside the file.
    """

    def __init__(self, api_key: str, model_name: str, prompt: str = MARKDOWN_PROMPT):
        self._model_name = model_name
        self._prompt = prompt
        genai.configure(api_key=api_key)
        self._model = genai.GenerativeModel(model_name)
        logger.info("Gemini generator ready (model=%s)", model_name)

    @property
    def model_name(self) -> str:
        return self._model_name

    def build_contents(self, data: bytes, mime_type: str) -> list:
        """
        Assemble the request contents: an inline binary part, then the prompt.

        Args:
            data:      Raw file bytes.
            mime_type: Media type declared for ``data``.

        Returns:
            list: Content parts accepted by ``generate_content``.
        """
        return [
            {"mime_type": mime_type, "data": data},
            self._prompt,
        ]

    async def generate(self, data: bytes, mime_type: str) -> str:
        """
        Ask the model to render the file as markdown.

        Args:
            data:      Raw file bytes (image or PDF).
            mime_type: Media type declared for ``data``.

        Returns:
            str: The model's text output, verbatim.

        Raises:
            GenerationError: On any API, network, or empty-response failure.
        """
        logger.debug(
            "Sending %d bytes (%s) to %s", len(data), mime_type, self._model_name
        )
        try:
            response = await self._model.generate_content_async(
                self.build_contents(data, mime_type)
            )
            # .text raises ValueError when the response has no text part
            text = response.text
        except Exception as exc:
            raise GenerationError("generate", exc) from exc

        if text is None:
            raise GenerationError("generate", ValueError("No text content in Gemini response"))
        return text
