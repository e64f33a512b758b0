"""Request and response shapes for the relay and the Gemini streaming API."""

from pydantic import BaseModel, Field, StrictStr


class PromptRequest(BaseModel):
    """Inbound relay body: ``{"prompt": "..."}``."""

    prompt: StrictStr = Field(min_length=1)


class Part(BaseModel):
    text: str | None = None


class Content(BaseModel):
    role: str | None = None
    parts: list[Part] = Field(default_factory=list)


class Candidate(BaseModel):
    content: Content | None = None


class GenerateContentRequest(BaseModel):
    """Body sent to ``streamGenerateContent``."""

    contents: list[Content]

    @classmethod
    def from_prompt(cls, prompt: str) -> "GenerateContentRequest":
        return cls(contents=[Content(role="user", parts=[Part(text=prompt)])])


class GenerateContentChunk(BaseModel):
    """One element of the streamed JSON array returned by Gemini."""

    candidates: list[Candidate] = Field(default_factory=list)

    @property
    def first_text(self) -> str | None:
        """Text of ``candidates[0].content.parts[0]``, or None when any step is missing."""
        if not self.candidates:
            return None
        content = self.candidates[0].content
        if content is None or not content.parts:
            return None
        return content.parts[0].text or None
