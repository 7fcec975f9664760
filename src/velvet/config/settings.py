"""Application settings."""

from typing import Literal

from pydantic import BaseModel, ConfigDict

OutputFormat = Literal["terminal", "json", "markdown", "github"]


class Settings(BaseModel):
  """Application configuration."""

  model_config = ConfigDict(extra="forbid")

  base: str = "main"
  reviewfile: str | None = None
  github: bool = True
  format: OutputFormat = "terminal"
  post: bool = True
