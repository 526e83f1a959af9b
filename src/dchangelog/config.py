"""Document configuration for dchangelog.

The configuration is a JSON object with one section per block of the
rendered document::

    {
      "pr": {"link": "..."},
      "jira": {"link": "...", "title": "...", "description": "..."},
      "developer": {"name": "...", "title": "..."},
      "project": {"title": "...", "value": "..."},
      "status": {"title": "..."},
      "sign_approval": {"name": "...", "role": "..."}
    }

Every key is optional. Defaults are applied here, once, so the renderer
never has to fall back on placeholder values of its own.
"""

import logging
from pathlib import Path
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigLoadError

logger = logging.getLogger(__name__)


class _Section(BaseModel):
    """Base for configuration sections: all values are strings."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def coerce_value(cls, v: Any, info) -> Any:
        """Treat null as "use the default" and accept plain numbers."""
        if v is None:
            return cls.model_fields[info.field_name].default
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class PullRequestSection(_Section):
    link: str = ""


class IssueSection(_Section):
    link: str = ""
    title: str = ""
    description: str = ""


class DeveloperSection(_Section):
    name: str = ""
    title: str = Field("Developer", description="Column label for the developer cell")


class ProjectSection(_Section):
    title: str = Field("Project", description="Column label for the project cell")
    value: str = ""


class StatusSection(_Section):
    title: str = Field("", description="Status value shown under the Status column")


class SignApprovalSection(_Section):
    name: str = ""
    role: str = ""


class DocumentConfig(BaseModel):
    """Descriptive metadata rendered into the TSD."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    pr: PullRequestSection = Field(default_factory=PullRequestSection)
    jira: IssueSection = Field(default_factory=IssueSection)
    developer: DeveloperSection = Field(default_factory=DeveloperSection)
    project: ProjectSection = Field(default_factory=ProjectSection)
    status: StatusSection = Field(default_factory=StatusSection)
    sign_approval: SignApprovalSection = Field(default_factory=SignApprovalSection)

    @field_validator("*", mode="before")
    @classmethod
    def null_section_uses_defaults(cls, v: Any) -> Any:
        """A section given as null behaves like a missing section."""
        return {} if v is None else v


def load_config(path: Union[str, Path]) -> DocumentConfig:
    """Read and validate a JSON configuration file."""
    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigLoadError(str(config_path), str(e)) from e

    try:
        config = DocumentConfig.model_validate_json(raw)
    except ValidationError as e:
        reasons = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigLoadError(str(config_path), reasons) from e

    logger.debug(
        "Configuration loaded",
        extra={"path": str(config_path), "developer": config.developer.name},
    )
    return config
