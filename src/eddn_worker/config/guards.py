"""Loading of the producing-software allow/deny list."""

from __future__ import annotations

from importlib import resources
from typing import TYPE_CHECKING, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigurationError

if TYPE_CHECKING:
    from pathlib import Path

DEFAULT_GUARDS_RESOURCE: Final[str] = "software_guards.json"
ANY_VERSION: Final[str] = "0.0.0"


class GuardModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class SoftwareGuard(GuardModel):
    software_name: str = Field(alias="softwareName")
    software_version: str = Field(default=ANY_VERSION, alias="softwareVersion")
    all_versions: bool = Field(default=False, alias="allVersions")


class SoftwareGuards(GuardModel):
    allowed: tuple[SoftwareGuard, ...] = ()
    disallowed: tuple[SoftwareGuard, ...] = ()


def load_software_guards(path: Path | None = None) -> SoftwareGuards:
    """Read the guard list from ``path`` or from the bundled default."""

    try:
        if path is None:
            text = (
                resources.files("eddn_worker.config")
                .joinpath(DEFAULT_GUARDS_RESOURCE)
                .read_text(encoding="utf-8")
            )
        else:
            text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Unable to read software guards: {exc}") from exc

    try:
        return SoftwareGuards.model_validate_json(text)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid software guards document: {exc}") from exc
