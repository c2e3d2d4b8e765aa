from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from natsbasic.errors import ConfigError
from natsbasic.subjects import validate_subject


class Mode(StrEnum):
    PUBLISH = "pub"
    SUBSCRIBE = "sub"


class InvocationConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: Mode
    subject: str
    url: str
    payload: str | None = None

    @staticmethod
    def from_flags(
        mode: str | None,
        subject: str | None,
        msg: str | None,
        url: str | None,
    ) -> InvocationConfig:
        if not mode or not subject:
            raise ConfigError("-mode and -subject flags are required.")

        try:
            parsed_mode = Mode(mode)
        except ValueError:
            raise ConfigError(
                f'-mode must be "{Mode.PUBLISH}" or "{Mode.SUBSCRIBE}", got "{mode}".'
            ) from None

        if parsed_mode is Mode.PUBLISH and not msg:
            raise ConfigError(f'-msg flag is required when using -mode "{Mode.PUBLISH}".')

        if not url:
            raise ConfigError("-url must not be empty.")

        validate_subject(subject, allow_wildcards=parsed_mode is Mode.SUBSCRIBE)

        return InvocationConfig(
            mode=parsed_mode,
            subject=subject,
            url=url,
            payload=msg if parsed_mode is Mode.PUBLISH else None,
        )
