import re

from natsbasic.errors import ConfigError

SINGLE_TOKEN_WILDCARD = "*"
TAIL_WILDCARD = ">"
TOKEN_SEPARATOR = "."

RE_WHITESPACE = re.compile(r"\s")


def has_wildcards(subject: str) -> bool:
    return any(
        token in (SINGLE_TOKEN_WILDCARD, TAIL_WILDCARD)
        for token in subject.split(TOKEN_SEPARATOR)
    )


def validate_subject(subject: str, allow_wildcards: bool = True) -> str:
    """
    Check that `subject` is a well formed NATS subject.

    Tokens are separated by dots and must be non-empty. The wildcards
    ``*`` (exactly one token) and ``>`` (one or more trailing tokens) are
    only recognized as whole tokens, and ``>`` must be the last one.
    Publishers must always use a literal subject.
    """
    if not subject:
        raise ConfigError("subject must not be empty.")
    if RE_WHITESPACE.search(subject):
        raise ConfigError(f"subject {subject!r} must not contain whitespace.")

    tokens = subject.split(TOKEN_SEPARATOR)
    for position, token in enumerate(tokens, start=1):
        if not token:
            raise ConfigError(f"subject {subject!r} contains an empty token.")
        if token not in (SINGLE_TOKEN_WILDCARD, TAIL_WILDCARD):
            continue
        if not allow_wildcards:
            raise ConfigError(f"wildcards are not allowed when publishing, got {subject!r}.")
        if token == TAIL_WILDCARD and position != len(tokens):
            raise ConfigError(f"'>' must be the last token of subject {subject!r}.")
    return subject
