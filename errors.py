"""Error types raised while loading and playing sprite animations."""


class AnimationError(Exception):
    """Base class for all sprite-sequencer errors."""


class MalformedEncoding(AnimationError, ValueError):
    """A sequence code or cue string could not be parsed.

    ``text`` is the offending substring, ``encoding`` the whole string
    it was found in.
    """

    def __init__(self, reason: str, text: str, encoding: str | None = None) -> None:
        self.reason = reason
        self.text = text
        self.encoding = text if encoding is None else encoding
        super().__init__(f"{reason}: {text!r}")


class InvalidDefinition(AnimationError):
    """An animation definition failed validation at load time."""


class DuplicateAnimation(AnimationError):
    """An animation with the same name is already registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Animation already registered: {name!r}")


class AnimationNotFound(AnimationError, LookupError):
    """No animation is registered under the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Could not find animation: {name!r}")
