"""Command and value nodes produced by the line parser."""

from typing import Annotated
from typing import Literal as TypingLiteral

from pydantic import BaseModel, ConfigDict, Field

U32_MAX = 2**32 - 1

IDENTIFIER_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*$"


# Values - discriminated union, frozen so equal values compare and hash equal
class Str(BaseModel):
    """A quoted string, stored with its escapes already decoded."""

    model_config = ConfigDict(frozen=True)

    type: TypingLiteral["str"] = "str"
    text: str


class Unsigned(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: TypingLiteral["unsigned"] = "unsigned"
    n: int = Field(ge=0, le=U32_MAX)


Value = Annotated[Str | Unsigned, Field(discriminator="type")]


# Commands
class Empty(BaseModel):
    """Blank line."""

    model_config = ConfigDict(frozen=True)

    type: TypingLiteral["empty"] = "empty"


class Assignment(BaseModel):
    """`let name = value`."""

    model_config = ConfigDict(frozen=True)

    type: TypingLiteral["assignment"] = "assignment"
    name: str = Field(pattern=IDENTIFIER_PATTERN)
    value: Value


class Quit(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: TypingLiteral["quit"] = "quit"


Command = Annotated[Empty | Assignment | Quit, Field(discriminator="type")]
