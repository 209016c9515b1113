from enum import Enum

from code_runner.errors import ValidationError

UNSUPPORTED_LANGUAGE = "Unsupported language."


class Language(str, Enum):
    JAVA = "java"
    PYTHON = "python"
    JAVASCRIPT = "javascript"
    C = "c"
    CPP = "cpp"
    CSHARP = "csharp"

    @classmethod
    def parse(cls, value: str) -> "Language":
        """Case-insensitive lookup; unknown names are a validation failure."""
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError):
            raise ValidationError(
                UNSUPPORTED_LANGUAGE, UNSUPPORTED_LANGUAGE, response_code=203
            )
