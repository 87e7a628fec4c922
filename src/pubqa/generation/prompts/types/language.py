import re
from enum import Enum

# Hangul syllables, Hangul Jamo, Hangul compatibility Jamo
_HANGUL = re.compile(r"[\uac00-\ud7af\u1100-\u11ff\u3130-\u318f]")


class Language(str, Enum):
    KOREAN = "ko"
    ENGLISH = "en"

    @classmethod
    def detect(cls, text: str) -> "Language":
        """Korean if the text contains any Hangul code point, English otherwise."""
        return cls.KOREAN if _HANGUL.search(text or "") else cls.ENGLISH

    @property
    def label(self) -> str:
        return "Korean" if self is Language.KOREAN else "English"
