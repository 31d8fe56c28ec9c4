"""Domain model for AI-generated word information.

`WordInfo` is what the service hands back to callers and what the cache
stores. Providers return a loosely structured JSON object; `from_payload`
is the single place where that object is checked and normalized.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from flashai.domain.errors import MalformedResponseError

logger = logging.getLogger(__name__)

WORD_CLASSES = ('noun', 'verb', 'adjective', 'adverb', 'other')


def _text(payload: Mapping[str, Any], *keys: str) -> str:
    """Returns the first non-empty string value among `keys`."""
    for key in keys:
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def _mapping(payload: Mapping[str, Any], key: str) -> Dict[str, Any]:
    value = payload.get(key)
    if isinstance(value, Mapping):
        return dict(value)
    if value is not None:
        logger.debug(f"Dropping non-object '{key}' section from provider payload: {type(value).__name__}")
    return {}


@dataclass
class WordInfo:
    """Structured information about one vocabulary word."""
    word: str
    language: str
    meaning: str
    pronunciation: str = ""
    example: str = ""
    example_translation: str = ""  # Japanese translation of the example
    english_example: str = ""
    notes: str = ""
    word_class: str = "other"
    translations: Dict[str, str] = field(default_factory=dict)
    multilingual_examples: Dict[str, str] = field(default_factory=dict)
    conjugations: Dict[str, Any] = field(default_factory=dict)
    gender_number_changes: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any, word: str, language: str) -> "WordInfo":
        """Builds a WordInfo from a provider's parsed JSON object.

        Args:
            payload: The decoded JSON returned by the provider.
            word: The word that was looked up (as entered, trimmed).
            language: The target language code of the lookup.

        Returns:
            The validated WordInfo.

        Raises:
            MalformedResponseError: If the payload is not an object or has no meaning.
        """
        if not isinstance(payload, Mapping):
            raise MalformedResponseError(
                f"Expected a JSON object for '{word}', got {type(payload).__name__}"
            )

        meaning = _text(payload, 'meaning', 'English')
        if not meaning:
            raise MalformedResponseError(f"Provider response for '{word}' has no meaning")

        word_class = _text(payload, 'wordClass', 'word_class', 'WordClass').lower()
        if word_class not in WORD_CLASSES:
            word_class = 'other'

        translations = {
            str(code): str(text)
            for code, text in _mapping(payload, 'translations').items()
            if isinstance(text, str) and text.strip()
        }

        return cls(
            word=word,
            language=language,
            meaning=meaning,
            pronunciation=_text(payload, 'pronunciation', 'Pronunciation'),
            example=_text(payload, 'example', 'ExampleSentence'),
            example_translation=_text(payload, 'example_translation', 'ExampleSentenceJapanese'),
            english_example=_text(payload, 'english_example', 'ExampleSentenceEnglish'),
            notes=_text(payload, 'notes', 'Notes'),
            word_class=word_class,
            translations=translations,
            multilingual_examples={
                str(code): str(text)
                for code, text in _mapping(payload, 'multilingualExamples').items()
                if isinstance(text, str)
            },
            conjugations=_mapping(payload, 'conjugations'),
            gender_number_changes=_mapping(payload, 'genderNumberChanges'),
        )

    def translation(self, language: str) -> Optional[str]:
        return self.translations.get(language)
