"""Prompt construction for word information requests.

Both providers speak the chat-completions format, so they share the same
system and user messages.
"""

from typing import Dict, List

from flashai.domain.models.common import language_name

SYSTEM_PROMPT = (
    "You are a multilingual language learning assistant. Always respond with valid JSON "
    "containing comprehensive word information. For the \"ja\" field in translations and the "
    "\"example_translation\" field you MUST provide actual Japanese (hiragana, katakana or kanji), "
    "NOT English text. Example: \"hello\" -> \"こんにちは\", \"run\" -> \"走る\""
)

RESPONSE_SCHEMA = """{
  "meaning": "the meaning/definition of the word",
  "pronunciation": "phonetic pronunciation guide",
  "example": "example sentence using the word",
  "example_translation": "Japanese translation of the example sentence",
  "english_example": "English translation of the example sentence",
  "notes": "usage notes, common mistakes, or cultural context",
  "wordClass": "noun/verb/adjective/adverb/other",
  "translations": {"en": "", "ja": "", "es": "", "fr": "", "de": "", "zh": "", "ko": "", "it": ""},
  "multilingualExamples": {"es": "", "fr": "", "de": "", "zh": "", "ko": "", "it": ""},
  "conjugations": {"present": "...", "past": "...", "gerund": "...", "pastParticiple": "..."},
  "genderNumberChanges": {
    "masculine": {"singular": "...", "plural": "..."},
    "feminine": {"singular": "...", "plural": "..."}
  }
}"""

def build_word_info_prompt(word: str, language: str) -> str:
    """Builds the user prompt asking for information about `word`."""
    name = language_name(language)
    return f"""Generate comprehensive language learning information for the word "{word}".
This word is being studied in the context of {name} language learning.
Consider "{word}" as a {name} word first, unless it is clearly from another language.

Return a JSON object with the following structure:
{RESPONSE_SCHEMA}

IMPORTANT:
- The "example" field MUST be in {name}
- All translations must be accurate
- For nouns/adjectives in gendered languages: fill "genderNumberChanges" with forms including articles
- For verbs: fill "conjugations" with all relevant tenses and forms
- Return valid JSON only
"""

def build_messages(word: str, language: str) -> List[Dict[str, str]]:
    return [
        {'role': 'system', 'content': SYSTEM_PROMPT},
        {'role': 'user', 'content': build_word_info_prompt(word, language)},
    ]
