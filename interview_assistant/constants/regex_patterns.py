"""
Description: 
This module contains precompiled regex patterns used to clean up speech transcripts.

Dependencies:
- re: Python's built-in regular expression module for pattern matching.
"""

import re

# Colloquialisms the recognizer emits verbatim, mapped to their written form
TRANSCRIPT_CORRECTIONS = {
    'gonna': 'going to',
    'wanna': 'want to',
    'kinda': 'kind of',
    'lemme': 'let me',
    'gimme': 'give me',
    'dunno': "don't know",
    'gotta': 'got to',
    'tryna': 'trying to',
}

# Compile regex patterns once for better performance
REGEX_PATTERNS = {
    'whitespace': re.compile(r"\s+"),
    'sentence_start': re.compile(r"(^\w|\.\s+\w)"),
    'terminal_punctuation': re.compile(r"[.!?]$"),
    'corrections': {
        word: re.compile(rf"\b{word}\b", re.IGNORECASE) for word in TRANSCRIPT_CORRECTIONS
    },
}
