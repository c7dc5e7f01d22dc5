"""
Description:
This module cleans up speech-recognition output before it is treated as an interview
question, and applies the confidence gate that separates usable final results from
interim ones.

Dependencies:
- interview_assistant.constants.regex_patterns: For the precompiled cleanup patterns.
- interview_assistant.schemas.speech.recognition_event: For recognition result schemas.
"""
from typing import Sequence

from interview_assistant.constants.regex_patterns import REGEX_PATTERNS, TRANSCRIPT_CORRECTIONS
from interview_assistant.schemas.speech.recognition_event import RecognitionResult, TranscriptBatch

CONFIDENCE_THRESHOLD = 0.7


def process_transcript(transcript: str) -> str:
    """
    Normalize a raw transcript.

    Collapses whitespace, capitalizes sentence starts, expands colloquialisms such as
    "gonna" and closes the sentence with a period when it has no terminal punctuation.

    Args:
        transcript (str): Raw recognizer output.

    Returns:
        str: The cleaned transcript, or "" when nothing but whitespace was given.

    Example:
        >>> process_transcript("  what are you gonna   do ")
        'What are you going to do.'
    """
    processed = REGEX_PATTERNS['whitespace'].sub(" ", transcript or "").strip()
    if not processed:
        return ""

    processed = REGEX_PATTERNS['sentence_start'].sub(lambda match: match.group(0).upper(), processed)

    for word, replacement in TRANSCRIPT_CORRECTIONS.items():
        processed = REGEX_PATTERNS['corrections'][word].sub(replacement, processed)

    if not REGEX_PATTERNS['terminal_punctuation'].search(processed):
        processed += "."

    return processed


def split_recognition_results(
    results: Sequence[RecognitionResult],
    result_index: int = 0,
    confidence_threshold: float = CONFIDENCE_THRESHOLD,
) -> TranscriptBatch:
    """
    Apply the confidence gate to a batch of recognition results.

    Results before result_index were already handled by an earlier event. Final results
    at or above the threshold are processed and joined into the final transcript; every
    other result contributes its raw text to the interim transcript.

    Args:
        results (Sequence[RecognitionResult]): Results of one recognition event.
        result_index (int): Index of the first changed result.
        confidence_threshold (float): Minimum confidence for a final result.

    Returns:
        TranscriptBatch: The processed final transcript and the interim transcript.
    """
    final_parts = []
    interim = ""
    for result in list(results)[max(result_index, 0):]:
        if result.is_final and result.confidence >= confidence_threshold:
            final_parts.append(process_transcript(result.transcript))
        else:
            interim += result.transcript

    final_transcript = process_transcript(" ".join(final_parts)) if final_parts else ""
    return TranscriptBatch(final_transcript=final_transcript, interim_transcript=interim)
