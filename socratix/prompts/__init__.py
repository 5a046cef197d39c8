from socratix.prompts.tutoring import (
    get_challenge_prompt,
    get_continue_prompt,
    get_evaluate_prompt,
    get_extract_topic_prompt,
    get_flashcards_prompt,
    get_level_guidance,
    get_start_prompt,
    get_summary_prompt,
    get_timing_guidance,
)

__all__ = [
    "get_challenge_prompt",
    "get_continue_prompt",
    "get_evaluate_prompt",
    "get_extract_topic_prompt",
    "get_flashcards_prompt",
    "get_level_guidance",
    "get_start_prompt",
    "get_summary_prompt",
    "get_timing_guidance",
]
