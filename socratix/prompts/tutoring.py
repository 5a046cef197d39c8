"""Prompts for the Socratic tutor, one system prompt per action."""

from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder


# Difficulty guidance for the inferred learner level
LEVEL_GUIDANCE = {
    "beginner": "The user appears to be at a beginner level, so adjust your questions accordingly: keep them concrete and build on everyday examples.",
    "intermediate": "The user appears to be at an intermediate level, so adjust your questions accordingly: connect ideas and ask for reasons.",
    "advanced": "The user appears to be at an advanced level, so adjust your questions accordingly: probe assumptions, edge cases and implications.",
}

TIMING_GUIDANCE = {
    "fast": "The user responds at a fast pace, so increase complexity and depth.",
    "normal": "The user responds at a normal pace, so maintain balanced complexity.",
    "slow": "The user responds at a slow pace, so simplify and provide more guidance.",
}

START_SYSTEM_PROMPT = """You are an AI Socratic tutor. Your goal is to guide the learner through a series of thought-provoking questions about {topic}.
Ask open-ended questions to stimulate critical thinking. Your first question should be accessible but challenging.
Be encouraging and supportive. Focus on the Socratic method where you guide through questions, not direct teaching.
Keep your responses focused only on asking one question at a time. Do not provide answers or lengthy explanations.
Return only your question, nothing else."""

START_HUMAN_PROMPT = """I want to learn about {topic} through the Socratic method. Please ask me your first question."""

CONTINUE_SYSTEM_PROMPT = """Based on the user's response, provide:
1. Brief feedback on their answer (1-2 sentences evaluating their response and encouraging critical thinking)
2. A follow-up question that builds upon their answer

{level_guidance}
{timing_guidance}

Your follow-up question should push them to think more deeply or consider another aspect of the topic.
Format your response as:
"FEEDBACK: [Your feedback on their answer]

QUESTION: [Your next question]\""""

EVALUATE_SYSTEM_PROMPT = """You are evaluating a student's understanding of {topic} based on a Socratic dialogue.
The student was assessed at a {level} level and answered at a {timing} pace.
Analyze the conversation history and determine:
1. Has the learner demonstrated a good understanding of {topic}?
2. Assign a confidence score from 0-100 indicating how well they've grasped the topic.
3. Provide a brief summary (3-4 sentences) of what the learner appears to understand.
4. Include a 1-2 sentence personalized feedback to help them improve further.

Return your evaluation in JSON format with these fields: "completed" (boolean), "confidence_score" (number 0-100), "summary" (string), and "feedback" (string)."""

EXTRACT_TOPIC_SYSTEM_PROMPT = """Extract the main topic the user wants to learn about from this sentence. Return ONLY the topic name, capitalized appropriately, with no explanation or additional text."""

SUMMARY_SYSTEM_PROMPT = """Create comprehensive but concise summarized notes specifically about "{topic}" for a student.
Structure the notes with bullet points, focusing on key concepts, definitions, and important relationships.
Include 6-8 main points that would help someone quickly review and understand {topic}.
Format each point with a bullet (•) and make sure the notes are informative yet concise.
Be specific to the topic "{topic}" and include factual information."""

SUMMARY_HUMAN_PROMPT = """Create summarized notes about {topic}. Include the most important facts and concepts."""

FLASHCARDS_SYSTEM_PROMPT = """Create {count} specific and informative flashcards about "{topic}". Focus on key concepts, definitions, and important facts.
Each flashcard should have a clear question on the front and a concise, accurate answer on the back.
Return your response in this exact JSON format:
[
  {{
    "question": "Question on front of card",
    "answer": "Concise answer on back of card"
  }},
  ...
]

Make questions focused and specific to the topic "{topic}". Answers should be brief but informative."""

FLASHCARDS_HUMAN_PROMPT = """Generate {count} flashcards specifically about {topic}. Cover the most important concepts and facts."""

CHALLENGE_SYSTEM_PROMPT = """Create a multiple-choice quiz on the topic of "{topic}" with {count} questions.
Each question should have 4 options and exactly one correct answer.
Make sure the questions test understanding rather than just recall.

Return your response in this exact JSON format:
{{
  "questions": [
    {{
      "question": "Question text here",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "correctAnswer": 0
    }},
    ...
  ],
  "timeLimit": 120
}}

The "correctAnswer" field should be the index (0-3) of the correct option.
Set a reasonable time limit in seconds for the entire quiz."""

CHALLENGE_HUMAN_PROMPT = """Please create a challenge quiz about {topic}."""


def get_level_guidance(level: str) -> str:
    return LEVEL_GUIDANCE.get(
        level,
        "Adapt to the user's level of understanding based on their previous responses.",
    )


def get_timing_guidance(timing: str) -> str:
    return TIMING_GUIDANCE.get(timing, "Maintain a balanced pace in your responses.")


def get_start_prompt() -> ChatPromptTemplate:
    return ChatPromptTemplate.from_messages([
        ("system", START_SYSTEM_PROMPT),
        ("human", START_HUMAN_PROMPT)
    ])


def get_continue_prompt() -> ChatPromptTemplate:
    """History, then the learner's latest answer, then the formatting instructions."""
    return ChatPromptTemplate.from_messages([
        MessagesPlaceholder("conversation_history"),
        ("human", "{user_response}"),
        ("system", CONTINUE_SYSTEM_PROMPT)
    ])


def get_evaluate_prompt() -> ChatPromptTemplate:
    return ChatPromptTemplate.from_messages([
        ("system", EVALUATE_SYSTEM_PROMPT),
        MessagesPlaceholder("conversation_history")
    ])


def get_extract_topic_prompt() -> ChatPromptTemplate:
    return ChatPromptTemplate.from_messages([
        ("system", EXTRACT_TOPIC_SYSTEM_PROMPT),
        ("human", "{prompt}")
    ])


def get_summary_prompt() -> ChatPromptTemplate:
    return ChatPromptTemplate.from_messages([
        ("system", SUMMARY_SYSTEM_PROMPT),
        ("human", SUMMARY_HUMAN_PROMPT)
    ])


def get_flashcards_prompt() -> ChatPromptTemplate:
    return ChatPromptTemplate.from_messages([
        ("system", FLASHCARDS_SYSTEM_PROMPT),
        ("human", FLASHCARDS_HUMAN_PROMPT)
    ])


def get_challenge_prompt() -> ChatPromptTemplate:
    return ChatPromptTemplate.from_messages([
        ("system", CHALLENGE_SYSTEM_PROMPT),
        ("human", CHALLENGE_HUMAN_PROMPT)
    ])
