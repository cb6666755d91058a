"""Prompt templates for roleplay tutoring, dictionary lookup and scenario generation."""

from collections.abc import Sequence

from fluent_tutor.models.chat import ChatMessage, Role
from fluent_tutor.models.scenario import ChatMode, Scenario

TURN_FIELDS = """\
Respond ONLY with a JSON object:
{{
    "correction": "<corrected version of the user's sentence, or empty if perfect>",
    "explanation": "<concise grammar note on the correction, or empty>",
    "roleplay_response": "<your in-character reply in {target}>",
    "translation": "<{native} translation of roleplay_response>",
    "suggested_vocab": [
        {{"word": "<useful word from roleplay_response>", "definition": "<short definition in context>"}}
    ]{guided_fields}
}}
Suggest 1 or 2 difficult or useful words in suggested_vocab.
"""

GUIDED_FIELDS = """,
    "reference_translation": "<ideal {target} rendering of the task, if the user made ANY mistake or was off-topic>",
    "guided_task": "<a NEW task in {native} for the user's next turn>\""""

FREE_SYSTEM_PROMPT = """\
You are an expert {target} tutor conducting a free-flow roleplay.
Scenario: {title} ({ai_role} vs {user_role}).

1. Analyze the user's grammar and naturalness. Correct if needed.
2. Respond naturally as {ai_role}.
3. Provide a {native} translation of your reply.
4. Suggest vocabulary.

"""

GUIDED_SYSTEM_PROMPT = """\
You are a {target} tutor conducting a "Translation Challenge".
Scenario: {title}.

The user was given a task in {native} to say in {target} (the last AI \
message's "Task given").

1. **Check compliance**: did the user's input match the meaning of the task?
2. **Feedback**:
   - correction: if there are errors, the corrected sentence; if off-topic, \
the ideal {target} rendering of the task; if perfect, leave empty.
   - explanation: explain the mistake or note that they did not follow the task.
   - reference_translation: the standard answer for the task whenever the \
user made ANY mistake or was off-topic.
3. **Roleplay**: respond naturally as {ai_role}. Keep the conversation \
flowing even after a mistake, or gently ask for clarification.
4. **Next step**: set a NEW, different guided_task in {native} for the \
user's next turn. Make it follow logically.

"""

GUIDED_INTRO_PROMPT = """\
You are a {target} tutor setting up a "Translation Challenge" roleplay.
Scenario: {title}
Role: {ai_role}
User Role: {user_role}

1. Introduce the scenario briefly in {target}.
2. Give the user their FIRST task in {native} (what they should say in {target}).

Respond ONLY with a JSON object:
{{
    "roleplay_response": "<the introduction>",
    "translation": "<{native} translation of the introduction>",
    "guided_task": "<the first task in {native}>"
}}
"""

LOOKUP_PROMPT = """\
Provide a detailed dictionary entry for the word: "{word}".
Context where it appeared: "{context}".

Respond ONLY with a JSON object:
{{
    "phonetic": "<IPA pronunciation, e.g. /əˈplɔːz/>",
    "part_of_speech": "<e.g. n., v., adj.>",
    "native_definition": "<{native} meaning relevant to the context>",
    "example_sentence": "<{target} example sentence>",
    "example_translation": "<{native} translation of the example>",
    "roots": "<brief etymology or memory aid>",
    "synonyms": ["<3-4 similar words>"]
}}
"""

SCENARIO_PROMPT = """\
Create a {target} roleplay scenario based on this topic: "{topic}".

Respond ONLY with a JSON object:
{{
    "title": "<short title>",
    "description": "<one sentence>",
    "emoji": "<one emoji>",
    "ai_role": "<role you play>",
    "user_role": "<role the learner plays>",
    "initial_message": "<your opening line in {target}>",
    "difficulty": "Beginner" | "Intermediate" | "Advanced"
}}
"""


def build_turn_system_prompt(
    scenario: Scenario, mode: ChatMode, native: str, target: str
) -> str:
    template = GUIDED_SYSTEM_PROMPT if mode == ChatMode.GUIDED else FREE_SYSTEM_PROMPT
    guided_fields = (
        GUIDED_FIELDS.format(native=native, target=target) if mode == ChatMode.GUIDED else ""
    )
    header = template.format(
        title=scenario.title,
        ai_role=scenario.ai_role,
        user_role=scenario.user_role,
        native=native,
        target=target,
    )
    return header + TURN_FIELDS.format(native=native, target=target, guided_fields=guided_fields)


def format_history(history: Sequence[ChatMessage], scenario: Scenario) -> str:
    """Render prior messages as speaker-prefixed lines, tagging issued tasks."""
    lines = []
    for message in history:
        speaker = "User" if message.role == Role.USER else f"AI ({scenario.ai_role})"
        line = f"{speaker}: {message.text}"
        if message.guided_task:
            line += f" [Task given: {message.guided_task}]"
        lines.append(line)
    return "\n".join(lines)


def build_turn_user_prompt(
    history: Sequence[ChatMessage], user_text: str, scenario: Scenario
) -> str:
    parts = []
    formatted = format_history(history, scenario)
    if formatted:
        parts.append(formatted)
    parts.append(f"User: {user_text}")
    parts.append(f"Respond as AI ({scenario.ai_role}).")
    return "\n".join(parts)


def build_guided_intro_prompt(scenario: Scenario, native: str, target: str) -> str:
    return GUIDED_INTRO_PROMPT.format(
        title=scenario.title,
        ai_role=scenario.ai_role,
        user_role=scenario.user_role,
        native=native,
        target=target,
    )


def build_lookup_prompt(word: str, context: str, native: str, target: str) -> str:
    return LOOKUP_PROMPT.format(word=word, context=context, native=native, target=target)


def build_scenario_prompt(topic: str, target: str) -> str:
    return SCENARIO_PROMPT.format(topic=topic, target=target)
