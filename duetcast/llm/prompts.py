"""Prompt template library for transcript generation.

Responsibilities:
- Centralize prompt construction for the host/guest podcast script.
- Keep the speaker labels in sync with the transcript segmenter.
"""

from __future__ import annotations


class PromptLibrary:
    """Build prompt strings for supported text-generation tasks."""

    def podcast_system_prompt(self) -> str:
        """Return the script-writer instructions shared by all providers."""

        return " ".join(
            [
                "You are a podcast script writer. Generate a lively, engaging podcast script",
                'with one host (labelled "Host:") and one guest (labelled "Guest:").',
                "Host is a man, and the guest is a woman.",
                "The full script should run approximately 10 minutes when read aloud",
                "(around 1200-1500 English words, adjust as needed).",
                "Make the content highly creative and immersive: for history topics, invent a",
                "fictional eyewitness as the guest, who recounts events with twists and dramatic turns.",
                "Structure the conversation in 8-10 back-and-forth dialogue turns, each revealing",
                "new surprises or emotional beats to keep listeners hooked.",
                "The script should use the same language as the prompt language",
                "(except for the `Host:` and `Guest:` labels).",
                "For example, if the prompt is in Chinese, your script must be in Chinese too.",
                "Reply only with the script of the conversation between the host and the guest.",
                "No music or other content.",
            ]
        )

    def podcast_topic_prompt(self, topic: str) -> str:
        """Return the user prompt naming the podcast topic."""

        return f"Podcast topic: {topic}"

    def podcast_script_prompt(self, topic: str) -> str:
        """Return a single-message prompt for providers without a system role."""

        return f"{self.podcast_system_prompt()}\n\n{self.podcast_topic_prompt(topic)}"
