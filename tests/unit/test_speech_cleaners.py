"""Unit tests for spoken-text cleaning rules."""

from __future__ import annotations

from contentpipe.text.cleaners import (
    CollapseLinks,
    InsertSentencePauses,
    NormalizeSpeechWhitespace,
    RemoveCodeBlocks,
    SpeechTextCleaner,
)


def test_default_cleaner_strips_markdown_for_narration() -> None:
    """The default rule chain should remove markup and keep paragraph breaks."""

    text = (
        "## Weekly recap\n\n"
        "- **Ethereum** shipped an upgrade.\n"
        "- Read [the notes](https://example.com/notes) for `details`.\n\n"
        "```python\nprint('skip me')\n```\n\n"
        "Fees   dropped. Usage grew."
    )

    cleaned = SpeechTextCleaner().clean(text)

    assert cleaned == (
        "Weekly recap\n\n"
        "Ethereum shipped an upgrade. ... Read the notes for details.\n\n"
        "Fees dropped. ... Usage grew."
    )


def test_code_block_rule_unwraps_inline_code_only() -> None:
    """Fenced blocks should vanish while inline code keeps its text."""

    assert RemoveCodeBlocks().apply("Run `make`.\n```\nrm -rf /\n```") == "Run make.\n"


def test_link_and_whitespace_rules_are_composable() -> None:
    """Custom rule lists should run in the given order only."""

    cleaner = SpeechTextCleaner(rules=[CollapseLinks(), NormalizeSpeechWhitespace()])

    assert cleaner.clean("See  [docs](http://x)\n\n\n\nnow") == "See docs\n\nnow"


def test_sentence_pauses_require_capitalized_follow_up() -> None:
    """Pauses should not be inserted before lowercase continuations or numbers."""

    rule = InsertSentencePauses()

    assert rule.apply("Done. Next step.") == "Done. ... Next step."
    assert rule.apply("v1. then 2. 3") == "v1. then 2. 3"
