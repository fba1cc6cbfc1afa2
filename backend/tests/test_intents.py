"""
Tests for the command/intent parser and voice guidance.
"""

import pytest


class TestParse:

    def test_remove_the_wall(self):
        from intents.parser import Command, IntentParser

        intent = IntentParser().parse("remove the wall")
        assert intent.command == Command.REMOVE_WALL
        assert intent.confidence >= 0.7
        assert intent.confidence == pytest.approx(0.85)

    @pytest.mark.parametrize("utterance,command", [
        ("Take a photo", "capture_photo"),
        ("please analyze this room", "analyze_room"),
        ("add a wall here", "add_wall"),
        ("show me the options", "show_options"),
        ("what would this look like?", "preview_changes"),
        ("start a new project", "start_project"),
        ("save this design", "save_design"),
        ("go back", "go_back"),
        ("cancel that", "cancel"),
        ("sure", "confirm"),
        ("nope", "deny"),
    ])
    def test_command_table(self, utterance, command):
        from intents.parser import IntentParser

        assert IntentParser().parse(utterance).command.value == command

    def test_first_declared_pattern_wins(self):
        from intents.parser import Command, IntentParser

        assert IntentParser().parse("ok, remove the wall").command == Command.REMOVE_WALL

    def test_no_match_is_none(self):
        from intents.parser import IntentParser

        parser = IntentParser()
        assert parser.parse("what's for dinner") is None
        assert parser.parse("   ") is None


class TestParameters:

    def test_style_from_vocabulary(self):
        from intents.parser import Command, IntentParser

        intent = IntentParser().parse("change to modern style")
        assert intent.command == Command.CHANGE_STYLE
        assert intent.parameters == {"style": "modern"}

    def test_first_money_token(self):
        from intents.parser import IntentParser

        intent = IntentParser().parse("calculate the cost, budget is $12,500 or 15000")
        assert intent.parameters == {"budget": 12500.0}

    def test_wall_attributes(self):
        from intents.parser import IntentParser

        intent = IntentParser().parse("remove a wall, the exterior load-bearing one")
        assert intent.parameters == {"load_bearing": True, "wall_type": "exterior"}

    def test_style_missing_leaves_parameters_empty(self):
        from intents.parser import IntentParser

        assert IntentParser().parse("change the style").parameters == {}


class TestConfidence:

    def test_short_utterance_penalized(self):
        from intents.parser import IntentParser

        assert IntentParser().parse("ok").confidence == pytest.approx(0.7)

    def test_long_utterance_penalized(self):
        from intents.parser import IntentParser

        utterance = "yes " + "and then some more words " * 5
        assert len(utterance) > 100
        assert IntentParser().parse(utterance).confidence == pytest.approx(0.7)

    def test_vocabulary_bonus_is_capped(self):
        from intents.parser import IntentParser

        intent = IntentParser().parse("yes, the kitchen wall, floor, ceiling, window and door")
        assert intent.confidence == pytest.approx(1.0)

    def test_always_in_range(self):
        from intents.parser import score_confidence

        for text in ("a", "wall " * 50, "remove the wall"):
            assert 0.1 <= score_confidence(text) <= 1.0


class TestGuidance:

    def test_known_stage(self):
        from intents.guidance import guidance_prompt

        assert guidance_prompt("camera_ready").startswith("I can see your camera is ready")

    def test_unknown_stage_gets_default(self):
        from config import DEFAULT_GUIDANCE
        from intents.guidance import guidance_prompt

        assert guidance_prompt("somewhere_else") == DEFAULT_GUIDANCE

    def test_stage_list(self):
        from intents.guidance import GUIDANCE_STAGES

        assert GUIDANCE_STAGES == (
            "camera_ready", "photo_taken", "analysis_complete", "modification_ready", "error",
        )
