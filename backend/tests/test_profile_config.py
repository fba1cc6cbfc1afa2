"""
Tests for profile loading: defaults, YAML overrides, and secret handling.
"""

from pathlib import Path


class TestLoadProfile:

    def test_missing_file_gives_defaults(self, tmp_path):
        from profile_config import load_profile

        profile = load_profile(tmp_path / "absent.yaml")
        assert profile.system.name == "Remodel Studio"
        assert profile.gateway.min_interval_seconds == 2.0
        assert profile.memory.max_turns == 10
        assert [b.name for b in profile.enabled_backends()] == ["openrouter"]

    def test_yaml_overrides(self, tmp_path, monkeypatch):
        from profile_config import load_profile

        monkeypatch.setenv("LOCAL_KEY", "secret-123")
        path = tmp_path / "profile.yaml"
        path.write_text(
            "system:\n"
            "  name: Test Studio\n"
            "gateway:\n"
            "  min_interval_seconds: 0.5\n"
            "  retries_per_route: 2\n"
            "vision:\n"
            "  scan_stride: 5\n"
            "inference:\n"
            "  backends:\n"
            "    - name: local\n"
            "      type: ollama\n"
            "      endpoint: http://gpu-box:11434\n"
            "      api_key_env: LOCAL_KEY\n"
            "      api_key: from-yaml\n"
        )
        profile = load_profile(path)

        assert profile.system.name == "Test Studio"
        assert profile.gateway.retries_per_route == 2
        assert profile.vision.scan_stride == 5
        assert profile.vision.max_dimension == 1024
        backend = profile.get_backend("local")
        assert backend.type == "ollama"
        assert backend.api_key == "secret-123"
        assert profile.get_backend("openrouter") is None

    def test_unknown_keys_are_ignored(self):
        from profile_config import load_profile_from_dict

        profile = load_profile_from_dict({"memory": {"max_turns": 4, "flavour": "vanilla"},
                                          "unknown_section": {"x": 1}})
        assert profile.memory.max_turns == 4

    def test_invalid_vision_settings_fall_back_to_defaults(self):
        from profile_config import load_profile_from_dict

        profile = load_profile_from_dict({"vision": {
            "scan_stride": 0, "min_run_length": "long", "max_dimension": True,
            "edge_threshold": 35, "door_aspect_ratio": -1,
        }})
        assert profile.vision.scan_stride == 10
        assert profile.vision.min_run_length == 50
        assert profile.vision.max_dimension == 1024
        assert profile.vision.edge_threshold == 35
        assert profile.vision.door_aspect_ratio == 1.5

    def test_invalid_vision_profile_still_analyzes(self):
        from conftest import make_image
        from profile_config import load_profile_from_dict
        from vision.pipeline import VisionPipeline

        profile = load_profile_from_dict({"vision": {"scan_stride": 0}})
        analysis = VisionPipeline(profile.vision).analyze(make_image(120, 160))
        assert analysis.elements

    def test_malformed_yaml_falls_back(self, tmp_path):
        from profile_config import load_profile

        path = tmp_path / "profile.yaml"
        path.write_text("system: [unclosed\n")
        assert load_profile(path).system.name == "Remodel Studio"

    def test_non_mapping_falls_back(self, tmp_path):
        from profile_config import load_profile

        path = tmp_path / "profile.yaml"
        path.write_text("- just\n- a list\n")
        assert load_profile(path).memory.max_turns == 10

    def test_example_profile_loads(self):
        from profile_config import load_profile

        example = Path(__file__).parent.parent.parent / "profile.yaml.example"
        profile = load_profile(example)
        assert profile.system.name == "Remodel Studio"
        assert profile.get_backend("openrouter").enabled
