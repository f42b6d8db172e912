"""Unit tests for GenerationOptions persistence."""

import json

import pytest

from promptwizard.core.models import GenerationOptions
from promptwizard.core.settings_store import GenerationOptionsStore, merge_with_defaults


class TestMergeWithDefaults:
    """Tests for filling partial settings."""

    def test_non_mapping_gives_defaults(self):
        assert merge_with_defaults(None) == GenerationOptions()
        assert merge_with_defaults(["x"]) == GenerationOptions()

    def test_camel_and_snake_keys(self):
        options = merge_with_defaults({"llmModel": "llama3", "image_model": "flux"})
        assert options.llm_model == "llama3"
        assert options.image_model == "flux"
        assert options.prompt_template == "illustrious"

    def test_blank_values_use_defaults(self):
        options = merge_with_defaults({"llmModel": "  ", "promptTemplate": 3})
        assert options == GenerationOptions()


class TestGenerationOptionsStore:
    """Tests for load and update."""

    def test_missing_file_loads_defaults(self, temp_dir):
        store = GenerationOptionsStore(temp_dir / "settings.json")
        assert store.load() == GenerationOptions()

    def test_corrupt_file_loads_defaults(self, temp_dir):
        path = temp_dir / "settings.json"
        path.write_text("{not json", encoding="utf-8")
        assert GenerationOptionsStore(path).load() == GenerationOptions()

    def test_update_persists_camel_case(self, temp_dir):
        path = temp_dir / "sub" / "settings.json"
        store = GenerationOptionsStore(path)
        store.load()

        updated = store.update(llmModel="llama3")

        assert updated.llm_model == "llama3"
        assert json.loads(path.read_text(encoding="utf-8")) == {
            "llmModel": "llama3",
            "promptTemplate": "illustrious",
            "imageModel": "sdxl",
        }

    def test_round_trip_through_new_store(self, temp_dir):
        path = temp_dir / "settings.json"
        GenerationOptionsStore(path).update(image_model="flux", prompt_template="pony")
        reloaded = GenerationOptionsStore(path).load()
        assert (reloaded.image_model, reloaded.prompt_template) == ("flux", "pony")

    def test_unknown_key_rejected(self, temp_dir):
        store = GenerationOptionsStore(temp_dir / "settings.json")
        with pytest.raises(ValueError, match="Unknown"):
            store.update(colour="blue")

    def test_blank_value_rejected(self, temp_dir):
        store = GenerationOptionsStore(temp_dir / "settings.json")
        with pytest.raises(ValueError):
            store.update(llm_model=" ")
        assert not (temp_dir / "settings.json").exists()
