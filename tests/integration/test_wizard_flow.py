"""End-to-end wizard flow: options, selections, enhancement and image."""

import asyncio
import json

from promptwizard.core.errors import LLMClientError
from promptwizard.core.image_backend import ImageBackend, placeholder_url
from promptwizard.core.option_generator import OptionGenerator
from promptwizard.core.prompt_enhancer import PatternEnhancer
from promptwizard.core.wizard import PromptWizard


def _answer_for(category: str) -> str:
    return json.dumps({"options": [
        {"id": f"{category}-{i}", "label": f"{category.title()} {i}", "description": ""}
        for i in range(6)
    ]})


class TestWizardFlow:
    def test_full_run_with_llm(self, mock_llm_client):
        async def fake_generate(model, prompt, **kwargs):
            category = prompt.split("Current step: ", 1)[1].split("\n", 1)[0]
            return _answer_for(category)

        mock_llm_client.generate.side_effect = fake_generate

        async def scenario():
            wizard = PromptWizard(OptionGenerator(mock_llm_client))
            while not wizard.is_complete:
                await wizard.wait_for_pending()
                assert wizard.options_source == "llm"
                assert len(wizard.options) == 6
                if wizard.current_category in ("subject", "style"):
                    wizard.select_option(wizard.options[0])
                else:
                    wizard.skip()
            enhanced = await wizard.enhance(PatternEnhancer())
            image = await ImageBackend(None).generate(wizard.final_prompt)
            return wizard, enhanced, image

        wizard, enhanced, image = asyncio.run(scenario())

        assert wizard.prompt == (
            "Subject 0, in the style of Style 0, high quality, detailed, 8k resolution"
        )
        assert enhanced.startswith("A stunning subject 0 with remarkable detail")
        assert image.image_url == placeholder_url(enhanced)

    def test_offline_llm_walks_catalog(self, mock_llm_client):
        mock_llm_client.generate.side_effect = LLMClientError("connection refused")

        async def scenario():
            wizard = PromptWizard(OptionGenerator(mock_llm_client))
            await wizard.wait_for_pending()
            wizard.select_option(wizard.options[1])
            await wizard.wait_for_pending()
            return wizard

        wizard = asyncio.run(scenario())
        assert wizard.options_source == "fallback"
        assert wizard.selections["subject"].label == "Landscape"
        assert [o.id for o in wizard.options][:3] == ["mountains", "coastline", "rolling-hills"]
        assert wizard.prompt == "Landscape, high quality, detailed, 8k resolution"
