"""Property-based tests for campaign orchestration.

Covers the follow-up question, trend lookup, copy and banner fallbacks.
"""

import asyncio

import pytest
from hypothesis import given, settings, strategies as st

from viralocal.models import CampaignResult, GenericTrend, TemplateMatch
from viralocal.services.campaign import (
    BANNER_SIZES,
    BannerKind,
    CampaignGenerationError,
    CampaignOrchestrator,
)
from viralocal.templates.prompts import (
    COPY_ERROR_PLACEHOLDER,
    QUESTION_EMPTY_FALLBACK,
    QUESTION_ERROR_FALLBACK,
    TREND_EMPTY_FALLBACK,
    TREND_ERROR_FALLBACK,
)
from tests.conftest import PRODUCT_IMAGE, FakeGateway, filled_input, unreachable_gateway


class TestFollowUpQuestionProperties:
    """Property: the follow-up question always resolves to a non-empty string."""

    @settings(max_examples=50)
    @given(
        response=st.one_of(st.none(), st.text(max_size=40)),
        fails=st.booleans(),
    )
    def test_question_is_never_empty(self, response, fails):
        gateway = FakeGateway(text=response, text_fails=fails)
        orchestrator = CampaignOrchestrator(gateway)

        question = asyncio.run(
            orchestrator.fetch_follow_up_question("Bolo de Pote", PRODUCT_IMAGE)
        )

        assert isinstance(question, str)
        assert question.strip()

    def test_empty_and_error_fallbacks_differ(self):
        assert QUESTION_EMPTY_FALLBACK != QUESTION_ERROR_FALLBACK

    @pytest.mark.asyncio
    async def test_empty_response_uses_empty_fallback(self):
        orchestrator = CampaignOrchestrator(FakeGateway(text="   \n"))

        question = await orchestrator.fetch_follow_up_question("Bolo", PRODUCT_IMAGE)

        assert question == QUESTION_EMPTY_FALLBACK

    @pytest.mark.asyncio
    async def test_gateway_error_uses_error_fallback(self):
        orchestrator = CampaignOrchestrator(FakeGateway(text_fails=True))

        question = await orchestrator.fetch_follow_up_question("Bolo", PRODUCT_IMAGE)

        assert question == QUESTION_ERROR_FALLBACK

    @pytest.mark.asyncio
    async def test_response_is_trimmed(self):
        orchestrator = CampaignOrchestrator(FakeGateway(text="  Qual a voltagem?\n"))

        question = await orchestrator.fetch_follow_up_question("Liquidificador", PRODUCT_IMAGE)

        assert question == "Qual a voltagem?"


class TestDesignTrendProperties:
    """Property: template triggers short-circuit the search call."""

    @settings(max_examples=100)
    @given(
        trigger=st.sampled_from(["bolo de pote", "bolo no pote", "bôlo de póte", "BOLO NO POTE"]),
        swap_case=st.lists(st.booleans(), min_size=12, max_size=12),
        prefix=st.sampled_from(["", "Delicioso ", "Promoção: "]),
        suffix=st.sampled_from(["", " de Morango", " ninho com nutella"]),
    )
    def test_trigger_returns_template_without_search(self, trigger, swap_case, prefix, suffix):
        varied = "".join(
            ch.swapcase() if flip else ch
            for ch, flip in zip(trigger, swap_case + [False] * len(trigger))
        )
        gateway = FakeGateway()
        orchestrator = CampaignOrchestrator(gateway)

        trend = asyncio.run(orchestrator.lookup_design_trend(f"{prefix}{varied}{suffix}"))

        assert trend == TemplateMatch("bolo_de_pote_v1")
        assert gateway.grounded_prompts == []

    @pytest.mark.asyncio
    async def test_other_products_are_searched(self):
        gateway = FakeGateway(grounded_text="  minimalist studio, blue palette ")
        orchestrator = CampaignOrchestrator(gateway)

        trend = await orchestrator.lookup_design_trend("Tênis Nike Air")

        assert trend == GenericTrend("minimalist studio, blue palette")
        assert len(gateway.grounded_prompts) == 1
        assert "Tênis Nike Air" in gateway.grounded_prompts[0]

    @pytest.mark.asyncio
    async def test_empty_search_uses_generic_style(self):
        orchestrator = CampaignOrchestrator(FakeGateway(grounded_text=""))

        trend = await orchestrator.lookup_design_trend("Cadeira gamer")

        assert trend == GenericTrend(TREND_EMPTY_FALLBACK)

    @pytest.mark.asyncio
    async def test_failed_search_uses_error_style(self):
        orchestrator = CampaignOrchestrator(FakeGateway(grounded_fails=True))

        trend = await orchestrator.lookup_design_trend("Cadeira gamer")

        assert trend == GenericTrend(TREND_ERROR_FALLBACK)


class TestGenerateCampaignProperties:
    """Property: generate_campaign always returns all four outputs."""

    @settings(max_examples=50)
    @given(
        text_fails=st.booleans(),
        grounded_fails=st.booleans(),
        edit_fails=st.booleans(),
        edited_image=st.one_of(st.none(), st.just(b""), st.just(b"edited")),
        text=st.one_of(st.none(), st.just(""), st.just("Anúncio pronto")),
    )
    def test_result_is_always_complete(
        self, text_fails, grounded_fails, edit_fails, edited_image, text
    ):
        gateway = FakeGateway(
            text=text,
            edited_image=edited_image,
            text_fails=text_fails,
            grounded_fails=grounded_fails,
            edit_fails=edit_fails,
        )
        orchestrator = CampaignOrchestrator(gateway)

        result = asyncio.run(orchestrator.generate_campaign(filled_input()))

        assert isinstance(result, CampaignResult)
        assert result.copy
        assert result.banner_square
        assert result.banner_story
        assert result.banner_design

    @pytest.mark.asyncio
    async def test_missing_image_is_fatal(self):
        orchestrator = CampaignOrchestrator(FakeGateway())

        with pytest.raises(CampaignGenerationError):
            await orchestrator.generate_campaign(filled_input(product_image=None))

    @pytest.mark.asyncio
    async def test_unreachable_gateway_scenario(self):
        """Bolo de pote with no gateway: fixed fallbacks and original images."""
        orchestrator = CampaignOrchestrator(unreachable_gateway())
        campaign_input = filled_input(description="Bolo de Pote de Morango")

        question = await orchestrator.fetch_follow_up_question(
            campaign_input.description, PRODUCT_IMAGE
        )
        result = await orchestrator.generate_campaign(campaign_input)

        assert question == QUESTION_ERROR_FALLBACK
        assert result.copy == COPY_ERROR_PLACEHOLDER
        assert result.banner_square == PRODUCT_IMAGE
        assert result.banner_story == PRODUCT_IMAGE
        assert result.banner_design == PRODUCT_IMAGE

    @pytest.mark.asyncio
    async def test_trend_text_reaches_design_prompt_only(self, gateway, orchestrator):
        """Normal run: trend in the design prompt, clean prompts free of price/contact."""
        campaign_input = filled_input(description="Tênis Nike Air")

        await orchestrator.generate_campaign(campaign_input)

        assert len(gateway.edit_prompts) == 3
        design_prompts = [p for p in gateway.edit_prompts if "Art Director" in p]
        clean_prompts = [p for p in gateway.edit_prompts if "Art Director" not in p]

        assert len(design_prompts) == 1
        assert "minimalist studio, blue palette" in design_prompts[0]
        assert campaign_input.price in design_prompts[0]
        assert campaign_input.contact_phone in design_prompts[0]

        assert len(clean_prompts) == 2
        for prompt in clean_prompts:
            assert campaign_input.price not in prompt
            assert campaign_input.contact_phone not in prompt
            assert "No text overlay" in prompt

    @pytest.mark.asyncio
    async def test_template_prompt_used_for_template_match(self, gateway, orchestrator):
        campaign_input = filled_input(description="Bolo no pote de ninho")

        await orchestrator.generate_campaign(campaign_input)

        design_prompts = [p for p in gateway.edit_prompts if "Art Director" in p]
        assert len(design_prompts) == 1
        assert "Bolo de Pote V1" in design_prompts[0]
        assert f"PEÇA JÁ! {campaign_input.contact_phone}" in design_prompts[0]
        assert gateway.grounded_prompts == []

    @pytest.mark.asyncio
    async def test_one_failed_banner_keeps_the_others(self):
        """Story edit fails, square and design succeed."""
        gateway = FakeGateway(edit_failures=("Instagram Story",))
        orchestrator = CampaignOrchestrator(gateway)

        result = await orchestrator.generate_campaign(filled_input())

        assert result.banner_story == PRODUCT_IMAGE
        assert result.banner_square == b"edited-image"
        assert result.banner_design == b"edited-image"

    @pytest.mark.asyncio
    async def test_copy_prompt_embeds_all_fields(self, gateway, orchestrator):
        campaign_input = filled_input(delivery=False)

        result = await orchestrator.generate_campaign(campaign_input)

        copy_prompts = [p for p in gateway.text_prompts if "Facebook/OLX" in p]
        assert len(copy_prompts) == 1
        for value in (
            campaign_input.description,
            campaign_input.dynamic_answer,
            campaign_input.price,
            campaign_input.location,
            campaign_input.contact_phone,
            "Retirada",
        ):
            assert value in copy_prompts[0]
        assert result.copy == "Qual o sabor?"

    @pytest.mark.asyncio
    async def test_banner_sizes(self, gateway, orchestrator):
        await orchestrator.generate_campaign(filled_input())

        assert sorted(gateway.edit_sizes) == sorted(BANNER_SIZES.values())
        assert BANNER_SIZES[BannerKind.CLEAN_STORY] == "1024x1536"


class StagedGateway(FakeGateway):
    """
    Records when each call starts and ends.

    Calls of one stage (trend + copy, then the three edits) wait until every
    call of that stage has started, so a stage that runs its calls one after
    another times out instead of completing.
    """

    STAGE_SIZES = {"join": 2, "edit": 3}

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.events = []
        self._started = {stage: 0 for stage in self.STAGE_SIZES}
        self._ready = {stage: asyncio.Event() for stage in self.STAGE_SIZES}

    async def _staged(self, stage, name, call):
        self.events.append(("start", name))
        self._started[stage] += 1
        if self._started[stage] == self.STAGE_SIZES[stage]:
            self._ready[stage].set()

        try:
            await asyncio.wait_for(self._ready[stage].wait(), timeout=1)
        except asyncio.TimeoutError:
            self.events.append(("timeout", name))
            raise

        result = await call()
        self.events.append(("end", name))
        return result

    async def generate_text(self, prompt, image=None, mime_type="image/jpeg"):
        parent = super().generate_text
        return await self._staged("join", "copy", lambda: parent(prompt, image, mime_type))

    async def generate_grounded_text(self, prompt, enable_search=True):
        parent = super().generate_grounded_text
        return await self._staged("join", "trend", lambda: parent(prompt, enable_search))

    async def edit_image(self, image, mime_type, prompt, size=None):
        parent = super().edit_image
        return await self._staged("edit", "edit", lambda: parent(image, mime_type, prompt, size))


class TestCampaignOrderingProperties:
    """
    Property: trend and copy run together, both finish before any image
    edit starts, and the three edits run together.
    """

    @pytest.mark.asyncio
    async def test_joins_run_in_two_concurrent_stages(self):
        gateway = StagedGateway()
        orchestrator = CampaignOrchestrator(gateway)

        result = await orchestrator.generate_campaign(filled_input(description="Tênis Nike Air"))

        events = gateway.events
        assert [e for e in events if e[0] == "timeout"] == []

        def positions(kind, names):
            return [i for i, (k, n) in enumerate(events) if k == kind and n in names]

        join_starts = positions("start", {"copy", "trend"})
        join_ends = positions("end", {"copy", "trend"})
        edit_starts = positions("start", {"edit"})
        edit_ends = positions("end", {"edit"})

        assert len(join_starts) == 2 and len(join_ends) == 2
        assert len(edit_starts) == 3 and len(edit_ends) == 3
        # Both join calls are in flight together
        assert max(join_starts) < min(join_ends)
        # No edit starts before the trend and copy are done
        assert max(join_ends) < min(edit_starts)
        # All three edits are in flight together
        assert max(edit_starts) < min(edit_ends)

        assert result.copy == "Qual o sabor?"
        assert result.banner_design == b"edited-image"
